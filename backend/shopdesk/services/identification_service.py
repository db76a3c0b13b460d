# Overview: Turn a product photo into a cart action or a new-product offer.

"""
Product Identification Resolver

ORDER OF RESOLUTION:
1. Barcode (BarcodeResolver). An exact match on Product.barcode wins and
   nothing else is called.
2. Visual identification by the recognition service. The guessed name is
   matched case-insensitively (exact equality) against the catalog.
3. No match: offer to register the product. Nothing is written until the
   operator accepts the offer.

A barcode read in step 1 that matched nothing is carried into the offer so
the new product is scannable next time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from ..money import multiply_cents, to_cents
from ..records import Product
from .barcode_service import BarcodeResolver
from .images import CapturedImage
from .recognition_schemas import ProductGuess
from .recognition_service import RecognitionEmpty


logger = logging.getLogger(__name__)

# New products from a visual guess: cost estimated at 60% of the retail guess
ESTIMATED_COST_RATIO = Decimal("0.6")

ACTION_ADD_TO_CART = "ADD_TO_CART"
ACTION_OFFER_NEW_PRODUCT = "OFFER_NEW_PRODUCT"

MATCHED_BY_BARCODE = "barcode"
MATCHED_BY_NAME = "name"


@dataclass(frozen=True)
class ProductProposal:
    """A product the operator may register; not part of the catalog yet."""
    name: str
    price_cents: int
    cost_cents: int
    stock: float = 1
    unit: str = "un"
    barcode: Optional[str] = None
    category: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "price_cents": self.price_cents,
            "cost_cents": self.cost_cents,
            "stock": self.stock,
            "unit": self.unit,
            "barcode": self.barcode,
            "category": self.category,
        }


@dataclass(frozen=True)
class IdentificationResult:
    action: str
    product: Optional[Product] = None
    proposal: Optional[ProductProposal] = None
    barcode: Optional[str] = None
    matched_by: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "product": self.product.to_dict() if self.product else None,
            "proposal": self.proposal.to_dict() if self.proposal else None,
            "barcode": self.barcode,
            "matched_by": self.matched_by,
        }


def find_by_name(products: Sequence[Product], name: str) -> Optional[Product]:
    wanted = name.lower()
    for product in products:
        if product.name.lower() == wanted:
            return product
    return None


def proposal_from_guess(guess: ProductGuess, barcode: Optional[str]) -> ProductProposal:
    price_cents = to_cents(guess.estimated_price) or 0
    return ProductProposal(
        name=guess.name,
        price_cents=price_cents,
        cost_cents=multiply_cents(price_cents, ESTIMATED_COST_RATIO),
        stock=1,
        unit="un",
        barcode=barcode or None,
        category=guess.category,
    )


class ProductIdentificationResolver:
    def __init__(self, barcode_resolver: BarcodeResolver, recognition):
        self.barcode_resolver = barcode_resolver
        self.recognition = recognition

    def resolve(self, image: CapturedImage, catalog: Sequence[Product]) -> IdentificationResult:
        """
        Raises:
            RecognitionEmpty: the image could not be identified at all
            RecognitionFailure: the identification call failed
        """
        barcode = self.barcode_resolver.resolve(image)
        if barcode:
            for product in catalog:
                if product.barcode == barcode:
                    return IdentificationResult(
                        action=ACTION_ADD_TO_CART,
                        product=product,
                        barcode=barcode,
                        matched_by=MATCHED_BY_BARCODE,
                    )

        guess = self.recognition.identify_product(image)
        if guess is None:
            raise RecognitionEmpty(
                "Could not identify the product",
                details={"barcode": barcode},
            )

        existing = find_by_name(catalog, guess.name)
        if existing:
            return IdentificationResult(
                action=ACTION_ADD_TO_CART,
                product=existing,
                barcode=barcode,
                matched_by=MATCHED_BY_NAME,
            )

        logger.info("Unknown product identified as %r; offering registration", guess.name)
        return IdentificationResult(
            action=ACTION_OFFER_NEW_PRODUCT,
            proposal=proposal_from_guess(guess, barcode),
            barcode=barcode,
        )

    @staticmethod
    def accept_proposal(proposal: ProductProposal, catalog_store) -> Product:
        """Register an accepted proposal: append it to the catalog and return it."""
        product = Product(
            id=catalog_store.new_id(),
            name=proposal.name,
            price_cents=proposal.price_cents,
            cost_cents=proposal.cost_cents,
            stock=proposal.stock,
            unit=proposal.unit,
            barcode=proposal.barcode,
        )
        catalog_store.replace_products(catalog_store.products() + [product])
        logger.info("Registered product %s (%r) from identification", product.id, product.name)
        return product
