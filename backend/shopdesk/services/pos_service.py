# Overview: Operator flows tying captures, resolvers and the shop stores together.

"""
POS Flows

Each photo flow runs against a capture request (see capture_service):

- scan_product: ProductIdentificationResolver -> cart addition, or an offer
  held on the capture until confirm_offer()/cancel.
- import_invoice: recognition -> CatalogReconciler.
- read_barcode: BarcodeResolver only; the code goes back to the caller
  (registration form) instead of mutating anything.

Recognition calls run before the capture is claimed. If the operator
cancelled or superseded the capture meanwhile, the result is discarded
(StaleCaptureError) and nothing is written.
"""

from __future__ import annotations

import logging
from typing import Optional

from flask import current_app

from ..extensions import shop
from ..records import PaymentMethod, Sale
from .barcode_service import BarcodeResolver
from .capture_service import (
    MODE_BARCODE_SCAN,
    MODE_INVOICE_SCAN,
    MODE_PRODUCT_SCAN,
    CaptureRequest,
)
from .cart_service import CartError
from .checkout_service import checkout as checkout_cart
from .identification_service import (
    ACTION_ADD_TO_CART,
    IdentificationResult,
    ProductIdentificationResolver,
)
from .images import CapturedImage
from .reconcile_service import CatalogReconciler, ReconciliationOutcome
from .recognition_service import RecognitionEmpty


logger = logging.getLogger(__name__)


class PosError(Exception):
    """Raised for POS flow errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def get_recognition():
    return current_app.extensions["recognition"]


def get_barcode_resolver() -> BarcodeResolver:
    return BarcodeResolver(get_recognition(), current_app.extensions.get("barcode_detector"))


def _capture_for(capture_id: Optional[str], mode: str) -> CaptureRequest:
    captures = shop.captures
    if capture_id:
        return captures.require_pending(capture_id, mode)
    return captures.open(mode)


# --- cart --------------------------------------------------------------------

def add_to_cart(product_id: str, quantity: float = 1):
    product = shop.catalog.find(product_id)
    if product is None:
        raise PosError("Product not found", details={"product_id": product_id})
    return shop.pos.cart.add_item(product, quantity)


def remove_from_cart(product_id: str) -> None:
    shop.pos.cart.remove_item(product_id)


def clear_cart() -> None:
    shop.pos.cart.clear()


def select_client(client_id: str) -> None:
    if shop.ledger.find_client(client_id) is None:
        raise PosError("Client not found", details={"client_id": client_id})
    shop.pos.selected_client_id = client_id


def pos_state() -> dict:
    pos = shop.pos
    client = shop.ledger.find_client(pos.selected_client_id)
    return {
        "cart": pos.cart.to_dict(),
        "selected_client_id": pos.selected_client_id,
        "selected_client": client.to_dict() if client else None,
    }


def checkout(method: PaymentMethod, paid_amount_cents: int = 0) -> Sale:
    return checkout_cart(shop.context, method, paid_amount_cents)


# --- photo flows ---------------------------------------------------------------

def scan_product(image: CapturedImage, capture_id: Optional[str] = None) -> tuple[CaptureRequest, IdentificationResult]:
    """
    Identify a product photo.

    ADD_TO_CART results are applied to the cart immediately. An offer to
    register a new product is held on the capture.
    """
    capture = _capture_for(capture_id, MODE_PRODUCT_SCAN)
    resolver = ProductIdentificationResolver(get_barcode_resolver(), get_recognition())

    try:
        result = resolver.resolve(image, shop.catalog.products())
    except RecognitionEmpty:
        shop.captures.complete(capture.id)
        raise

    if result.action == ACTION_ADD_TO_CART:
        shop.captures.complete(capture.id)
        shop.pos.cart.add_item(result.product, 1)
    else:
        shop.captures.hold_offer(capture.id, result.proposal)
    return capture, result


def confirm_offer(capture_id: str, accept: bool):
    """
    Answer a "register this product?" offer.

    Accepting registers the product and adds it to the cart; declining writes
    nothing. Returns the new product, or None when declined.
    """
    if not accept:
        shop.captures.cancel(capture_id)
        return None
    proposal = shop.captures.take_offer(capture_id)
    product = ProductIdentificationResolver.accept_proposal(proposal, shop.catalog)
    try:
        shop.pos.cart.add_item(product, 1)
    except CartError:
        logger.exception("Registered product %s could not be added to the cart", product.id)
        raise
    return product


def import_invoice(image: CapturedImage, capture_id: Optional[str] = None) -> tuple[CaptureRequest, ReconciliationOutcome]:
    """
    Extract an invoice photo and reconcile it into the catalog.

    Raises:
        RecognitionFailure / RecognitionParseError: extraction failed, nothing written
        RecognitionEmpty: no items found, nothing written
        StaleCaptureError: capture abandoned while extracting, result discarded
    """
    capture = _capture_for(capture_id, MODE_INVOICE_SCAN)
    invoice = get_recognition().analyze_invoice(image)
    shop.captures.complete(capture.id)

    reconciler = CatalogReconciler(shop.catalog, shop.ledger)
    return capture, reconciler.reconcile(invoice, proof_image=image.to_data_url())


def read_barcode(image: CapturedImage, capture_id: Optional[str] = None) -> tuple[CaptureRequest, str]:
    capture = _capture_for(capture_id, MODE_BARCODE_SCAN)
    code = get_barcode_resolver().resolve(image)
    shop.captures.complete(capture.id)
    if not code:
        raise RecognitionEmpty("Could not read a barcode from the image")
    return capture, code
