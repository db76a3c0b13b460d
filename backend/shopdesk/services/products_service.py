# backend/shopdesk/services/products_service.py
"""
Products Service

Manual catalog maintenance: registration, price edits, search and the
price-tag export. Stock and cost only change through checkout and invoice
reconciliation.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..money import format_brl
from ..records import Product
from ..validation import ConflictError

logger = logging.getLogger(__name__)

# Products below this stock are flagged in listings
LOW_STOCK_THRESHOLD = 5


class ProductNotFoundError(Exception):
    """Raised when a product does not exist."""
    pass


def product_to_dict(product: Product) -> dict:
    data = product.to_dict()
    data["low_stock"] = product.stock < LOW_STOCK_THRESHOLD
    return data


def list_products(catalog, query: Optional[str] = None) -> dict:
    """
    List the catalog, optionally filtered.

    query matches a case-insensitive name substring or an exact barcode.
    """
    products = catalog.products()
    if query:
        needle = query.strip().lower()
        products = [
            p for p in products
            if needle in p.name.lower() or (p.barcode and p.barcode == query.strip())
        ]
    return {
        "items": [product_to_dict(p) for p in products],
        "count": len(products),
    }


def low_stock(catalog, threshold: float = LOW_STOCK_THRESHOLD) -> list[Product]:
    return [p for p in catalog.products() if p.stock < threshold]


def create_product(catalog, *, patch: dict) -> Product:
    """
    Register a product from a validated patch dict.

    Raises:
        ConflictError: barcode already used by another product
    """
    barcode = patch.get("barcode") or None
    if barcode and catalog.find_by_barcode(barcode):
        raise ConflictError(f"Barcode {barcode} already registered")

    product = Product(
        id=catalog.new_id(),
        name=patch["name"],
        price_cents=patch["price_cents"],
        cost_cents=patch.get("cost_cents") or 0,
        stock=patch.get("stock") or 0,
        unit=patch.get("unit") or "un",
        barcode=barcode,
    )
    catalog.replace_products(catalog.products() + [product])
    logger.info("Registered product %s (%r)", product.id, product.name)
    return product


def update_price(catalog, product_id: str, price_cents: int) -> Product:
    product = catalog.find(product_id)
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")
    updated = replace(product, price_cents=price_cents)
    catalog.replace_products([updated if p.id == product.id else p for p in catalog.products()])
    return updated


def price_tags(catalog) -> str:
    """Plain-text shelf tags, one "<name>: R$ <price>" line per product."""
    return "\n".join(f"{p.name}: {format_brl(p.price_cents)}" for p in catalog.products())
