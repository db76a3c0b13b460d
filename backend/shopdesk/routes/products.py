# Overview: Flask API routes for catalog operations; parses input and returns JSON responses.

# backend/shopdesk/routes/products.py
"""
Catalog routes: listing/search, manual registration, price edits and the
price-tag export.

Stock and cost are not editable here; they only move through checkout and
invoice reconciliation.
"""
from flask import Blueprint, request, current_app, Response

from ..extensions import shop
from ..models import Product
from ..services.products_service import (
    list_products as list_products_service,
    create_product,
    update_price,
    price_tags,
    product_to_dict,
    ProductNotFoundError,
)
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    parse_cents,
    ValidationError,
    ConflictError,
)
from ..decorators import require_operator
from ..services.persistence import PersistenceError

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price_cents", "cost_cents", "stock", "unit", "barcode"},
    required_on_create={"name", "price_cents"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_operator
def list_products():
    """
    List the catalog.

    Query params:
    - q: str (optional) - name substring (case-insensitive) or exact barcode
    """
    return list_products_service(shop.catalog, request.args.get("q"))


@products_bp.post("")
@require_operator
def create_product_route():
    """Register a product manually."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        created = create_product(shop.catalog, patch=patch)
    except ConflictError as e:
        return {"error": str(e)}, 409
    except PersistenceError:
        current_app.logger.exception("Product could not be saved")
        return {"error": "Product could not be saved"}, 503
    except Exception:
        current_app.logger.exception("Failed to create product")
        return {"error": "Internal server error"}, 500

    return product_to_dict(created), 201


@products_bp.patch("/<product_id>/price")
@require_operator
def update_price_route(product_id: str):
    """
    Change a product's sell price.

    Body: {"price_cents": 1350}
    Lines already in the cart keep the price they were added with.
    """
    payload = request.get_json(silent=True) or {}
    try:
        price_cents = parse_cents(payload.get("price_cents"), "price_cents")
        updated = update_price(shop.catalog, product_id, price_cents)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ProductNotFoundError as e:
        return {"error": str(e)}, 404
    except PersistenceError:
        current_app.logger.exception("Price change could not be saved")
        return {"error": "Price change could not be saved"}, 503

    return product_to_dict(updated), 200


@products_bp.get("/tags")
@require_operator
def price_tags_route():
    """Plain-text price tags, one line per product."""
    return Response(price_tags(shop.catalog), mimetype="text/plain")
