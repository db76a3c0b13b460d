# Overview: Flask API routes for the point of sale; parses input and returns JSON responses.

# backend/shopdesk/routes/pos.py
"""
POS routes: the operator's cart, client selection, checkout and product
photo scans.

Money in and out is integer cents. Quantities are numbers (kg lines may be
fractional).
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_operator
from ..services import pos_service
from ..services.capture_service import CaptureError, CaptureNotFoundError, StaleCaptureError
from ..services.cart_service import CartError
from ..services.checkout_service import CheckoutError, InsufficientPayment, parse_payment_method
from ..services.images import CapturedImage, ImageDecodeError
from ..services.persistence import PersistenceError
from ..services.pos_service import PosError
from ..services.recognition_service import RecognitionEmpty, RecognitionFailure, RecognitionUnavailable
from ..validation import ValidationError, parse_cents, parse_quantity


pos_bp = Blueprint("pos", __name__, url_prefix="/api/pos")


@pos_bp.get("/cart")
@require_operator
def get_cart_route():
    """Current cart lines, total and selected client."""
    return jsonify(pos_service.pos_state()), 200


@pos_bp.post("/cart/items")
@require_operator
def add_cart_item_route():
    """
    Add a product to the cart (or grow its line).

    Body: {"product_id": "1", "quantity": 2}
    """
    try:
        data = request.get_json(silent=True) or {}
        product_id = data.get("product_id")
        if not product_id:
            return jsonify({"error": "product_id required"}), 400
        quantity = parse_quantity(data.get("quantity"))

        line = pos_service.add_to_cart(str(product_id), quantity)
        return jsonify({"line": line.to_dict(), **pos_service.pos_state()}), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except CartError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except PosError as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    except Exception:
        current_app.logger.exception("Failed to add cart item")
        return jsonify({"error": "Internal server error"}), 500


@pos_bp.delete("/cart/items/<product_id>")
@require_operator
def remove_cart_item_route(product_id: str):
    pos_service.remove_from_cart(product_id)
    return jsonify(pos_service.pos_state()), 200


@pos_bp.delete("/cart")
@require_operator
def clear_cart_route():
    pos_service.clear_cart()
    return jsonify(pos_service.pos_state()), 200


@pos_bp.put("/client")
@require_operator
def select_client_route():
    """Body: {"client_id": "1"}"""
    data = request.get_json(silent=True) or {}
    client_id = data.get("client_id")
    if client_id is None or client_id == "":
        return jsonify({"error": "client_id required"}), 400
    try:
        pos_service.select_client(str(client_id))
    except PosError as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    return jsonify(pos_service.pos_state()), 200


@pos_bp.post("/checkout")
@require_operator
def checkout_route():
    """
    Commit the cart as a sale for the selected client.

    Body: {"payment_method": "CASH"|"CARD"|"DEBT", "paid_amount_cents": 3000}
    paid_amount_cents is only required for CASH.

    Returns 400 with missing_cents when cash tendered is short; nothing is
    changed in that case.
    """
    try:
        data = request.get_json(silent=True) or {}
        method = parse_payment_method(data.get("payment_method"))
        paid = data.get("paid_amount_cents")
        paid_cents = parse_cents(paid, "paid_amount_cents") if paid is not None else 0

        sale = pos_service.checkout(method, paid_cents)
        return jsonify({"sale": sale.to_dict(), **pos_service.pos_state()}), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except InsufficientPayment as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except CheckoutError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except PersistenceError:
        current_app.logger.exception("Checkout could not be saved")
        return jsonify({"error": "Could not save the sale"}), 503
    except Exception:
        current_app.logger.exception("Failed to check out")
        return jsonify({"error": "Internal server error"}), 500


@pos_bp.post("/scan")
@require_operator
def scan_product_route():
    """
    Identify a product photo.

    Body: {"image": "data:image/jpeg;base64,...", "capture_id": optional}

    Response action:
    - ADD_TO_CART: the product was found (barcode or name) and added
    - OFFER_NEW_PRODUCT: unknown product; answer via /scan/confirm
    """
    try:
        data = request.get_json(silent=True) or {}
        image = CapturedImage.from_data_url(data.get("image"))

        capture, result = pos_service.scan_product(image, data.get("capture_id"))
        return jsonify({
            "capture": capture.to_dict(),
            "result": result.to_dict(),
            **pos_service.pos_state(),
        }), 200

    except ImageDecodeError as e:
        return jsonify({"error": str(e)}), 400
    except CaptureNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except StaleCaptureError as e:
        return jsonify({"error": str(e), "details": {"status": e.status}}), 409
    except CaptureError as e:
        return jsonify({"error": str(e)}), 400
    except RecognitionEmpty as e:
        return jsonify({"error": str(e), "details": e.details}), 422
    except RecognitionUnavailable as e:
        return jsonify({"error": str(e)}), 503
    except RecognitionFailure as e:
        current_app.logger.warning("Product identification failed: %s", e)
        return jsonify({"error": str(e), "details": e.details}), 502
    except Exception:
        current_app.logger.exception("Failed to scan product")
        return jsonify({"error": "Internal server error"}), 500


@pos_bp.post("/scan/confirm")
@require_operator
def confirm_scan_route():
    """
    Answer a new-product offer.

    Body: {"capture_id": "...", "accept": true}
    Accepting registers the product and adds it to the cart.
    """
    try:
        data = request.get_json(silent=True) or {}
        capture_id = data.get("capture_id")
        if not capture_id:
            return jsonify({"error": "capture_id required"}), 400
        if not isinstance(data.get("accept"), bool):
            return jsonify({"error": "accept must be true or false"}), 400

        product = pos_service.confirm_offer(capture_id, data["accept"])
        return jsonify({
            "product": product.to_dict() if product else None,
            **pos_service.pos_state(),
        }), 201 if product else 200

    except CaptureNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except StaleCaptureError as e:
        return jsonify({"error": str(e), "details": {"status": e.status}}), 409
    except CartError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except PersistenceError:
        current_app.logger.exception("Product could not be saved")
        return jsonify({"error": "Product could not be saved"}), 503
    except Exception:
        current_app.logger.exception("Failed to confirm scanned product")
        return jsonify({"error": "Internal server error"}), 500
