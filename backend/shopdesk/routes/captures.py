# Overview: Flask API routes for camera capture requests; parses input and returns JSON responses.

# backend/shopdesk/routes/captures.py
"""
Capture request routes

The UI opens a capture before showing the camera and passes its id along
with the photo. A capture that was cancelled (camera dismissed) or superseded
(another capture opened) rejects late results with 409; nothing is written.
"""

from flask import Blueprint, request, jsonify, current_app

from ..extensions import shop
from ..services import pos_service
from ..services.capture_service import CaptureError, CaptureNotFoundError, StaleCaptureError
from ..services.images import CapturedImage, ImageDecodeError
from ..services.recognition_service import RecognitionEmpty
from ..decorators import require_operator


captures_bp = Blueprint("captures", __name__, url_prefix="/api/captures")


@captures_bp.post("")
@require_operator
def open_capture_route():
    """
    Body: {"mode": "PRODUCT_SCAN" | "INVOICE_SCAN" | "BARCODE_SCAN"}
    Any capture still pending is superseded.
    """
    data = request.get_json(silent=True) or {}
    try:
        capture = shop.captures.open(data.get("mode"))
    except CaptureError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(capture.to_dict()), 201


@captures_bp.get("/<capture_id>")
@require_operator
def get_capture_route(capture_id: str):
    try:
        capture = shop.captures.get(capture_id)
    except CaptureNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(capture.to_dict()), 200


@captures_bp.post("/<capture_id>/cancel")
@require_operator
def cancel_capture_route(capture_id: str):
    try:
        capture = shop.captures.cancel(capture_id)
    except CaptureNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(capture.to_dict()), 200


@captures_bp.post("/<capture_id>/barcode")
@require_operator
def read_barcode_route(capture_id: str):
    """
    Read a barcode for the registration form.

    Body: {"image": "data:image/jpeg;base64,..."}
    Returns {"barcode"}; the catalog is not touched.
    """
    try:
        data = request.get_json(silent=True) or {}
        image = CapturedImage.from_data_url(data.get("image"))

        capture, code = pos_service.read_barcode(image, capture_id)
        return jsonify({"capture": capture.to_dict(), "barcode": code}), 200

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
    except Exception:
        current_app.logger.exception("Failed to read barcode")
        return jsonify({"error": "Internal server error"}), 500
