# Overview: Flask API routes for receivables, payables and invoice imports; parses input and returns JSON responses.

# backend/shopdesk/routes/financial.py
"""
Financial routes

RECEIVABLES: clients with a negative balance (Crediário).
PAYABLES: store debts (bills, supplier invoices).
INVOICES: photographed supplier invoices, reconciled into the catalog and
recorded as a payable.
"""

from flask import Blueprint, request, jsonify, current_app

from ..extensions import shop
from ..models import StoreDebt
from ..services import ledger_service, pos_service
from ..services.capture_service import CaptureError, CaptureNotFoundError, StaleCaptureError
from ..services.images import CapturedImage, ImageDecodeError
from ..services.ledger_service import LedgerError, LedgerNotFoundError
from ..services.persistence import PersistenceError
from ..services.recognition_service import RecognitionEmpty, RecognitionFailure, RecognitionUnavailable
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_store_debt,
    parse_cents,
    ValidationError,
)
from ..decorators import require_operator

STORE_DEBT_POLICY = ModelValidationPolicy(
    writable_fields={"title", "amount_cents", "due_date", "is_recurring", "proof_image"},
    required_on_create={"title", "amount_cents"},
)

financial_bp = Blueprint("financial", __name__, url_prefix="/api/financial")


@financial_bp.get("/receivables")
@require_operator
def receivables_route():
    return jsonify(ledger_service.receivables(shop.ledger)), 200


@financial_bp.post("/receivables/<client_id>/payments")
@require_operator
def settle_payment_route(client_id: str):
    """
    Record a payment from a client.

    Body: {"amount_cents": 2000}
    """
    try:
        data = request.get_json(silent=True) or {}
        amount_cents = parse_cents(data.get("amount_cents"), "amount_cents", allow_zero=False)
        client = ledger_service.settle_client_payment(shop.ledger, client_id, amount_cents)
        return jsonify({"client": client.to_dict()}), 200

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except LedgerNotFoundError as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    except LedgerError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except PersistenceError:
        current_app.logger.exception("Payment could not be saved")
        return jsonify({"error": "Payment could not be saved"}), 503
    except Exception:
        current_app.logger.exception("Failed to settle client payment")
        return jsonify({"error": "Internal server error"}), 500


@financial_bp.get("/payables")
@require_operator
def payables_route():
    return jsonify(ledger_service.payables(shop.ledger)), 200


@financial_bp.post("/payables")
@require_operator
def add_payable_route():
    """
    Add a store debt manually.

    Body: {"title", "amount_cents", "due_date" (ISO-8601, optional),
           "is_recurring" (optional), "proof_image" (data URL, optional)}
    """
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=StoreDebt, payload=payload, policy=STORE_DEBT_POLICY, partial=False)
        enforce_rules_store_debt(patch)
        debt = ledger_service.add_store_debt(
            shop.ledger,
            title=patch["title"],
            amount_cents=patch["amount_cents"],
            due_date=patch.get("due_date"),
            is_recurring=bool(patch.get("is_recurring")),
            proof_image=patch.get("proof_image"),
        )
        return jsonify(debt.to_dict()), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except LedgerError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except PersistenceError:
        current_app.logger.exception("Store debt could not be saved")
        return jsonify({"error": "Store debt could not be saved"}), 503
    except Exception:
        current_app.logger.exception("Failed to add store debt")
        return jsonify({"error": "Internal server error"}), 500


@financial_bp.post("/payables/<debt_id>/pay")
@require_operator
def pay_payable_route(debt_id: str):
    """Mark a store debt as paid. Paying twice is a no-op."""
    try:
        debt = ledger_service.pay_store_debt(shop.ledger, debt_id)
        return jsonify(debt.to_dict()), 200
    except LedgerNotFoundError as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    except PersistenceError:
        current_app.logger.exception("Payment could not be saved")
        return jsonify({"error": "Payment could not be saved"}), 503
    except Exception:
        current_app.logger.exception("Failed to pay store debt")
        return jsonify({"error": "Internal server error"}), 500


@financial_bp.get("/payables/<debt_id>/proof")
@require_operator
def payable_proof_route(debt_id: str):
    debt = shop.ledger.find_store_debt(debt_id)
    if debt is None:
        return jsonify({"error": "Store debt not found"}), 404
    if not debt.proof_image:
        return jsonify({"error": "No proof image for this debt"}), 404
    return jsonify({"id": debt.id, "proof_image": debt.proof_image}), 200


@financial_bp.post("/invoices")
@require_operator
def import_invoice_route():
    """
    Import a photographed supplier invoice.

    Body: {"image": "data:image/jpeg;base64,...", "capture_id": optional}

    Every item updates (cost, stock) or creates a product, then an unpaid
    payable for the invoice total is recorded with the photo as proof.
    """
    try:
        data = request.get_json(silent=True) or {}
        image = CapturedImage.from_data_url(data.get("image"))

        capture, outcome = pos_service.import_invoice(image, data.get("capture_id"))
        return jsonify({"capture": capture.to_dict(), **outcome.to_dict()}), 201

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
        current_app.logger.warning("Invoice extraction failed: %s", e)
        return jsonify({"error": str(e), "details": e.details}), 502
    except PersistenceError:
        current_app.logger.exception("Invoice could not be saved")
        return jsonify({"error": "Invoice could not be saved"}), 503
    except Exception:
        current_app.logger.exception("Failed to import invoice")
        return jsonify({"error": "Internal server error"}), 500
