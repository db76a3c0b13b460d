# Overview: Flask API routes for clients; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..extensions import shop
from ..models import Client
from ..services.ledger_service import register_client
from ..services.persistence import PersistenceError
from ..validation import ModelValidationPolicy, validate_payload, ValidationError
from ..decorators import require_operator

CLIENT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "phone", "cpf", "address"},
    required_on_create={"name"},
)

clients_bp = Blueprint("clients", __name__, url_prefix="/api/clients")


@clients_bp.get("")
@require_operator
def list_clients_route():
    clients = shop.ledger.clients()
    return jsonify({"items": [c.to_dict() for c in clients], "count": len(clients)}), 200


@clients_bp.post("")
@require_operator
def create_client_route():
    """Register a client with a zero balance."""
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Client, payload=payload, policy=CLIENT_POLICY, partial=False)
        client = register_client(shop.ledger, **patch)
        return jsonify(client.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except PersistenceError:
        current_app.logger.exception("Client could not be saved")
        return jsonify({"error": "Client could not be saved"}), 503
    except Exception:
        current_app.logger.exception("Failed to register client")
        return jsonify({"error": "Internal server error"}), 500
