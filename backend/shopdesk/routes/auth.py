# Overview: Flask API routes for the operator PIN gate; parses input and returns JSON responses.

# backend/shopdesk/routes/auth.py
"""
Operator authentication routes

The shop has one operator and one PIN. A correct PIN opens a bearer session;
every other /api route requires it (see decorators.require_operator).
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..extensions import shop
from ..services import auth_service
from ..decorators import require_operator
from shopdesk.time_utils import to_utc_z


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/pin")
def pin_login_route():
    """
    Exchange the operator PIN for a session token.

    Body: {"pin": "1234"}
    Returns: {"token", "expires_at"}
    """
    try:
        data = request.get_json(silent=True) or {}
        pin = data.get("pin")
        if pin is None or pin == "":
            return jsonify({"error": "pin required"}), 400

        if not auth_service.verify_pin(str(pin), current_app.config.get("OPERATOR_PIN_HASH")):
            current_app.logger.warning("Rejected operator PIN attempt from %s", request.remote_addr)
            return jsonify({"error": "Invalid PIN"}), 401

        token, expires_at = auth_service.create_session(
            shop.context.operator_sessions,
            current_app.config.get("SESSION_TTL_MINUTES", 720),
        )
        return jsonify({"token": token, "expires_at": to_utc_z(expires_at)}), 200

    except Exception:
        current_app.logger.exception("PIN login failed")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_operator
def logout_route():
    """Revoke the current session token."""
    token = getattr(g, "operator_token", None)
    if token:
        auth_service.revoke_session(shop.context.operator_sessions, token)
    return jsonify({"ok": True}), 200
