# Overview: Request decorators for API routes.

from functools import wraps
from flask import current_app, g, jsonify, request

from .extensions import shop
from .services import auth_service


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip()


def require_operator(f):
    """
    Require an operator session opened with the shop PIN.

    Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_app.config.get("PIN_GATE_ENABLED", True):
            return f(*args, **kwargs)

        token = bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        if not auth_service.validate_session(shop.context.operator_sessions, token):
            return jsonify({"error": "Invalid or expired token"}), 401

        g.operator_token = token
        return f(*args, **kwargs)

    return decorated_function
