# backend/shopdesk/routes/system.py
"""
Public health endpoint.

Reports whether the stored collections can be read (with each marker's
version, record count and last save) and whether photo recognition is
configured, so a deployment can be checked without an operator session.
"""

import time

from flask import Blueprint, current_app

from ..extensions import db, shop
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def check_database_health() -> dict:
    started = time.perf_counter()
    try:
        collections = shop.context.persistence.describe()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Database health check failed")
        return {"status": "unhealthy", "latency_ms": _elapsed_ms(started), "error": "Database error"}
    return {
        "status": "healthy",
        "latency_ms": _elapsed_ms(started),
        "details": {"collections": collections},
    }


def check_recognition_health() -> dict:
    recognition = current_app.extensions.get("recognition")
    configured = bool(recognition and recognition.configured)
    return {
        # Selling still works without a key; only photo flows are off
        "status": "healthy" if configured else "degraded",
        "details": {
            "configured": configured,
            "native_barcode_detection": current_app.extensions.get("barcode_detector") is not None,
        },
    }


@system_bp.get("/health")
def health():
    """200 when healthy or degraded, 503 when the database is unreachable."""
    started = time.perf_counter()
    checks = {
        "database": check_database_health(),
        "recognition": check_recognition_health(),
    }

    statuses = {check["status"] for check in checks.values()}
    if "unhealthy" in statuses:
        overall = "unhealthy"
    elif "degraded" in statuses:
        overall = "degraded"
    else:
        overall = "healthy"

    return {
        "status": overall,
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": _elapsed_ms(started),
        "checks": checks,
    }, 503 if overall == "unhealthy" else 200
