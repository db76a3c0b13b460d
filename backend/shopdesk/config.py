# backend/shopdesk/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/shopdesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///shopdesk.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Operator gate (single operator, single PIN)
    PIN_GATE_ENABLED = _env_flag("PIN_GATE_ENABLED", "true")
    OPERATOR_PIN = os.environ.get("OPERATOR_PIN", "1234")
    OPERATOR_PIN_HASH = os.environ.get("OPERATOR_PIN_HASH")  # from `flask shop hash-pin`
    PIN_HASH_ROUNDS = int(os.environ.get("PIN_HASH_ROUNDS", "12"))
    SESSION_TTL_MINUTES = int(os.environ.get("SESSION_TTL_MINUTES", "720"))

    # Recognition service (Gemini generateContent over HTTP)
    RECOGNITION_API_KEY = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")
    RECOGNITION_MODEL = os.environ.get("RECOGNITION_MODEL", "gemini-2.5-flash")
    RECOGNITION_BASE_URL = os.environ.get(
        "RECOGNITION_BASE_URL",
        "https://generativelanguage.googleapis.com/v1beta",
    )
    RECOGNITION_TIMEOUT_SECONDS = float(os.environ.get("RECOGNITION_TIMEOUT_SECONDS", "30"))

    # Local barcode decoding (pyzbar + Pillow), used before the service fallback
    NATIVE_BARCODE_DETECTION = _env_flag("NATIVE_BARCODE_DETECTION", "true")

    UNIDENTIFIED_CLIENT_ID = "0"
    UNIDENTIFIED_CLIENT_NAME = "NI (Não Identificado)"

    # Seed demo catalog/clients/debts when a collection has never been saved
    SEED_DEFAULTS = _env_flag("SEED_DEFAULTS", "true")

    # Front-ends allowed to call the API from a browser (comma separated)
    CORS_ALLOWED_ORIGINS = tuple(
        origin.strip()
        for origin in os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
        ).split(",")
        if origin.strip()
    )
