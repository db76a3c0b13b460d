# Overview: HTTP client for the image recognition service (Gemini generateContent).

"""
Recognition Service client

Three operations, each a single generateContent call with the captured image
inlined:

- analyze_invoice(image) -> InvoiceData          (JSON, schema-constrained)
- identify_product(image) -> ProductGuess | None (JSON, schema-constrained)
- read_barcode(image) -> str | None              (plain text, digits only)

ERROR MODEL:
- RecognitionFailure: the call itself failed (not configured, transport
  error, non-2xx status).
- RecognitionParseError (a RecognitionFailure): the service answered but
  the payload does not match the expected schema.
- "No usable data" is not an exception here: analyze_invoice returns an
  InvoiceData without items, the other two return None. Callers turn that
  into RecognitionEmpty where the flow needs it.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

import httpx
from pydantic import ValidationError as SchemaValidationError

from .images import CapturedImage
from .recognition_schemas import (
    INVOICE_RESPONSE_SCHEMA,
    PRODUCT_RESPONSE_SCHEMA,
    InvoiceData,
    ProductGuess,
)


INVOICE_SYSTEM_INSTRUCTION = (
    "You are an expert data entry assistant for a retail store. "
    "Analyze the provided image of an invoice or receipt. "
    "Extract the total amount, the date, and a list of items purchased. "
    "For each item, try to identify the product name, the unit cost, and the quantity. "
    "If the image is not clear, do your best to infer."
)
INVOICE_PROMPT = "Extract invoice data into JSON."
PRODUCT_PROMPT = "Identify this product. Provide a short name, a category, and an estimated retail price in BRL."
BARCODE_PROMPT = (
    "Read the barcode or UPC number from this image. "
    "Return ONLY the number digits as a plain string. If no barcode is found, return null."
)

_NON_DIGITS = re.compile(r"\D")


class RecognitionFailure(Exception):
    """Raised when a recognition call fails."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class RecognitionUnavailable(RecognitionFailure):
    """Raised when the recognition service is not configured."""
    pass


class RecognitionParseError(RecognitionFailure):
    """Raised when the service returns a payload that does not match its schema."""
    pass


class RecognitionEmpty(Exception):
    """Raised by flows when recognition returned no usable data."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class RecognitionClient:
    def __init__(
        self,
        *,
        api_key: Optional[str],
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config, transport: Optional[httpx.BaseTransport] = None) -> "RecognitionClient":
        return cls(
            api_key=config.get("RECOGNITION_API_KEY"),
            model=config.get("RECOGNITION_MODEL", "gemini-2.5-flash"),
            base_url=config.get("RECOGNITION_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"),
            timeout=config.get("RECOGNITION_TIMEOUT_SECONDS", 30.0),
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _generate(
        self,
        image: CapturedImage,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        response_mime_type: str = "application/json",
        response_schema: Optional[dict] = None,
    ) -> str:
        if not self.api_key:
            raise RecognitionUnavailable("Recognition service is not configured (missing API key)")

        generation_config: dict[str, Any] = {"responseMimeType": response_mime_type}
        if response_schema is not None:
            generation_config["responseSchema"] = response_schema

        body: dict[str, Any] = {
            "contents": [
                {
                    "parts": [
                        {"inlineData": {"mimeType": image.mime_type, "data": image.to_base64()}},
                        {"text": prompt},
                    ]
                }
            ],
            "generationConfig": generation_config,
        }
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        try:
            with httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport) as http:
                response = http.post(
                    f"/models/{self.model}:generateContent",
                    json=body,
                    headers={"x-goog-api-key": self.api_key},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RecognitionFailure(
                "Recognition service returned an error",
                details={"status_code": exc.response.status_code},
            ) from exc
        except httpx.HTTPError as exc:
            raise RecognitionFailure(f"Recognition service unreachable: {exc.__class__.__name__}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise RecognitionParseError("Recognition service returned invalid JSON") from exc
        return _extract_text(payload)

    def analyze_invoice(self, image: CapturedImage) -> InvoiceData:
        text = self._generate(
            image,
            INVOICE_PROMPT,
            system_instruction=INVOICE_SYSTEM_INSTRUCTION,
            response_schema=INVOICE_RESPONSE_SCHEMA,
        )
        data = _parse_json_object(text)
        try:
            return InvoiceData.model_validate(data)
        except SchemaValidationError as exc:
            raise RecognitionParseError(
                "Invoice payload does not match the expected schema",
                details={"errors": exc.errors(include_url=False, include_input=False)},
            ) from exc

    def identify_product(self, image: CapturedImage) -> Optional[ProductGuess]:
        text = self._generate(image, PRODUCT_PROMPT, response_schema=PRODUCT_RESPONSE_SCHEMA)
        data = _parse_json_object(text)
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            return None
        try:
            return ProductGuess.model_validate(data)
        except SchemaValidationError as exc:
            raise RecognitionParseError(
                "Product payload does not match the expected schema",
                details={"errors": exc.errors(include_url=False, include_input=False)},
            ) from exc

    def read_barcode(self, image: CapturedImage) -> Optional[str]:
        text = self._generate(image, BARCODE_PROMPT, response_mime_type="text/plain").strip()
        if not text or text.lower() == "null":
            return None
        digits = _NON_DIGITS.sub("", text)
        return digits or None


def _extract_text(payload: Any) -> str:
    """Concatenate the text parts of the first candidate ("" when there is none)."""
    if not isinstance(payload, dict):
        raise RecognitionParseError("Recognition response is not an object")
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    content = candidates[0].get("content") or {}
    parts = content.get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def _parse_json_object(text: str) -> dict:
    if not text or not text.strip():
        return {}
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise RecognitionParseError("Recognition result is not valid JSON") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RecognitionParseError("Recognition result is not a JSON object")
    return data
