# Overview: Captured image payloads (base64 data URLs from the camera).

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

_DATA_URL = re.compile(r"^data:(?P<mime>image/[a-zA-Z0-9.+-]+);base64,(?P<data>.*)$", re.DOTALL)

SUPPORTED_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


class ImageDecodeError(ValueError):
    """Raised when a captured image payload cannot be decoded."""


@dataclass(frozen=True)
class CapturedImage:
    data: bytes
    mime_type: str = "image/jpeg"

    @classmethod
    def from_data_url(cls, value: str) -> "CapturedImage":
        """
        Accept either a data URL ("data:image/png;base64,....") or a bare
        base64 string (treated as JPEG).
        """
        if not isinstance(value, str) or not value.strip():
            raise ImageDecodeError("image is required")
        value = value.strip()
        mime_type = "image/jpeg"
        match = _DATA_URL.match(value)
        if match:
            mime_type = match.group("mime").lower()
            value = match.group("data")
        if mime_type not in SUPPORTED_MIME_TYPES:
            raise ImageDecodeError(f"Unsupported image type: {mime_type}")
        try:
            data = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            raise ImageDecodeError("image is not valid base64")
        if not data:
            raise ImageDecodeError("image is empty")
        return cls(data=data, mime_type="image/jpeg" if mime_type == "image/jpg" else mime_type)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"
