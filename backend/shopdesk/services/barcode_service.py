# Overview: Resolve a captured image to a barcode string (local decoder, then service).

"""
Barcode Resolver

Two stages, first success wins:

1. Native detection: decode the image locally (zbar via pyzbar) for EAN-13,
   EAN-8, UPC-A, UPC-E, QR and Code-128. Skipped when the decoder is not
   available in this runtime (libzbar missing, disabled in config).
2. Service fallback: ask the recognition service for the digits.

Neither stage failing is an error for the caller: resolve() returns None
when nothing could be read.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from .images import CapturedImage
from .recognition_service import RecognitionFailure


logger = logging.getLogger(__name__)

BARCODE_FORMATS = ("ean_13", "ean_8", "upc_a", "upc_e", "qr_code", "code_128")


@dataclass(frozen=True)
class DetectedBarcode:
    format: str
    raw_value: str


class BarcodeDetector(Protocol):
    def detect(self, image: CapturedImage) -> list[DetectedBarcode]:
        ...


class ZbarBarcodeDetector:
    """Local decoder backed by pyzbar + Pillow."""

    def __init__(self, formats: tuple[str, ...] = BARCODE_FORMATS):
        from PIL import Image
        from pyzbar import pyzbar

        symbols = {
            "ean_13": pyzbar.ZBarSymbol.EAN13,
            "ean_8": pyzbar.ZBarSymbol.EAN8,
            "upc_a": pyzbar.ZBarSymbol.UPCA,
            "upc_e": pyzbar.ZBarSymbol.UPCE,
            "qr_code": pyzbar.ZBarSymbol.QRCODE,
            "code_128": pyzbar.ZBarSymbol.CODE128,
        }
        self._image = Image
        self._decode = pyzbar.decode
        self._symbols = [symbols[name] for name in formats]
        self._names = {symbol.name: name for name, symbol in symbols.items()}

    def detect(self, image: CapturedImage) -> list[DetectedBarcode]:
        with self._image.open(io.BytesIO(image.data)) as picture:
            results = self._decode(picture, symbols=self._symbols)
        return [
            DetectedBarcode(
                format=self._names.get(result.type, result.type.lower()),
                raw_value=result.data.decode("utf-8", errors="replace"),
            )
            for result in results
        ]


def load_native_detector(enabled: bool = True) -> Optional[ZbarBarcodeDetector]:
    """
    Build the local decoder if this runtime supports it.

    Returns None (stage 1 unavailable) when disabled or when pyzbar/libzbar
    cannot be loaded.
    """
    if not enabled:
        return None
    try:
        return ZbarBarcodeDetector()
    except (ImportError, OSError) as exc:
        logger.info("Native barcode detection unavailable: %s", exc)
        return None


class BarcodeResolver:
    def __init__(self, recognition, detector: Optional[BarcodeDetector] = None):
        self.recognition = recognition
        self.detector = detector

    def resolve(self, image: CapturedImage) -> Optional[str]:
        code = self._detect_native(image)
        if code:
            return code
        return self._read_with_service(image)

    def _detect_native(self, image: CapturedImage) -> Optional[str]:
        if self.detector is None:
            return None
        try:
            results = self.detector.detect(image)
        except Exception:
            # Any decoder failure (corrupt image, zbar error) falls through to the service
            logger.warning("Native barcode detection failed, falling back to recognition service", exc_info=True)
            return None
        if results:
            return results[0].raw_value
        return None

    def _read_with_service(self, image: CapturedImage) -> Optional[str]:
        try:
            return self.recognition.read_barcode(image)
        except RecognitionFailure as exc:
            logger.warning("Barcode read via recognition service failed: %s", exc)
            return None
