# Overview: Correlation-id keyed capture requests (one pending at a time).

"""
Capture Registry

WHY: A photo capture is requested by one screen (checkout scan, invoice
import, barcode field on the registration form) and answered later, after
the recognition service returns. The registry pairs each answer with the
request that asked for it.

RULES:
- At most one capture is PENDING. Opening a new one marks the previous one
  SUPERSEDED.
- cancel() marks a pending capture CANCELLED (operator dismissed the camera).
- complete() only succeeds for the pending capture. A result for a
  cancelled, superseded or already completed capture raises
  StaleCaptureError and must be discarded by the caller without mutation.
- A product scan that ends in a "register new product?" offer keeps the offer
  on the capture until the operator confirms or declines it.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..time_utils import to_utc_z, utcnow


MODE_PRODUCT_SCAN = "PRODUCT_SCAN"
MODE_INVOICE_SCAN = "INVOICE_SCAN"
MODE_BARCODE_SCAN = "BARCODE_SCAN"
CAPTURE_MODES = {MODE_PRODUCT_SCAN, MODE_INVOICE_SCAN, MODE_BARCODE_SCAN}

STATUS_PENDING = "PENDING"
STATUS_AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
STATUS_COMPLETED = "COMPLETED"
STATUS_CANCELLED = "CANCELLED"
STATUS_SUPERSEDED = "SUPERSEDED"


class CaptureError(Exception):
    """Base class for capture registry errors."""
    pass


class CaptureNotFoundError(CaptureError):
    """Raised when a capture id is unknown."""
    pass


class StaleCaptureError(CaptureError):
    """Raised when a result arrives for a capture that is no longer pending."""
    def __init__(self, message: str, status: str):
        super().__init__(message)
        self.status = status


@dataclass
class CaptureRequest:
    id: str
    mode: str
    status: str
    opened_at: datetime
    closed_at: Optional[datetime] = None
    offer: Any = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "mode": self.mode,
            "status": self.status,
            "opened_at": to_utc_z(self.opened_at),
            "closed_at": to_utc_z(self.closed_at),
        }


class CaptureRegistry:
    def __init__(self, max_history: int = 50):
        self._captures: dict[str, CaptureRequest] = {}
        self._pending_id: Optional[str] = None
        self._max_history = max_history
        self._lock = threading.Lock()

    def open(self, mode: str) -> CaptureRequest:
        if mode not in CAPTURE_MODES:
            raise CaptureError(f"Invalid capture mode. Must be one of: {', '.join(sorted(CAPTURE_MODES))}")
        with self._lock:
            self._close_pending(STATUS_SUPERSEDED)
            capture = CaptureRequest(id=uuid.uuid4().hex, mode=mode, status=STATUS_PENDING, opened_at=utcnow())
            self._captures[capture.id] = capture
            self._pending_id = capture.id
            self._trim()
            return capture

    def get(self, capture_id: str) -> CaptureRequest:
        capture = self._captures.get(capture_id)
        if capture is None:
            raise CaptureNotFoundError(f"Capture {capture_id} not found")
        return capture

    def pending(self) -> Optional[CaptureRequest]:
        if self._pending_id is None:
            return None
        return self._captures.get(self._pending_id)

    def require_pending(self, capture_id: str, mode: str) -> CaptureRequest:
        capture = self.get(capture_id)
        if capture.mode != mode:
            raise CaptureError(f"Capture {capture_id} is a {capture.mode} capture, not {mode}")
        if capture.status != STATUS_PENDING:
            raise StaleCaptureError(f"Capture {capture_id} is {capture.status}", capture.status)
        return capture

    def cancel(self, capture_id: str) -> CaptureRequest:
        with self._lock:
            capture = self.get(capture_id)
            if capture.status in (STATUS_PENDING, STATUS_AWAITING_CONFIRMATION):
                capture.status = STATUS_CANCELLED
                capture.closed_at = utcnow()
                capture.offer = None
                if self._pending_id == capture_id:
                    self._pending_id = None
            return capture

    def complete(self, capture_id: str) -> CaptureRequest:
        """Claim the result slot of a pending capture; raises if it went stale."""
        with self._lock:
            capture = self.get(capture_id)
            if capture.status != STATUS_PENDING:
                raise StaleCaptureError(
                    f"Discarding result for capture {capture_id}: capture is {capture.status}",
                    capture.status,
                )
            capture.status = STATUS_COMPLETED
            capture.closed_at = utcnow()
            self._pending_id = None
            return capture

    def hold_offer(self, capture_id: str, offer: Any) -> CaptureRequest:
        """Complete a pending capture but keep an offer awaiting the operator's answer."""
        with self._lock:
            capture = self.get(capture_id)
            if capture.status != STATUS_PENDING:
                raise StaleCaptureError(
                    f"Discarding result for capture {capture_id}: capture is {capture.status}",
                    capture.status,
                )
            capture.status = STATUS_AWAITING_CONFIRMATION
            capture.offer = offer
            return capture

    def take_offer(self, capture_id: str) -> Any:
        with self._lock:
            capture = self.get(capture_id)
            if capture.status != STATUS_AWAITING_CONFIRMATION:
                raise StaleCaptureError(f"Capture {capture_id} has no open offer", capture.status)
            offer = capture.offer
            capture.offer = None
            capture.status = STATUS_COMPLETED
            capture.closed_at = utcnow()
            if self._pending_id == capture_id:
                self._pending_id = None
            return offer

    def _close_pending(self, status: str) -> None:
        pending = self.pending()
        if pending is not None and pending.status in (STATUS_PENDING, STATUS_AWAITING_CONFIRMATION):
            pending.status = status
            pending.closed_at = utcnow()
            pending.offer = None
        self._pending_id = None

    def _trim(self) -> None:
        while len(self._captures) > self._max_history:
            oldest = next(iter(self._captures))
            if oldest == self._pending_id:
                break
            del self._captures[oldest]
