import unittest

from shopdesk.services.capture_service import (
    MODE_BARCODE_SCAN,
    MODE_INVOICE_SCAN,
    MODE_PRODUCT_SCAN,
    STATUS_AWAITING_CONFIRMATION,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_PENDING,
    STATUS_SUPERSEDED,
    CaptureError,
    CaptureNotFoundError,
    CaptureRegistry,
    StaleCaptureError,
)


class CaptureRegistryTests(unittest.TestCase):
    def setUp(self):
        self.registry = CaptureRegistry(max_history=5)

    def test_open_creates_pending_capture(self):
        capture = self.registry.open(MODE_INVOICE_SCAN)
        self.assertEqual(capture.status, STATUS_PENDING)
        self.assertIs(self.registry.pending(), capture)

    def test_opening_another_capture_supersedes_the_pending_one(self):
        first = self.registry.open(MODE_PRODUCT_SCAN)
        second = self.registry.open(MODE_BARCODE_SCAN)

        self.assertEqual(first.status, STATUS_SUPERSEDED)
        self.assertIs(self.registry.pending(), second)

        with self.assertRaises(StaleCaptureError) as ctx:
            self.registry.complete(first.id)
        self.assertEqual(ctx.exception.status, STATUS_SUPERSEDED)

    def test_late_result_for_cancelled_capture_is_rejected(self):
        capture = self.registry.open(MODE_INVOICE_SCAN)
        self.registry.cancel(capture.id)

        self.assertEqual(capture.status, STATUS_CANCELLED)
        self.assertIsNone(self.registry.pending())
        with self.assertRaises(StaleCaptureError):
            self.registry.complete(capture.id)

    def test_complete_only_once(self):
        capture = self.registry.open(MODE_BARCODE_SCAN)
        self.registry.complete(capture.id)
        self.assertEqual(capture.status, STATUS_COMPLETED)

        with self.assertRaises(StaleCaptureError):
            self.registry.complete(capture.id)

    def test_offer_is_held_until_taken(self):
        capture = self.registry.open(MODE_PRODUCT_SCAN)
        self.registry.hold_offer(capture.id, {"name": "Leite"})
        self.assertEqual(capture.status, STATUS_AWAITING_CONFIRMATION)

        self.assertEqual(self.registry.take_offer(capture.id), {"name": "Leite"})
        self.assertEqual(capture.status, STATUS_COMPLETED)
        with self.assertRaises(StaleCaptureError):
            self.registry.take_offer(capture.id)

    def test_declined_offer_cannot_be_taken(self):
        capture = self.registry.open(MODE_PRODUCT_SCAN)
        self.registry.hold_offer(capture.id, {"name": "Leite"})
        self.registry.cancel(capture.id)

        with self.assertRaises(StaleCaptureError):
            self.registry.take_offer(capture.id)

    def test_new_capture_supersedes_open_offer(self):
        capture = self.registry.open(MODE_PRODUCT_SCAN)
        self.registry.hold_offer(capture.id, {"name": "Leite"})
        self.registry.open(MODE_PRODUCT_SCAN)

        self.assertEqual(capture.status, STATUS_SUPERSEDED)
        with self.assertRaises(StaleCaptureError):
            self.registry.take_offer(capture.id)

    def test_require_pending_checks_mode(self):
        capture = self.registry.open(MODE_INVOICE_SCAN)
        with self.assertRaises(CaptureError):
            self.registry.require_pending(capture.id, MODE_PRODUCT_SCAN)
        self.assertIs(self.registry.require_pending(capture.id, MODE_INVOICE_SCAN), capture)

    def test_unknown_capture_and_mode(self):
        with self.assertRaises(CaptureNotFoundError):
            self.registry.get("nope")
        with self.assertRaises(CaptureError):
            self.registry.open("VIDEO")

    def test_history_is_trimmed(self):
        ids = [self.registry.open(MODE_PRODUCT_SCAN).id for _ in range(8)]

        with self.assertRaises(CaptureNotFoundError):
            self.registry.get(ids[0])
        self.assertEqual(self.registry.get(ids[-1]).status, STATUS_PENDING)


if __name__ == "__main__":
    unittest.main()
