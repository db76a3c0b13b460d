from conftest import StubDetector, StubRecognition

from shopdesk.services.barcode_service import BarcodeResolver, load_native_detector
from shopdesk.services.recognition_service import RecognitionFailure


def test_native_detection_wins_without_calling_service(image):
    recognition = StubRecognition(barcode="999")
    detector = StubDetector(values=["7894900011517"])

    code = BarcodeResolver(recognition, detector).resolve(image)

    assert code == "7894900011517"
    assert recognition.calls == []


def test_empty_native_result_falls_back_to_service(image):
    recognition = StubRecognition(barcode="7891000100103")
    detector = StubDetector(values=[])

    assert BarcodeResolver(recognition, detector).resolve(image) == "7891000100103"
    assert detector.calls == 1
    assert recognition.calls == ["read_barcode"]


def test_native_error_falls_back_to_service(image):
    recognition = StubRecognition(barcode="123")
    detector = StubDetector(error=RuntimeError("zbar exploded"))

    assert BarcodeResolver(recognition, detector).resolve(image) == "123"


def test_no_native_detector_uses_service(image):
    recognition = StubRecognition(barcode="456")

    assert BarcodeResolver(recognition, None).resolve(image) == "456"


def test_nothing_read_returns_none(image):
    recognition = StubRecognition(barcode=None)

    assert BarcodeResolver(recognition, StubDetector()).resolve(image) is None


def test_service_failure_returns_none(image):
    recognition = StubRecognition(error=RecognitionFailure("timeout"))

    assert BarcodeResolver(recognition, None).resolve(image) is None


def test_disabled_native_detector():
    assert load_native_detector(enabled=False) is None
