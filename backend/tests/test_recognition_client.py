import json

import httpx
import pytest

from shopdesk.services.recognition_service import (
    RecognitionClient,
    RecognitionFailure,
    RecognitionParseError,
    RecognitionUnavailable,
)


def _gemini_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _client(handler, api_key="test-key"):
    return RecognitionClient(
        api_key=api_key,
        model="gemini-test",
        base_url="https://recognition.test/v1beta",
        transport=httpx.MockTransport(handler),
    )


def test_analyze_invoice_sends_image_and_schema(image):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        payload = {"date": "2024-01-10", "total": 110.0, "items": [{"name": "Coca Cola", "cost": 8.0, "quantity": 10}]}
        return httpx.Response(200, json=_gemini_response(json.dumps(payload)))

    invoice = _client(handler).analyze_invoice(image)

    assert seen["url"] == "https://recognition.test/v1beta/models/gemini-test:generateContent"
    assert seen["key"] == "test-key"
    parts = seen["body"]["contents"][0]["parts"]
    assert parts[0]["inlineData"] == {"mimeType": "image/png", "data": image.to_base64()}
    assert seen["body"]["generationConfig"]["responseMimeType"] == "application/json"
    assert "responseSchema" in seen["body"]["generationConfig"]
    assert "systemInstruction" in seen["body"]

    assert invoice.date == "2024-01-10"
    assert invoice.total == 110.0
    assert invoice.items[0].name == "Coca Cola"
    assert invoice.items[0].quantity == 10


def test_analyze_invoice_without_items(image):
    client = _client(lambda request: httpx.Response(200, json=_gemini_response('{"total": 0}')))

    assert client.analyze_invoice(image).items == []


def test_invalid_invoice_item_is_parse_error(image):
    payload = {"items": [{"name": "Coca", "cost": -1, "quantity": 1}]}
    client = _client(lambda request: httpx.Response(200, json=_gemini_response(json.dumps(payload))))

    with pytest.raises(RecognitionParseError):
        client.analyze_invoice(image)


@pytest.mark.parametrize("text", [
    '{"total": 10, "items": [{"name": "Leite", "cost": Infinity, "quantity": 1}]}',
    '{"total": 10, "items": [{"name": "Leite", "cost": 4.5, "quantity": Infinity}]}',
    '{"total": NaN, "items": [{"name": "Leite", "cost": 4.5, "quantity": 1}]}',
])
def test_non_finite_invoice_numbers_are_parse_errors(image, text):
    client = _client(lambda request: httpx.Response(200, json=_gemini_response(text)))

    with pytest.raises(RecognitionParseError):
        client.analyze_invoice(image)


def test_non_finite_estimated_price_is_parse_error(image):
    text = '{"name": "Leite Integral 1L", "estimatedPrice": Infinity}'
    client = _client(lambda request: httpx.Response(200, json=_gemini_response(text)))

    with pytest.raises(RecognitionParseError):
        client.identify_product(image)


def test_identify_product_reads_camel_case_price(image):
    payload = {"name": "Leite Integral 1L", "category": "Laticínios", "estimatedPrice": 5.99}
    client = _client(lambda request: httpx.Response(200, json=_gemini_response(json.dumps(payload))))

    guess = client.identify_product(image)

    assert guess.name == "Leite Integral 1L"
    assert guess.estimated_price == 5.99


@pytest.mark.parametrize("text", ["", "{}", '{"name": "  "}'])
def test_identify_product_without_name_returns_none(image, text):
    client = _client(lambda request: httpx.Response(200, json=_gemini_response(text)))

    assert client.identify_product(image) is None


@pytest.mark.parametrize("text, expected", [
    ("7894900011517", "7894900011517"),
    (" 789-4900-011517\n", "7894900011517"),
    ("null", None),
    ("", None),
])
def test_read_barcode_keeps_digits_only(image, text, expected):
    client = _client(lambda request: httpx.Response(200, json=_gemini_response(text)))

    assert client.read_barcode(image) == expected


def test_read_barcode_asks_for_plain_text(image):
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_gemini_response("123"))

    _client(handler).read_barcode(image)

    assert seen["body"]["generationConfig"] == {"responseMimeType": "text/plain"}


def test_http_error_is_recognition_failure(image):
    client = _client(lambda request: httpx.Response(503, json={"error": "overloaded"}))

    with pytest.raises(RecognitionFailure) as excinfo:
        client.analyze_invoice(image)

    assert excinfo.value.details == {"status_code": 503}


def test_transport_error_is_recognition_failure(image):
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(RecognitionFailure):
        _client(handler).read_barcode(image)


def test_non_json_text_is_parse_error(image):
    client = _client(lambda request: httpx.Response(200, json=_gemini_response("not json")))

    with pytest.raises(RecognitionParseError):
        client.identify_product(image)


def test_missing_api_key_is_unavailable(image):
    def handler(request):
        raise AssertionError("no request expected")

    client = _client(handler, api_key=None)

    assert client.configured is False
    with pytest.raises(RecognitionUnavailable):
        client.analyze_invoice(image)
