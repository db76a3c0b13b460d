import pytest

from conftest import StubDetector, StubRecognition

from shopdesk.services.barcode_service import BarcodeResolver
from shopdesk.services.identification_service import (
    ACTION_ADD_TO_CART,
    ACTION_OFFER_NEW_PRODUCT,
    MATCHED_BY_BARCODE,
    MATCHED_BY_NAME,
    ProductIdentificationResolver,
)
from shopdesk.services.recognition_schemas import ProductGuess
from shopdesk.services.recognition_service import RecognitionEmpty


def _resolver(recognition, detector=None):
    return ProductIdentificationResolver(BarcodeResolver(recognition, detector), recognition)


def test_barcode_match_skips_visual_identification(context, image):
    recognition = StubRecognition(guess=ProductGuess(name="Something else"))

    result = _resolver(recognition, StubDetector(["7894900011517"])).resolve(image, context.catalog.products())

    assert result.action == ACTION_ADD_TO_CART
    assert result.product.id == "1"
    assert result.matched_by == MATCHED_BY_BARCODE
    assert "identify_product" not in recognition.calls


def test_name_match_is_case_insensitive_exact(context, image):
    recognition = StubRecognition(guess=ProductGuess(name="detergente YPÊ", category="Limpeza"))

    result = _resolver(recognition).resolve(image, context.catalog.products())

    assert result.action == ACTION_ADD_TO_CART
    assert result.product.id == "3"
    assert result.matched_by == MATCHED_BY_NAME


def test_partial_name_is_not_a_match(context, image):
    recognition = StubRecognition(guess=ProductGuess(name="Detergente"))

    result = _resolver(recognition).resolve(image, context.catalog.products())

    assert result.action == ACTION_OFFER_NEW_PRODUCT


def test_unknown_product_offer_carries_unmatched_barcode(context, image):
    recognition = StubRecognition(
        guess=ProductGuess.model_validate({"name": "Leite Integral 1L", "category": "Laticínios", "estimatedPrice": 5.99}),
    )

    result = _resolver(recognition, StubDetector(["7896034610017"])).resolve(image, context.catalog.products())

    assert result.action == ACTION_OFFER_NEW_PRODUCT
    proposal = result.proposal
    assert proposal.name == "Leite Integral 1L"
    assert proposal.price_cents == 599
    assert proposal.cost_cents == 359
    assert proposal.stock == 1
    assert proposal.unit == "un"
    assert proposal.barcode == "7896034610017"


def test_offer_writes_nothing_until_accepted(context, image, persistence):
    saves_before = len(persistence.saves)
    recognition = StubRecognition(guess=ProductGuess(name="Leite Integral 1L"))

    result = _resolver(recognition).resolve(image, context.catalog.products())

    assert len(persistence.saves) == saves_before
    assert len(context.catalog.products()) == 3

    product = ProductIdentificationResolver.accept_proposal(result.proposal, context.catalog)
    assert context.catalog.products()[-1] == product
    assert product.price_cents == 0
    assert product.barcode is None


def test_nothing_identified_raises_empty(context, image):
    recognition = StubRecognition(guess=None, barcode=None)

    with pytest.raises(RecognitionEmpty):
        _resolver(recognition).resolve(image, context.catalog.products())
