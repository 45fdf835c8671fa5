import os
import sys
from decimal import Decimal
from io import BytesIO

import pytest
from PIL import Image

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from adslip.errors import EngineInitializationFailure, MalformedImage
from adslip.extraction import (
    REASON_NO_QR,
    REASON_QR_WITHOUT_AMOUNT,
    AmountExtractor,
    ExtractionMethod,
)

PAYLOAD = "000201010212" "5303764" "5406500.00" "5802TH" "6304ABCD"
PAYLOAD_NO_AMOUNT = "000201010211" "5303764" "5802TH" "6304ABCD"


def make_png(size=(200, 300)):
    buf = BytesIO()
    Image.new("RGB", size, "white").save(buf, format="PNG")
    return buf.getvalue()


class FakeQr:
    def __init__(self, payload=None, error=None):
        self.payload = payload
        self.error = error
        self.calls = 0

    def decode(self, data):
        self.calls += 1
        if self.error:
            raise self.error
        return self.payload


class FakeOcr:
    def __init__(self, *texts, error=None):
        self.texts = list(texts)
        self.error = error
        self.calls = 0

    def recognize(self, image):
        self.calls += 1
        if self.error:
            raise self.error
        return self.texts.pop(0) if self.texts else ""


def test_structured_payload_skips_ocr():
    ocr = FakeOcr("999.00 บาท")
    result = AmountExtractor(FakeQr(PAYLOAD), ocr).extract(make_png())
    assert result.method is ExtractionMethod.STRUCTURED_PAYLOAD
    assert result.amount == Decimal("500.00")
    assert result.amount_detected
    assert result.decoded_payload == PAYLOAD
    assert ocr.calls == 0


def test_structured_payload_works_without_ocr_engine():
    ocr = FakeOcr(error=EngineInitializationFailure("tesseract binary not found"))
    result = AmountExtractor(FakeQr(PAYLOAD), ocr).extract(make_png())
    assert result.method is ExtractionMethod.STRUCTURED_PAYLOAD


def test_no_qr_reads_amount_with_ocr():
    ocr = FakeOcr("โอนเงินสำเร็จ\nจำนวนเงิน 1,250.50 บาท")
    result = AmountExtractor(FakeQr(None), ocr).extract(make_png())
    assert result.method is ExtractionMethod.OCR
    assert result.amount == Decimal("1250.50")
    assert result.candidate.source_line == "จำนวนเงิน 1,250.50 บาท"
    assert result.decoded_payload is None
    assert ocr.calls == 1


def test_qr_without_amount_falls_back_to_ocr_and_keeps_payload():
    ocr = FakeOcr("500.00 บาท")
    result = AmountExtractor(FakeQr(PAYLOAD_NO_AMOUNT), ocr).extract(make_png())
    assert result.method is ExtractionMethod.OCR
    assert result.decoded_payload == PAYLOAD_NO_AMOUNT


def test_zero_tag_54_is_not_authoritative():
    ocr = FakeOcr("42.00 บาท")
    result = AmountExtractor(FakeQr("000201" "54040.00"), ocr).extract(make_png())
    assert result.method is ExtractionMethod.OCR
    assert result.amount == Decimal("42.00")


def test_wider_region_is_tried_second():
    ocr = FakeOcr("~~~", "ค่าธรรมเนียม 15.00\n500.00 บาท")
    result = AmountExtractor(FakeQr(None), ocr).extract(make_png())
    assert result.amount == Decimal("500.00")
    assert ocr.calls == 2


def test_nothing_readable_without_qr():
    result = AmountExtractor(FakeQr(None), FakeOcr("@@ ## !!", "")).extract(make_png())
    assert result.method is ExtractionMethod.NONE
    assert not result.amount_detected
    assert result.amount is None
    assert result.reason == REASON_NO_QR


def test_nothing_readable_with_qr():
    result = AmountExtractor(FakeQr(PAYLOAD_NO_AMOUNT), FakeOcr()).extract(make_png())
    assert result.method is ExtractionMethod.NONE
    assert result.reason == REASON_QR_WITHOUT_AMOUNT
    assert result.decoded_payload == PAYLOAD_NO_AMOUNT


def test_ocr_engine_unavailable_is_a_none_result():
    ocr = FakeOcr(error=EngineInitializationFailure("trained data missing for: tha"))
    result = AmountExtractor(FakeQr(None), ocr).extract(make_png())
    assert result.method is ExtractionMethod.NONE
    assert result.reason.startswith("OCR engine unavailable")


def test_qr_decoder_failure_counts_as_no_qr():
    ocr = FakeOcr("80.00 บาท")
    result = AmountExtractor(FakeQr(error=OSError("zbar crashed")), ocr).extract(make_png())
    assert result.method is ExtractionMethod.OCR


def test_malformed_image_stops_before_decoding():
    qr = FakeQr(PAYLOAD)
    with pytest.raises(MalformedImage):
        AmountExtractor(qr, FakeOcr()).extract(b"")
    assert qr.calls == 0


def test_from_config():
    extractor = AmountExtractor.from_config(
        {
            "QR_MAX_WIDTH": 800,
            "OCR_THRESHOLD": 150,
            "CURRENCY_KEYWORDS": ("thb",),
            "AMOUNT_KEYWORDS": ("amount",),
            "FEE_KEYWORDS": ("fee",),
        },
        FakeOcr(),
    )
    assert extractor.qr_decoder.max_width == 800
    assert extractor.threshold == 150
    assert extractor.policy.currency_keywords == ("thb",)


def test_image_is_decoded_once(monkeypatch):
    from adslip import extraction, qr as qr_module

    decoded = []
    real_load = extraction.load_image

    def counting_load(data):
        decoded.append(len(data))
        return real_load(data)

    monkeypatch.setattr(extraction, "load_image", counting_load)
    monkeypatch.setattr(qr_module, "load_image", counting_load)
    decoder = qr_module.QrDecoder(decode_fn=lambda image: [])
    ocr = FakeOcr("~~~", "")
    result = AmountExtractor(decoder, ocr).extract(make_png())
    assert result.method is ExtractionMethod.NONE
    assert ocr.calls == 2
    assert len(decoded) == 1
