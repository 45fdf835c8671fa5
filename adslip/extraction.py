"""Decide the paid amount of a slip: QR payload first, OCR as a last resort."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .emv import amount_from_payload
from .errors import EngineInitializationFailure
from .imaging import FALLBACK_REGION, PRIMARY_REGION, crop_region, load_image
from .qr import QrDecoder
from .scoring import AmountCandidate, ScoringPolicy, best_candidate

logger = logging.getLogger(__name__)

REASON_NO_QR = "No QR detected and OCR could not read amount."
REASON_QR_WITHOUT_AMOUNT = "QR has no embedded amount. OCR could not confidently read amount."
REASON_OCR_UNAVAILABLE = "OCR engine unavailable"


class ExtractionMethod(str, enum.Enum):
    STRUCTURED_PAYLOAD = "STRUCTURED_PAYLOAD"
    OCR = "OCR"
    NONE = "NONE"


@dataclass(frozen=True)
class ExtractionResult:
    method: ExtractionMethod
    amount: Optional[Decimal] = None
    decoded_payload: Optional[str] = None
    reason: Optional[str] = None
    candidate: Optional[AmountCandidate] = None

    @property
    def amount_detected(self) -> bool:
        return self.method is not ExtractionMethod.NONE

    @classmethod
    def structured(cls, amount, payload):
        return cls(ExtractionMethod.STRUCTURED_PAYLOAD, amount=amount, decoded_payload=payload)

    @classmethod
    def ocr(cls, candidate, payload=None):
        return cls(
            ExtractionMethod.OCR,
            amount=candidate.value,
            decoded_payload=payload,
            candidate=candidate,
        )

    @classmethod
    def none(cls, reason, payload=None):
        return cls(ExtractionMethod.NONE, decoded_payload=payload, reason=reason)


class AmountExtractor:
    """Runs QR → EMV tag 54 → OCR over a primary then a wider region.

    ``ocr_engine`` only needs a ``recognize(image) -> str`` method.
    """

    def __init__(
        self,
        qr_decoder,
        ocr_engine,
        policy: Optional[ScoringPolicy] = None,
        regions=(PRIMARY_REGION, FALLBACK_REGION),
        threshold: int = 170,
    ):
        self.qr_decoder = qr_decoder
        self.ocr_engine = ocr_engine
        self.policy = policy or ScoringPolicy()
        self.regions = tuple(regions)
        self.threshold = threshold

    @classmethod
    def from_config(cls, config, ocr_engine) -> "AmountExtractor":
        return cls(
            QrDecoder(max_width=config["QR_MAX_WIDTH"]),
            ocr_engine,
            policy=ScoringPolicy.from_config(config),
            threshold=config["OCR_THRESHOLD"],
        )

    def extract(self, data: bytes) -> ExtractionResult:
        image = load_image(data)  # MalformedImage stops the upload here

        try:
            payload = self.qr_decoder.decode(image)
        except (ImportError, OSError, ValueError) as exc:
            # zbar missing or choking on the bitmap: same as finding no QR
            logger.warning("QR decode failed: %s", exc)
            payload = None
        if payload:
            amount = amount_from_payload(payload)
            if amount is not None:
                logger.info("amount from QR tag 54", extra={"amount": str(amount)})
                return ExtractionResult.structured(amount, payload)

        try:
            candidate = self._ocr(image)
        except EngineInitializationFailure as exc:
            logger.warning("OCR skipped: %s", exc)
            return ExtractionResult.none(f"{REASON_OCR_UNAVAILABLE}: {exc}", payload)

        if candidate is not None:
            logger.info(
                "amount from OCR",
                extra={"amount": str(candidate.value), "score": candidate.score},
            )
            return ExtractionResult.ocr(candidate, payload)
        return ExtractionResult.none(REASON_QR_WITHOUT_AMOUNT if payload else REASON_NO_QR, payload)

    def _ocr(self, image) -> Optional[AmountCandidate]:
        for region in self.regions:
            # the wider crop is only made when the primary one reads nothing
            raster = crop_region(image, region, self.threshold)
            candidate = best_candidate(self.ocr_engine.recognize(raster), self.policy)
            if candidate is not None:
                return candidate
        return None
