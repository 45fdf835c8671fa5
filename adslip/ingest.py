"""Receipt upload pipeline: dedup, extract, store, record.

Order matters: the cheap file-hash check runs before any decoding or disk
write, and the payload-hash check runs before the record is inserted.
"""
from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from . import db
from .dedup import check_duplicate, file_hash, find_by_file_hash, payload_hash
from .errors import DuplicateReceipt
from .extraction import ExtractionResult
from .models import AdReceipt
from .schemas import ReceiptRead, UploadResult
from .storage import save_receipt_image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReceiptUpload:
    data: bytes
    mime: str
    organization_id: int
    filename: Optional[str] = None
    campaign_id: Optional[str] = None
    platform: Optional[str] = None


@dataclass(frozen=True)
class IngestOutcome:
    receipt: AdReceipt
    result: ExtractionResult

    def to_response(self) -> dict:
        body = UploadResult(
            receipt=ReceiptRead.model_validate(self.receipt),
            amount=self.result.amount,
            amount_detected=self.result.amount_detected,
            method=self.result.method.value,
            reason=self.result.reason,
            needs_manual_amount=not self.result.amount_detected,
        ).model_dump(mode="json", by_alias=True)
        if body["reason"] is None:
            del body["reason"]
        return body


def get_extractor():
    return current_app.extensions["adslip_extractor"]


def new_receipt_number() -> str:
    return f"RCP-{int(time.time() * 1000)}-{secrets.token_hex(2).upper()}"


def _raise_if_duplicate(hit):
    if hit is not None:
        logger.info("duplicate receipt", extra={"kind": hit.kind.value, "receipt_id": hit.receipt_id})
        raise DuplicateReceipt(hit.kind, hit.receipt_id)


def ingest_receipt(upload: ReceiptUpload, extractor=None) -> IngestOutcome:
    """Create the AdReceipt for ``upload``.

    Raises DuplicateReceipt when the file or its QR payload was already
    recorded for the organization, and MalformedImage for unreadable files.
    """
    started = time.monotonic()
    extractor = extractor or get_extractor()
    org_id = upload.organization_id

    fhash = file_hash(upload.data)
    _raise_if_duplicate(find_by_file_hash(org_id, fhash))

    result = extractor.extract(upload.data)
    qhash = payload_hash(result.decoded_payload)
    _raise_if_duplicate(check_duplicate(fhash, qhash, org_id))

    receipt_url = save_receipt_image(upload.data, fhash, upload.filename, upload.mime)
    receipt = AdReceipt(
        organization_id=org_id,
        campaign_id=upload.campaign_id,
        receipt_number=new_receipt_number(),
        platform=upload.platform or current_app.config["DEFAULT_PLATFORM"],
        payment_method="QR_CODE",
        amount=result.amount,
        currency=current_app.config["DEFAULT_CURRENCY"],
        amount_detected=result.amount_detected,
        detect_method=result.method.value,
        detect_reason=result.reason,
        receipt_url=receipt_url,
        original_filename=upload.filename,
        mime=upload.mime,
        size=len(upload.data),
        qr_code_data=result.decoded_payload,
        file_hash=fhash,
        qr_hash=qhash,
        is_processed=False,
    )
    db.session.add(receipt)
    try:
        db.session.commit()
    except IntegrityError:
        # a concurrent upload of the same slip won the insert
        db.session.rollback()
        hit = check_duplicate(fhash, qhash, org_id)
        if hit is None:
            raise
        _raise_if_duplicate(hit)

    logger.info(
        "receipt recorded",
        extra={
            "receipt_id": receipt.id,
            "method": result.method.value,
            "elapsed_ms": int((time.monotonic() - started) * 1000),
        },
    )
    return IngestOutcome(receipt, result)
