"""Duplicate detection for receipts, scoped to one organization.

Two keys are checked: the SHA-256 of the uploaded bytes, then the SHA-256 of
the trimmed QR payload. The second catches the same slip photographed twice.
"""
from __future__ import annotations

import enum
import hashlib
from dataclasses import dataclass
from typing import Optional

from . import db
from .models import AdReceipt


class DuplicateKind(str, enum.Enum):
    DUPLICATE_FILE = "DUPLICATE_FILE"
    DUPLICATE_PAYLOAD = "DUPLICATE_PAYLOAD"


@dataclass(frozen=True)
class DuplicateHit:
    kind: DuplicateKind
    receipt_id: int


def sha256_hex(data) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def file_hash(data: bytes) -> str:
    return sha256_hex(data)


def payload_hash(payload: Optional[str]) -> Optional[str]:
    if payload is None or not payload.strip():
        return None
    return sha256_hex(payload.strip())


def _find(organization_id: int, column, value) -> Optional[int]:
    return db.session.execute(
        db.select(AdReceipt.id)
        .where(AdReceipt.organization_id == organization_id, column == value)
        .limit(1)
    ).scalar()


def find_by_file_hash(organization_id: int, digest: str) -> Optional[DuplicateHit]:
    receipt_id = _find(organization_id, AdReceipt.file_hash, digest)
    return DuplicateHit(DuplicateKind.DUPLICATE_FILE, receipt_id) if receipt_id else None


def find_by_payload_hash(organization_id: int, digest: Optional[str]) -> Optional[DuplicateHit]:
    if not digest:
        return None
    receipt_id = _find(organization_id, AdReceipt.qr_hash, digest)
    return DuplicateHit(DuplicateKind.DUPLICATE_PAYLOAD, receipt_id) if receipt_id else None


def check_duplicate(file_digest: str, qr_digest: Optional[str], organization_id: int) -> Optional[DuplicateHit]:
    return find_by_file_hash(organization_id, file_digest) or find_by_payload_hash(
        organization_id, qr_digest
    )
