from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReceiptRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: int
    campaign_id: Optional[str] = None
    receipt_number: str
    platform: str
    payment_method: str
    amount: Optional[Decimal] = None
    currency: str
    amount_detected: bool
    detect_method: str
    detect_reason: Optional[str] = None
    receipt_url: str
    qr_code_data: Optional[str] = None
    file_hash: Optional[str] = None
    qr_hash: Optional[str] = None
    is_processed: bool
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UploadResult(BaseModel):
    """What the uploader is told about the amount it sent."""

    model_config = ConfigDict(populate_by_name=True)

    receipt: ReceiptRead
    amount: Optional[Decimal] = None
    amount_detected: bool = Field(serialization_alias="amountDetected")
    method: str
    reason: Optional[str] = None
    needs_manual_amount: bool = Field(serialization_alias="needsManualAmount")


class DuplicateRejection(BaseModel):
    kind: str
    existing_receipt_id: int
