"""EMV merchant-presented QR payloads: ``<tag:2><length:2><value>`` repeated.

Parsing is permissive. It stops at the first header whose length is not two
ASCII digits, or whose value would run past the end of the payload, and keeps
every field read before that point.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional

AMOUNT_TAG = "54"


@dataclass(frozen=True)
class TlvField:
    tag: str
    value: str


@dataclass(frozen=True)
class TlvDocument:
    fields: tuple = ()
    values: dict = field(default_factory=dict)

    def value_for_tag(self, tag: str) -> Optional[str]:
        return self.values.get(tag)

    def __len__(self):
        return len(self.fields)


def _is_ascii_digits(s: str) -> bool:
    return len(s) == 2 and all("0" <= c <= "9" for c in s)


def parse_tlv(payload: str) -> TlvDocument:
    fields = []
    values = {}
    i = 0
    while i + 4 <= len(payload):
        tag = payload[i:i + 2]
        length = payload[i + 2:i + 4]
        if not _is_ascii_digits(length):
            break
        start = i + 4
        end = start + int(length)
        if end > len(payload):
            break
        value = payload[start:end]
        fields.append(TlvField(tag, value))
        values[tag] = value  # repeated tags: last one wins
        i = end
    return TlvDocument(tuple(fields), values)


def parse_amount_value(value: Optional[str]) -> Optional[Decimal]:
    """Return ``value`` as a positive finite Decimal, else None."""
    if value is None:
        return None
    try:
        amount = Decimal(value.strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def amount_from_payload(payload: Optional[str]) -> Optional[Decimal]:
    if not payload:
        return None
    return parse_amount_value(parse_tlv(payload).value_for_tag(AMOUNT_TAG))
