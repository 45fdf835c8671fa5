"""Pick the paid amount out of free OCR text.

Three tiers are tried in order and the first one that yields a value wins:

1. a ``1,234.56`` style number directly followed by a currency keyword;
2. a number on a line carrying an "amount" keyword (decimals first);
3. every decimal number in the text, scored by the keywords on its line.

Keyword lists are configuration; the point weights live on ``ScoringPolicy``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

NUMBER = r"\d{1,3}(?:,\d{3})+|\d+"
DECIMAL_RE = re.compile(rf"(?<![\d.,])({NUMBER})\.(\d{{2}})(?!\d)")
INTEGER_RE = re.compile(rf"(?<![\d.,])({NUMBER})(?![\d.,]*\d)")


@dataclass(frozen=True)
class ScoringPolicy:
    currency_keywords: tuple = ("บาท", "baht", "thb")
    amount_keywords: tuple = ("จำนวนเงิน", "จำนวน", "ยอดเงิน", "ยอดชำระ", "ยอดโอน", "amount", "total")
    fee_keywords: tuple = ("ค่าธรรมเนียม", "fee", "charge", "surcharge")
    currency_bonus: int = 50
    amount_keyword_bonus: int = 60
    fee_penalty: int = -80
    round_cents_bonus: int = 10
    max_digits: int = 7
    ceiling: Decimal = Decimal("1000000")

    @classmethod
    def from_config(cls, config) -> "ScoringPolicy":
        return cls(
            currency_keywords=tuple(config["CURRENCY_KEYWORDS"]),
            amount_keywords=tuple(config["AMOUNT_KEYWORDS"]),
            fee_keywords=tuple(config["FEE_KEYWORDS"]),
        )

    def currency_suffix_re(self) -> re.Pattern:
        words = "|".join(re.escape(k) for k in self.currency_keywords)
        return re.compile(
            rf"(?<![\d.,])((?:{NUMBER})\.\d{{2}})\s*(?:{words})", re.IGNORECASE
        )


@dataclass(frozen=True)
class AmountCandidate:
    value: Decimal
    score: int
    source_line: str


def _contains(line: str, keywords: Iterable[str]) -> bool:
    lowered = line.lower()
    return any(k.lower() in lowered for k in keywords)


def parse_amount(token: str) -> Optional[Decimal]:
    try:
        value = Decimal(token.replace(",", ""))
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def score_token(line: str, fraction: str, policy: ScoringPolicy) -> int:
    """Points for one decimal token given the line it was read from."""
    score = 0
    if _contains(line, policy.currency_keywords):
        score += policy.currency_bonus
    if _contains(line, policy.amount_keywords):
        score += policy.amount_keyword_bonus
    if _contains(line, policy.fee_keywords):
        score += policy.fee_penalty
    if fraction == "00":
        score += policy.round_cents_bonus
    return score


def rank_candidates(candidates: Iterable[AmountCandidate]) -> list:
    return sorted(candidates, key=lambda c: (-c.score, c.value))


def _candidate(line: str, token: str, policy: ScoringPolicy) -> Optional[AmountCandidate]:
    value = parse_amount(token)
    if value is None or value <= 0:
        return None
    fraction = token.rsplit(".", 1)[1] if "." in token else ""
    return AmountCandidate(value, score_token(line, fraction, policy), line)


def _currency_suffixed(lines, policy):
    pattern = policy.currency_suffix_re()
    for line in lines:
        for match in pattern.finditer(line):
            found = _candidate(line, match.group(1), policy)
            if found:
                return found
    return None


def _keyword_adjacent(lines, policy):
    for line in lines:
        if not _contains(line, policy.amount_keywords) or _contains(line, policy.fee_keywords):
            continue
        tokens = [m.group(0) for m in DECIMAL_RE.finditer(line)]
        tokens += [m.group(1) for m in INTEGER_RE.finditer(line)]
        for token in tokens:
            found = _candidate(line, token, policy)
            if found:
                return found
    return None


def _scored(lines, policy):
    candidates = []
    for line in lines:
        for match in DECIMAL_RE.finditer(line):
            token = match.group(0)
            if sum(c.isdigit() for c in token) > policy.max_digits:
                continue
            found = _candidate(line, token, policy)
            # fee lines end up negative and are dropped
            if found is None or found.value >= policy.ceiling or found.score < 0:
                continue
            candidates.append(found)
    ranked = rank_candidates(candidates)
    return ranked[0] if ranked else None


def best_candidate(text: str, policy: Optional[ScoringPolicy] = None) -> Optional[AmountCandidate]:
    """Best amount in ``text`` or None when nothing plausible is there."""
    policy = policy or ScoringPolicy()
    lines = [" ".join(line.split()) for line in (text or "").splitlines()]
    lines = [line for line in lines if line]
    for tier in (_currency_suffixed, _keyword_adjacent, _scored):
        found = tier(lines, policy)
        if found is not None:
            return found
    return None
