import os
import sys
from decimal import Decimal

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from adslip.scoring import (
    AmountCandidate,
    ScoringPolicy,
    best_candidate,
    parse_amount,
    rank_candidates,
    score_token,
)


def test_currency_suffixed_amount_with_thousands():
    found = best_candidate("โอนเงินสำเร็จ\nจำนวนเงิน 1,250.50 บาท\n")
    assert found.value == Decimal("1250.50")
    assert found.source_line == "จำนวนเงิน 1,250.50 บาท"


def test_fee_line_does_not_win():
    text = "Ref 20240115123456\nค่าธรรมเนียม 15.00\n500.00 บาท"
    assert best_candidate(text).value == Decimal("500.00")


def test_fee_only_line_is_excluded():
    assert best_candidate("ค่าธรรมเนียม 15.00") is None


def test_keyword_line_prefers_decimal():
    found = best_candidate("ยอดโอน 12 รายการ 450.00")
    assert found.value == Decimal("450.00")


def test_keyword_line_integer_fallback():
    found = best_candidate("Transfer ok\nAmount: 300\n")
    assert found.value == Decimal("300")


def test_keyword_case_insensitive_currency():
    assert best_candidate("Paid 89.00 BAHT").value == Decimal("89.00")


def test_scored_fallback_prefers_round_cents():
    assert best_candidate("12.50\n100.00").value == Decimal("100.00")


def test_equal_scores_prefer_smaller_value():
    assert best_candidate("300.50\n120.50").value == Decimal("120.50")


def test_long_digit_runs_are_rejected():
    assert best_candidate("123456789.00") is None
    assert best_candidate("12,345,678.00\n42.10").value == Decimal("42.10")


def test_ceiling_rejects_absurd_values():
    policy = ScoringPolicy(max_digits=12)
    assert best_candidate("2,500,000.00\n75.25", policy).value == Decimal("75.25")


def test_noise_yields_nothing():
    assert best_candidate("@@@ ### !!!\n-- ~~ --") is None
    assert best_candidate("") is None
    assert best_candidate(None) is None


def test_zero_amount_is_not_a_candidate():
    assert best_candidate("0.00 บาท") is None


def test_score_token():
    policy = ScoringPolicy()
    assert score_token("500.00", "00", policy) == 10
    assert score_token("500.00 บาท", "00", policy) == 60
    assert score_token("amount 500.50 baht", "50", policy) == 110
    assert score_token("ค่าธรรมเนียม 15.00", "00", policy) == -70


def test_rank_total_order():
    ranked = rank_candidates([
        AmountCandidate(Decimal("9"), 10, "a"),
        AmountCandidate(Decimal("5"), 60, "b"),
        AmountCandidate(Decimal("3"), 10, "c"),
    ])
    assert [c.source_line for c in ranked] == ["b", "c", "a"]


def test_parse_amount():
    assert parse_amount("1,234.56") == Decimal("1234.56")
    assert parse_amount("12x") is None


def test_policy_from_config_keywords():
    policy = ScoringPolicy.from_config({
        "CURRENCY_KEYWORDS": ("rp",),
        "AMOUNT_KEYWORDS": ("jumlah",),
        "FEE_KEYWORDS": ("biaya",),
    })
    assert best_candidate("biaya 2.00\n150.00 rp", policy).value == Decimal("150.00")
    assert best_candidate("Jumlah 75", policy).value == Decimal("75")


def test_currency_suffix_beats_earlier_keyword_line():
    found = best_candidate("Amount 300\n500.00 บาท")
    assert found.value == Decimal("500.00")
    assert found.source_line == "500.00 บาท"
