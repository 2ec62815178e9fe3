from __future__ import annotations

from datetime import datetime

import pytest

from tourney.parsing import (
    parse_amount,
    parse_local_datetime,
    parse_prize_breakdown,
    round_half_up,
    scan_prize_tokens,
)


@pytest.mark.parametrize("text,expected", [
    ("1,234円", 1234),
    (" 5 000 ", 5000),
    ("¥3,000", 3000),
    ("1.5", 1.5),
    ("-500", -500),
])
def test_parse_amount_values(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "free", "inf", "nan", "1_000", "0x10", None])
def test_parse_amount_rejects_non_numbers(text):
    assert parse_amount(text) is None


def test_parse_amount_returns_int_for_whole_amounts():
    assert isinstance(parse_amount("1,234円"), int)


@pytest.mark.parametrize("text,expected", [
    ("50000/30000/20000", 100000),
    ("5k, 3k, 2k", 10000),
    ("5,000円 ×2 / 2,500", 12500),
    ("1万/5千", 15000),
    ("50,000 + Ticket", 50000),
    ("1.5万", 15000),
    ("2M", 2000000),
    ("5000 x 3", 15000),
    ("【10,000】", 10000),
    ("2.5", 3),
])
def test_parse_prize_breakdown_sums(text, expected):
    assert parse_prize_breakdown(text) == expected


@pytest.mark.parametrize("text", ["", None, "Ticket only", "WSOP seat"])
def test_parse_prize_breakdown_without_numbers(text):
    assert parse_prize_breakdown(text) is None


@pytest.mark.parametrize("text", ["1万 x" + "9" * 400, "5,000 ×" + "9" * 5000, "0 x" + "9" * 400])
def test_parse_prize_breakdown_overflowing_count(text):
    assert parse_prize_breakdown(text) is None


def test_scan_prize_tokens_skips_text_between_tokens():
    tokens = list(scan_prize_tokens("1st: 5万 ×2, then Ticket, 3k"))
    assert [(t.base, t.unit, t.times) for t in tokens] == [
        (1.0, "", 1),
        (5.0, "万", 2),
        (3.0, "k", 1),
    ]


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


@pytest.mark.parametrize("text,expected", [
    ("2025/08/19 13:00", datetime(2025, 8, 19, 13, 0)),
    ("2025-08-19", datetime(2025, 8, 19)),
    ("  2025/8/9   7:05 ", datetime(2025, 8, 9, 7, 5)),
    ("2025/08/19 13", datetime(2025, 8, 19, 13, 0)),
    ("2025/08/19 xx:yy", datetime(2025, 8, 19)),
    # no range checks: roll over like calendar arithmetic
    ("2025/02/31", datetime(2025, 3, 3)),
    ("2025/13/01", datetime(2026, 1, 1)),
    ("2025/08/19 25:00", datetime(2025, 8, 20, 1, 0)),
])
def test_parse_local_datetime(text, expected):
    assert parse_local_datetime(text) == expected


@pytest.mark.parametrize("text", [None, "", "   ", "abc", "2025/08", "2025/0/19", "0/1/1", "2025/aa/01", "99999/01/01"])
def test_parse_local_datetime_invalid(text):
    assert parse_local_datetime(text) is None
