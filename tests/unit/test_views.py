from __future__ import annotations

from datetime import date, datetime

import pytest

from tourney.loader import normalize_row
from tourney.views import (
    EXPIRED_CLASS,
    build_view,
    classify_row,
    date_tab_labels,
    format_amount,
    format_card_date,
    format_multiplier,
    format_time,
    multiplier_tier,
)


@pytest.mark.parametrize("value,expected", [
    (None, ""),
    (0, "0"),
    (12500, "12,500"),
    (1234567, "1,234,567"),
    (1234.5, "1,234.5"),
    (100000.0, "100,000"),
])
def test_format_amount(value, expected):
    assert format_amount(value) == expected


@pytest.mark.parametrize("value,expected", [
    (None, ""),
    (0.0, ""),
    (float("inf"), ""),
    (20.0, "x20.0"),
    (20.04, "x20.0"),
    (20.06, "x20.1"),
    (7.5, "x7.5"),
])
def test_format_multiplier(value, expected):
    assert format_multiplier(value) == expected


@pytest.mark.parametrize("value,expected", [
    (None, ""),
    (9.99, ""),
    (10, "hl-mult-10to19"),
    (19.9, "hl-mult-10to19"),
    (20, "hl-mult-20plus"),
    (39.9, "hl-mult-30plus"),
    (45, "hl-mult-40plus"),
    (499, "hl-mult-50plus"),
    (float("nan"), ""),
])
def test_multiplier_tier(value, expected):
    assert multiplier_tier(value) == expected


def test_format_time_and_dates():
    dt = datetime(2026, 2, 15, 1, 5)
    assert format_time(dt) == "01:05"
    assert format_time(dt, with_date=True) == "2/15 01:05"
    assert format_time(None) == ""
    assert format_card_date(date(2026, 2, 14)) == "02/14(土)"
    assert date_tab_labels(datetime(2026, 2, 14, 23, 0)) == ("2月14日(土)", "2月15日(日)")


def test_classify_row_expiry_first():
    row = normalize_row({
        "late_registration_time": "2026/02/14 18:00",
        "entry_fee": "1000",
        "total_prize": "60000",
    })
    assert classify_row(row, datetime(2026, 2, 14, 18, 1)) == EXPIRED_CLASS
    # closing exactly now is not expired yet
    assert classify_row(row, datetime(2026, 2, 14, 18, 0)) == "hl-mult-50plus"


def test_build_view_table_and_card_fields(rows, now):
    v = build_view(rows[0], now)
    assert v.date == "2026-02-14"
    assert v.start == "19:00"
    assert v.late == "21:00"
    assert v.entry_fee == "5,000"
    assert v.add_on == "0"
    assert v.total_prize == "100,000"
    assert v.multiplier == "x20.0"
    assert v.prize_summary == "1st 50,000 / 2nd 30,000"
    assert v.row_class == "hl-mult-20plus"
    assert not v.expired
    assert v.card_date == "02/14(土)"
    assert v.card_start == "19:00"
    assert v.card_deadline == "締切 21:00"
    assert v.card_title == "Main Event"
    assert v.badge_text == "倍率: 20.0x"
    assert v.badge_class == "mult-20plus"
    assert v.prize_badge == "賞金: ¥100,000"
    assert v.link == "https://example.com/main"


def test_build_view_falls_back_to_raw_text(rows, now):
    v = build_view(rows[5], now)
    assert v.date == "TBD"
    assert v.start == ""
    assert v.entry_fee == ""
    assert v.total_prize == "不明"
    assert v.multiplier == ""
    assert v.row_class == ""
    assert v.card_title == "タイトルなし"
    assert v.badge_text == ""
    assert v.prize_badge == ""


def test_build_view_keeps_unparsed_time_text(now):
    row = normalize_row({"start_time": "19時〜", "late_registration_time": "未定"})
    v = build_view(row, now)
    assert v.start == "19時〜"
    assert v.late == "未定"
    assert v.card_deadline == ""
