# Shared pytest fixtures
from __future__ import annotations

import csv
from datetime import datetime
from pathlib import Path

import pytest

from tourney.loader import normalize_rows
from tourney.log import reset_logging
from tourney.state import BoardState

COLUMNS = [
    "date", "start_time", "late_registration_time", "area", "shop_name", "title",
    "entry_fee", "add_on", "guaranteed_amount", "total_prize", "prize_list", "prize_text", "link",
]

# "now" for every time-dependent test: Saturday 2026-02-14 20:00
NOW = datetime(2026, 2, 14, 20, 0)


def _row(**kw) -> dict:
    row = {c: "" for c in COLUMNS}
    row.update(kw)
    return row


SAMPLE_RECORDS = [
    # 0: multiplier 20, still open
    _row(date="2026/02/14", start_time="2026/02/14 19:00", late_registration_time="2026/02/14 21:00",
         area="渋谷", shop_name="Shibuya Poker", title="Main Event", entry_fee="5,000", add_on="0",
         guaranteed_amount="80,000", prize_list="50,000/30,000/20,000", prize_text="1st 50,000\n2nd 30,000",
         link="https://example.com/main"),
    # 1: multiplier 60 but late registration already closed
    _row(date="2026/02/14", start_time="2026/02/14 17:00", late_registration_time="2026/02/14 18:00",
         area="新宿", shop_name="Shinjuku Club", title="Deepstack", entry_fee="3,000", add_on="2,000",
         total_prize="300,000円"),
    # 2: satellite, no multiplier
    _row(date="2026/02/14", start_time="2026/02/14 22:00", late_registration_time="2026/02/14 23:00",
         area="渋谷", shop_name="Room 2", title="WSOPサテ", entry_fee="10,000", prize_text="WSOP seat"),
    # 3: late night, closes 05:59 next day
    _row(date="2026/02/14", start_time="2026/02/15 01:00", late_registration_time="2026/02/15 05:59",
         area="池袋", shop_name="Ikebukuro Hall", title="Midnight Turbo", entry_fee="2000", prize_list="1万/5千"),
    # 4: closes exactly 06:00 next day
    _row(date="2026/02/15", start_time="2026/02/15 03:00", late_registration_time="2026/02/15 06:00",
         area="渋谷", shop_name="Early Bird", title="Morning", entry_fee="1,000", prize_list="45k"),
    # 5: garbage everywhere
    _row(date="TBD", entry_fee="free", total_prize="???", notes="ask staff"),
]


@pytest.fixture(autouse=True)
def _reset_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def records() -> list[dict]:
    return [dict(r) for r in SAMPLE_RECORDS]


@pytest.fixture()
def rows(records):
    return normalize_rows(records)


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def state() -> BoardState:
    """Default board state with "now" frozen."""
    return BoardState(now_override=NOW)


@pytest.fixture()
def csv_file(tmp_path: Path, records) -> Path:
    path = tmp_path / "listings.csv"
    fields = COLUMNS + ["notes"]
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()
        for r in records:
            w.writerow({k: r.get(k, "") for k in fields})
    return path
