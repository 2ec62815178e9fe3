"""
Text parsers for spreadsheet cells
==================================

The listings spreadsheet is typed by hand, so every cell is free text:
"5,000円", "2025/08/19 13:00", "5万/3万/2万 + Ticket", ...

Every function here is total: it returns None for anything it cannot read
and never raises. A bad cell only blanks that one field of the row.

This file provides:
- parse_amount: one money amount
- parse_prize_breakdown: sum of a free-form prize list (token scanner)
- parse_local_datetime: "YYYY/MM/DD[ HH:MM]" as a naive local datetime
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator, List, Optional, Union
import math
import re

Number = Union[int, float]

_AMOUNT_NOISE_RE = re.compile(r"[,\s円¥￥]")
# decimal literal only (no hex, no "inf", no "1_000")
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

_BRACKETS_RE = re.compile(r"[［］【】]")

# One prize token: number, optional magnitude unit, optional "x2" / "×2"
_PRIZE_TOKEN_RE = re.compile(
    r"""
    (?P<number>\d[\d,]*(?:\.\d+)?)
    \s*(?P<unit>万|千|[kKmM]|円)?
    \s*(?:[x×]\s*(?P<times>\d+))?
    """,
    re.VERBOSE,
)

UNIT_FACTORS = {
    "万": 10_000,
    "千": 1_000,
    "k": 1_000,
    "K": 1_000,
    "m": 1_000_000,
    "M": 1_000_000,
    "円": 1,
    "": 1,
}

_DATE_SPLIT_RE = re.compile(r"[/-]")


def _plain_number(v: float) -> Number:
    """Return an int for integral values so 1234.0 prints as 1234."""
    return int(v) if v.is_integer() else v


def round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def parse_amount(text: Optional[str]) -> Optional[Number]:
    """Parse one amount such as "1,234円" -> 1234.

    Negative or otherwise odd amounts pass through as-is.
    """
    if text is None:
        return None
    s = _AMOUNT_NOISE_RE.sub("", str(text))
    if not s or not _DECIMAL_RE.fullmatch(s):
        return None
    v = float(s)
    if not math.isfinite(v):
        return None
    return _plain_number(v)


@dataclass(frozen=True)
class PrizeToken:
    """One numeric item found in a prize list."""
    base: float
    unit: str
    times: float

    @property
    def value(self) -> float:
        return self.base * UNIT_FACTORS[self.unit] * self.times


def scan_prize_tokens(text: str) -> Iterator[PrizeToken]:
    """Yield the numeric prize tokens of `text` left to right.

    Anything between tokens ("+ Ticket", "1st:", "/") is skipped.
    """
    s = _BRACKETS_RE.sub("", text)
    for m in _PRIZE_TOKEN_RE.finditer(s):
        base = float(m.group("number").replace(",", ""))
        times = float(m.group("times")) if m.group("times") else 1.0
        if times <= 0:
            times = 1.0
        yield PrizeToken(base=base, unit=m.group("unit") or "", times=times)


def parse_prize_breakdown(text: Optional[str]) -> Optional[int]:
    """Sum a free-form prize list.

    Examples:
        "50000/30000/20000"    -> 100000
        "5k, 3k, 2k"           -> 10000
        "5,000円 ×2 / 2,500"   -> 12500
        "1万/5千"              -> 15000
        "50,000 + Ticket"      -> 50000
        "Ticket only"          -> None
    """
    if not text:
        return None
    tokens: List[PrizeToken] = list(scan_prize_tokens(str(text)))
    if not tokens:
        return None
    total = sum(t.value for t in tokens)
    if not math.isfinite(total):
        return None
    return round_half_up(total)


def _to_int(x: str) -> Optional[int]:
    try:
        return int(x)
    except ValueError:
        return None


def parse_local_datetime(text: Optional[str]) -> Optional[datetime]:
    """Parse "2025/08/19 13:00" or "2025/08/19" ("-" also works in the date).

    Month and day are not range-checked: they roll over the way calendar
    arithmetic does, so "2025/02/31" becomes 2025-03-03.
    """
    if not text:
        return None
    parts = str(text).split()
    if not parts:
        return None
    date_part = parts[0]
    time_part = parts[1] if len(parts) > 1 else None

    ymd = [_to_int(x) for x in _DATE_SPLIT_RE.split(date_part)]
    ymd += [None] * (3 - len(ymd))
    yy, mm, dd = ymd[:3]
    if not yy or not mm or not dd:
        return None

    hh = mi = 0
    if time_part:
        hm = time_part.split(":")
        hh = _to_int(hm[0]) or 0
        mi = (_to_int(hm[1]) or 0) if len(hm) > 1 else 0

    try:
        year = yy + (mm - 1) // 12
        month = (mm - 1) % 12 + 1
        return datetime(year, month, 1) + timedelta(days=dd - 1, hours=hh, minutes=mi)
    except (ValueError, OverflowError):
        return None
