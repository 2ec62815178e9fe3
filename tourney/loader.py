"""
Dataset loader (sheet -> Tournament list)
=========================================

This module reads the published listings sheet (CSV by path or URL, or an
.xlsx export) and converts each row into a `Tournament` object.

Key ideas:
- Every cell is read as text; typing happens in `normalize_row`.
- Normalization never fails: unreadable cells become None field by field.
- Loading itself can fail (network, missing file); that is reported once as
  a `LoadError` and nothing is returned.
"""

from __future__ import annotations
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging
import pandas as pd

from .config import COST_ENTRY_FEE, BoardConfig, MultiplierConfig
from .models import NEG_INF, Number, Tournament
from .parsing import parse_amount, parse_local_datetime, parse_prize_breakdown

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1)


class LoadError(Exception):
    """The listings source could not be fetched or read."""


def _to_text(x: Any) -> Optional[str]:
    """Convert a cell to text, returning None for blanks/NaN."""
    if x is None:
        return None
    if isinstance(x, float) and pd.isna(x):
        return None
    return str(x)


def _stamp(dt: Optional[datetime]) -> float:
    """Sortable seconds for a naive datetime; -inf when missing."""
    if dt is None:
        return NEG_INF
    return (dt - _EPOCH).total_seconds()


def compute_multiplier(
    total_prize: Optional[Number],
    entry_fee: Optional[Number],
    add_on: Optional[Number],
    title: Optional[str],
    config: Optional[MultiplierConfig] = None,
) -> Optional[float]:
    """Prize multiplier = total prize / entry cost.

    None when there is no cost or no prize, when the event is a satellite
    (its prize is a seat, not money), or when the ratio reaches the ceiling.
    """
    config = config or MultiplierConfig()
    if config.cost_basis == COST_ENTRY_FEE:
        cost = entry_fee or 0
    else:
        cost = (entry_fee or 0) + (add_on or 0)
    if title and config.satellite_marker and config.satellite_marker in title:
        return None
    if total_prize is None or cost <= 0:
        return None
    ratio = total_prize / cost
    if ratio >= config.ceiling:
        return None
    return float(ratio)


def normalize_row(raw: Mapping[str, Any], row_id: int = 0, config: Optional[BoardConfig] = None) -> Tournament:
    """Build a Tournament from one raw row (column name -> text)."""
    config = config or BoardConfig()
    text: Dict[str, Optional[str]] = {str(k): _to_text(v) for k, v in raw.items()}

    entry_fee = parse_amount(text.get("entry_fee"))
    add_on = parse_amount(text.get("add_on"))
    guaranteed_amount = parse_amount(text.get("guaranteed_amount"))

    # an itemized prize list beats the typed-in total
    total_from_list = parse_prize_breakdown(text.get("prize_list") or text.get("prize_text"))
    total_prize = total_from_list if total_from_list is not None else parse_amount(text.get("total_prize"))

    date_dt = parse_local_datetime(text.get("date"))
    start_at = parse_local_datetime(text.get("start_time"))
    late_at = parse_local_datetime(text.get("late_registration_time"))
    date_only = date_dt.date() if date_dt else None

    multiplier = compute_multiplier(total_prize, entry_fee, add_on, text.get("title"), config.multiplier)

    return Tournament(
        row_id=row_id,
        raw=MappingProxyType(text),
        entry_fee=entry_fee,
        add_on=add_on,
        guaranteed_amount=guaranteed_amount,
        total_prize=total_prize,
        date_only=date_only,
        start_at=start_at,
        late_registration_at=late_at,
        multiplier=multiplier,
        date_only_ts=_stamp(datetime.combine(date_only, datetime.min.time())) if date_only else NEG_INF,
        start_time_ts=_stamp(start_at),
        late_reg_ts=_stamp(late_at),
    )


def normalize_rows(records: Iterable[Mapping[str, Any]], config: Optional[BoardConfig] = None) -> List[Tournament]:
    return [normalize_row(r, row_id=i, config=config) for i, r in enumerate(records)]


def _is_blank_record(rec: Mapping[str, Any]) -> bool:
    return all(_to_text(v) is None or not str(v).strip() for v in rec.values())


def read_records(source: str) -> List[Dict[str, Any]]:
    """Read the sheet into a list of column -> text dicts.

    `source` is a local path or an http(s) URL. Files ending in .xlsx are read
    with openpyxl; everything else is treated as CSV with a header row.
    """
    try:
        if str(source).lower().endswith(".xlsx"):
            df = pd.read_excel(source, engine="openpyxl", dtype=str)
        else:
            df = pd.read_csv(source, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except Exception as e:
        # pandas surfaces network, file and parser failures with many types
        raise LoadError(f"could not read listings from {source}: {e}") from e

    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    records = df.to_dict(orient="records")
    return [r for r in records if not _is_blank_record(r)]


def load_listings(source: str, config: Optional[BoardConfig] = None) -> List[Tournament]:
    """Fetch the sheet once and normalize every row."""
    records = read_records(source)
    rows = normalize_rows(records, config=config)
    with_mult = sum(1 for r in rows if r.multiplier is not None)
    logger.info("loaded %d listings (%d with a multiplier) from %s", len(rows), with_mult, source)
    return rows
