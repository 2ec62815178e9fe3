"""
Render stage (Tournament -> RowView)
====================================

Turns a normalized row into display strings plus a highlight class.
Nothing here filters or sorts; `engine.py` decides which rows to show.

Highlighting:
- "late-reg-expired" when late registration has already closed; this wins
  over everything else
- otherwise the first multiplier tier the row reaches (50, 40, 30, 20, 10)
- otherwise no class
"""

from __future__ import annotations
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta
from typing import Optional, Sequence, Tuple
import math

from .config import DEFAULT_HIGHLIGHT_TIERS
from .models import Number, Tournament
from .parsing import round_half_up

EXPIRED_CLASS = "late-reg-expired"
UNKNOWN_PRIZE = "不明"
NO_TITLE = "タイトルなし"
NO_MATCH_MESSAGE = "該当データがありません"
WEEKDAYS_JA = ("月", "火", "水", "木", "金", "土", "日")

BADGE_TIERS = (
    (50, "mult-50plus"),
    (40, "mult-40plus"),
    (30, "mult-30plus"),
    (20, "mult-20plus"),
    (10, "mult-10plus"),
)


def format_amount(v: Optional[Number]) -> str:
    """Thousands-grouped amount: 12500 -> "12,500"."""
    if v is None:
        return ""
    if isinstance(v, float) and not v.is_integer():
        return f"{v:,.3f}".rstrip("0").rstrip(".")
    return f"{int(v):,}"


def _has_multiplier(m: Optional[float]) -> bool:
    return m is not None and math.isfinite(m)


def round_multiplier(m: float) -> float:
    return round_half_up(m * 10) / 10


def format_multiplier(m: Optional[float]) -> str:
    """Table label: 20.04 -> "x20.0"."""
    if not _has_multiplier(m) or m <= 0:
        return ""
    return f"x{round_multiplier(m):.1f}"


def format_time(dt: Optional[datetime], with_date: bool = False) -> str:
    """HH:MM; with the month/day prefix ("2/15 01:30") while debugging time."""
    if dt is None:
        return ""
    hm = f"{dt.hour:02d}:{dt.minute:02d}"
    if with_date:
        return f"{dt.month}/{dt.day} {hm}"
    return hm


def format_date(d: Optional[date]) -> str:
    if d is None:
        return ""
    return f"{d.year}-{d.month:02d}-{d.day:02d}"


def format_date_ja(d: Optional[date]) -> str:
    """Tab label: "8月19日(火)"."""
    if d is None:
        return ""
    return f"{d.month}月{d.day}日({WEEKDAYS_JA[d.weekday()]})"


def format_card_date(d: Optional[date]) -> str:
    """Card label: "08/19(火)"."""
    if d is None:
        return ""
    return f"{d.month:02d}/{d.day:02d}({WEEKDAYS_JA[d.weekday()]})"


def date_tab_labels(now: datetime) -> Tuple[str, str]:
    """Labels of the today / tomorrow tabs relative to `now`."""
    return format_date_ja(now.date()), format_date_ja((now + timedelta(days=1)).date())


def is_expired(row: Tournament, now: datetime) -> bool:
    return row.late_registration_at is not None and row.late_registration_at < now


def multiplier_tier(m: Optional[float], tiers: Sequence[Tuple[float, str]] = DEFAULT_HIGHLIGHT_TIERS) -> str:
    """First tier (highest bound first) that `m` reaches, or ""."""
    if not _has_multiplier(m):
        return ""
    for low, cls in tiers:
        if m >= low:
            return cls
    return ""


def classify_row(row: Tournament, now: datetime, tiers: Sequence[Tuple[float, str]] = DEFAULT_HIGHLIGHT_TIERS) -> str:
    if is_expired(row, now):
        return EXPIRED_CLASS
    return multiplier_tier(row.multiplier, tiers)


@dataclass(frozen=True)
class RowView:
    """Display values for one row (table columns + compact card)."""
    row_id: int
    date: str
    start: str
    late: str
    area: str
    shop_name: str
    title: str
    link: str
    entry_fee: str
    add_on: str
    total_prize: str
    multiplier: str
    prize_summary: str
    row_class: str
    expired: bool
    card_date: str
    card_start: str
    card_deadline: str
    card_title: str
    badge_text: str
    badge_class: str
    prize_badge: str

    def to_dict(self) -> dict:
        return asdict(self)


def build_view(
    row: Tournament,
    now: datetime,
    *,
    debug_time: bool = False,
    tiers: Sequence[Tuple[float, str]] = DEFAULT_HIGHLIGHT_TIERS,
) -> RowView:
    m = row.multiplier
    total_label = format_amount(row.total_prize) if row.total_prize is not None and row.total_prize > 0 else UNKNOWN_PRIZE
    has_badge = _has_multiplier(m) and m > 0
    late = row.late_registration_at

    return RowView(
        row_id=row.row_id,
        date=format_date(row.date_only) if row.date_only else row.get("date", ""),
        start=format_time(row.start_at, debug_time) if row.start_at else row.get("start_time", ""),
        late=format_time(late, debug_time) if late else row.get("late_registration_time", ""),
        area=row.area,
        shop_name=row.shop_name,
        title=row.title,
        link=row.link,
        entry_fee=format_amount(row.entry_fee),
        add_on=format_amount(row.add_on),
        total_prize=total_label,
        multiplier=format_multiplier(m),
        prize_summary=" / ".join(p for p in row.get("prize_text", "").splitlines() if p),
        row_class=classify_row(row, now, tiers),
        expired=is_expired(row, now),
        card_date=format_card_date(row.date_only),
        card_start=format_time(row.start_at),
        card_deadline=f"締切 {format_time(late)}" if late else "",
        card_title=row.title or NO_TITLE,
        badge_text=f"倍率: {round_multiplier(m):.1f}x" if has_badge else "",
        badge_class=multiplier_tier(m, BADGE_TIERS),
        prize_badge=f"賞金: ¥{total_label}" if total_label != UNKNOWN_PRIZE else "",
    )
