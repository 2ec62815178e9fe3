"""
Board state (filters + sort + reference time)
=============================================

`BoardState` is the UI state the engine renders from. It is immutable: every
user action returns a new state (`dataclasses.replace`), so a render always
sees one consistent snapshot and old states can be kept for undo/redo.

The state can be mirrored into a URL query string for shareable links:

    date=tomorrow&area=渋谷&mult=20-29&title=Main&search=foo&showLate=1&sortMult=1

Parameters at their default value are left out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import FrozenSet, Optional
from urllib.parse import parse_qs, urlencode

logger = logging.getLogger(__name__)

TODAY = "today"
TOMORROW = "tomorrow"
DATE_BUCKETS = (TODAY, TOMORROW)
# query value for "no date bucket"
DATE_ALL = "all"

# bucket id -> [low, high); None = unbounded
MULT_BUCKETS = {
    "10-19": (10.0, 20.0),
    "20-29": (20.0, 30.0),
    "30-39": (30.0, 40.0),
    "40-49": (40.0, 50.0),
    "50plus": (50.0, None),
}

ASC = "asc"
DESC = "desc"
DEFAULT_SORT_KEY = "start_time"
MULT_SORT_KEY = "multiplier"


def parse_debug_time(text: str) -> datetime:
    """Parse an ISO-like date-time ("2026-02-14T23:30", "2026-02-14 23:30")."""
    try:
        dt = datetime.fromisoformat(text.strip())
    except ValueError as e:
        raise ValueError(f"Invalid debug time: {text!r}") from e
    # the board works in naive local time
    return dt.replace(tzinfo=None) if dt.tzinfo else dt


def _toggle(values: FrozenSet[str], value: str, exclusive: bool) -> FrozenSet[str]:
    if value in values:
        return values - {value}
    if exclusive:
        return frozenset({value})
    return values | {value}


@dataclass(frozen=True)
class BoardState:
    date_bucket: Optional[str] = TODAY
    areas: FrozenSet[str] = field(default_factory=frozenset)
    mult_bucket: Optional[str] = None
    titles: FrozenSet[str] = field(default_factory=frozenset)
    search: str = ""
    show_expired: bool = False
    sort_key: str = DEFAULT_SORT_KEY
    sort_dir: str = ASC
    now_override: Optional[datetime] = None

    # ---------------- Transitions ----------------
    def select_date(self, bucket: Optional[str]) -> "BoardState":
        """Pick the today/tomorrow tab (None = no date filter)."""
        if bucket is not None and bucket not in DATE_BUCKETS:
            raise ValueError(f"date bucket must be one of {DATE_BUCKETS} or None")
        return replace(self, date_bucket=bucket)

    def toggle_area(self, area: str, exclusive: bool = True) -> "BoardState":
        """Click on an area toggle. The board UI keeps one area active at a time."""
        return replace(self, areas=_toggle(self.areas, area, exclusive))

    def toggle_title(self, title: str, exclusive: bool = True) -> "BoardState":
        return replace(self, titles=_toggle(self.titles, title, exclusive))

    def toggle_mult(self, bucket: str) -> "BoardState":
        """Multiplier buckets are mutually exclusive; clicking the active one clears it."""
        if bucket not in MULT_BUCKETS:
            raise ValueError(f"multiplier bucket must be one of {tuple(MULT_BUCKETS)}")
        return replace(self, mult_bucket=None if self.mult_bucket == bucket else bucket)

    def with_search(self, text: str) -> "BoardState":
        return replace(self, search=text or "")

    def search_shop(self, shop_name: str) -> "BoardState":
        """Clicking a shop name searches for it."""
        if not shop_name:
            return self
        return self.with_search(shop_name)

    def with_show_expired(self, show: bool) -> "BoardState":
        return replace(self, show_expired=bool(show))

    def sort_by(self, key: str) -> "BoardState":
        """Header click: same key flips the direction, a new key starts ascending."""
        if key == self.sort_key:
            return replace(self, sort_dir=DESC if self.sort_dir == ASC else ASC)
        return replace(self, sort_key=key, sort_dir=ASC)

    def with_sort_by_multiplier(self, on: bool) -> "BoardState":
        if on:
            return replace(self, sort_key=MULT_SORT_KEY, sort_dir=DESC)
        return replace(self, sort_key=DEFAULT_SORT_KEY, sort_dir=ASC)

    @property
    def sort_by_multiplier(self) -> bool:
        return self.sort_key == MULT_SORT_KEY and self.sort_dir == DESC

    def with_debug_time(self, text: Optional[str]) -> "BoardState":
        """Freeze "now" at `text`; None or "" returns to the real clock.

        Invalid text raises ValueError and the current state stays in effect.
        """
        if not text:
            if self.now_override is not None:
                logger.info("debug time override cleared")
            return replace(self, now_override=None)
        dt = parse_debug_time(text)
        logger.info("debug time set to %s", dt.isoformat(sep=" ", timespec="minutes"))
        return replace(self, now_override=dt)

    def now(self) -> datetime:
        """The reference instant for date buckets and expiry."""
        return self.now_override if self.now_override is not None else datetime.now()

    # ---------------- Query string ----------------
    def to_query(self) -> str:
        params = []
        if self.date_bucket != TODAY:
            params.append(("date", self.date_bucket or DATE_ALL))
        for area in sorted(self.areas):
            params.append(("area", area))
        if self.mult_bucket:
            params.append(("mult", self.mult_bucket))
        for title in sorted(self.titles):
            params.append(("title", title))
        if self.search.strip():
            params.append(("search", self.search.strip()))
        if self.show_expired:
            params.append(("showLate", "1"))
        if self.sort_by_multiplier:
            params.append(("sortMult", "1"))
        if self.now_override is not None:
            params.append(("debug_time", self.now_override.isoformat()))
        return urlencode(params)

    @classmethod
    def from_query(cls, query: str) -> "BoardState":
        """Build a state from a query string; unknown values are ignored."""
        params = parse_qs(query.lstrip("?"), keep_blank_values=False)

        def first(name: str) -> Optional[str]:
            vals = params.get(name)
            return vals[0] if vals else None

        state = cls()

        date = first("date")
        if date in DATE_BUCKETS:
            state = replace(state, date_bucket=date)
        elif date == DATE_ALL:
            state = replace(state, date_bucket=None)
        elif date is not None:
            logger.warning("ignoring unknown date bucket %r", date)

        areas = frozenset(a for a in params.get("area", []) if a)
        titles = frozenset(t for t in params.get("title", []) if t)
        state = replace(state, areas=areas, titles=titles)

        mult = first("mult")
        if mult in MULT_BUCKETS:
            state = replace(state, mult_bucket=mult)
        elif mult is not None:
            logger.warning("ignoring unknown multiplier bucket %r", mult)

        search = first("search")
        if search:
            state = state.with_search(search.strip())

        if first("showLate") == "1":
            state = state.with_show_expired(True)
        if first("sortMult") == "1":
            state = state.with_sort_by_multiplier(True)

        debug_time = first("debug_time")
        if debug_time:
            try:
                state = state.with_debug_time(debug_time)
            except ValueError:
                logger.warning("ignoring invalid debug_time %r", debug_time)
        return state
