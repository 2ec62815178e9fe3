"""
Core engine (Board)
===================

The board is a small filter/sort/render pipeline over an immutable list of
`Tournament` rows:

1) Load the sheet once -> list of Tournament records (immutable)
2) Hold the current UI state (`BoardState`, a new value per interaction)
3) On every render: filter row IDs -> sort them -> build one RowView per row

There is no incremental update; each render re-runs the full pipeline from
the state. With a few hundred rows this is instant.

Filters are independent predicates that only remove rows, so their order
does not matter and applying them twice changes nothing.

Note: the area, title and free-text filters search *every* value of a row,
not a dedicated column. A keyword like "渋谷" also matches a shop or title
that mentions it. This is intended.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple
import csv
import json
import logging
import math

from .config import RULE_CALENDAR_DATE, BoardConfig, DateBucketConfig
from .dsa import merge_sort
from .models import NEG_INF, Tournament
from .state import DESC, MULT_BUCKETS, TOMORROW, BoardState
from .views import NO_MATCH_MESSAGE, RowView, build_view, date_tab_labels

logger = logging.getLogger(__name__)

Predicate = Callable[[Tournament], bool]

# display column -> sort shadow
TIME_SORT_KEYS = {
    "start_time": "start_time_ts",
    "date_only": "date_only_ts",
    "late_registration_time": "late_reg_ts",
}
NUMERIC_SORT_KEYS = ("entry_fee", "add_on", "guaranteed_amount", "total_prize", "multiplier")


# ---------------- Filters ----------------
def day_window(bucket: str, now: datetime, window_hours: int = 30) -> Tuple[datetime, datetime]:
    """[start, end) of the today/tomorrow bucket.

    A "day" starts at 00:00 and runs `window_hours` (30h = until 06:00 the
    next morning, so late-night events stay on the day they belong to).
    """
    start = datetime.combine(now.date(), datetime.min.time())
    if bucket == TOMORROW:
        start = datetime.combine(now.date() + timedelta(days=1), datetime.min.time())
    return start, start + timedelta(hours=window_hours)


def _date_predicate(bucket: str, now: datetime, cfg: DateBucketConfig) -> Predicate:
    if cfg.rule == RULE_CALENDAR_DATE:
        day = now.date() + timedelta(days=1 if bucket == TOMORROW else 0)
        return lambda r: r.date_only is not None and r.date_only == day
    start, end = day_window(bucket, now, cfg.window_hours)
    return lambda r: r.late_registration_at is not None and start <= r.late_registration_at < end


def _any_keyword_predicate(keywords: FrozenSet[str]) -> Predicate:
    kws = [k for k in keywords if k]
    return lambda r: any(r.matches_text(k) for k in kws)


def _mult_predicate(low: float, high: Optional[float]) -> Predicate:
    def pred(r: Tournament) -> bool:
        m = r.multiplier
        if m is None or not math.isfinite(m):
            return False
        return m >= low and (high is None or m < high)
    return pred


def make_predicates(state: BoardState, now: datetime, config: BoardConfig) -> List[Predicate]:
    """Predicates for the active filters only; inactive filters add nothing."""
    preds: List[Predicate] = []
    if state.date_bucket:
        preds.append(_date_predicate(state.date_bucket, now, config.date_bucket))
    if any(state.areas):
        preds.append(_any_keyword_predicate(state.areas))
    if state.mult_bucket in MULT_BUCKETS:
        low, high = MULT_BUCKETS[state.mult_bucket]
        preds.append(_mult_predicate(low, high))
    if any(state.titles):
        preds.append(_any_keyword_predicate(state.titles))
    term = state.search.strip()
    if term:
        preds.append(lambda r: r.matches_text(term))
    return preds


def filter_ids(
    rows: Sequence[Tournament],
    ids: Sequence[int],
    state: BoardState,
    now: datetime,
    config: Optional[BoardConfig] = None,
) -> List[int]:
    """Row IDs (in input order) that pass every active filter."""
    config = config or BoardConfig()
    out = list(ids)
    for pred in make_predicates(state, now, config):
        out = [i for i in out if pred(rows[i])]
    return out


# ---------------- Sorting ----------------
def sort_key(key: str) -> Callable[[Tournament], object]:
    """Comparison value for a sort column.

    Time columns use their timestamp shadow, amounts compare as numbers
    (missing = -inf, so they come first ascending), everything else compares
    as lower-cased raw text (missing = "").
    """
    if key in TIME_SORT_KEYS:
        attr = TIME_SORT_KEYS[key]
        return lambda r: getattr(r, attr)
    if key in NUMERIC_SORT_KEYS:
        def num(r: Tournament) -> float:
            v = getattr(r, key)
            return NEG_INF if v is None else float(v)
        return num
    return lambda r: (r.get(key) or "").lower()


def sort_ids(rows: Sequence[Tournament], ids: Sequence[int], key: str, direction: str = "asc") -> List[int]:
    """Stable sort of row IDs by one column."""
    k = sort_key(key)
    return merge_sort(list(ids), key=lambda i: k(rows[i]), descending=(direction == DESC))


# ---------------- Render ----------------
@dataclass(frozen=True)
class RenderResult:
    """Everything a presentation layer needs for one render."""
    rows: List[RowView]
    matched: int
    total: int
    show_expired: bool
    now: datetime
    tab_labels: Tuple[str, str]

    @property
    def visible_rows(self) -> List[RowView]:
        """Rows to draw; expired rows are hidden unless asked for."""
        if self.show_expired:
            return list(self.rows)
        return [v for v in self.rows if not v.expired]

    @property
    def placeholder(self) -> Optional[str]:
        return NO_MATCH_MESSAGE if not self.rows else None

    @property
    def count_label(self) -> str:
        return f" {self.matched} / {self.total}"


def render(rows: Sequence[Tournament], state: BoardState, config: Optional[BoardConfig] = None) -> RenderResult:
    """Run the full pipeline: filter -> sort -> views."""
    config = config or BoardConfig()
    now = state.now()
    ids = filter_ids(rows, range(len(rows)), state, now, config)
    ids = sort_ids(rows, ids, state.sort_key, state.sort_dir)
    debug = state.now_override is not None
    views = [build_view(rows[i], now, debug_time=debug, tiers=config.highlight_tiers) for i in ids]
    return RenderResult(
        rows=views,
        matched=len(ids),
        total=len(rows),
        show_expired=state.show_expired,
        now=now,
        tab_labels=date_tab_labels(now),
    )


@dataclass
class Board:
    """Tournament listings board.

    The board stores:
    - rows: all Tournament records (never modified)
    - config: multiplier / day-bucket tuning
    - state: current BoardState

    Every change goes through `apply`, which keeps undo/redo history.
    """
    rows: List[Tournament]
    config: BoardConfig = field(default_factory=BoardConfig)
    source: Optional[str] = None
    state: BoardState = field(default_factory=BoardState)
    # Stores CLI commands (for reproducibility in reports)
    command_log: List[str] = field(default_factory=list)

    # Stacks for undo/redo (store previous states)
    _undo: List[BoardState] = field(default_factory=list, init=False)
    _redo: List[BoardState] = field(default_factory=list, init=False)

    # ---------------- History (Stacks) ----------------
    def apply(self, change: Callable[[BoardState], BoardState]) -> BoardState:
        """Replace the state with `change(state)`; errors leave it untouched."""
        new_state = change(self.state)
        if new_state != self.state:
            self._undo.append(self.state)
            self._redo.clear()
            self.state = new_state
        return self.state

    def undo(self) -> bool:
        if not self._undo:
            return False
        self._redo.append(self.state)
        self.state = self._undo.pop()
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._undo.append(self.state)
        self.state = self._redo.pop()
        return True

    def reset(self) -> None:
        self.apply(lambda s: BoardState(now_override=s.now_override))

    # ---------------- Output operations ----------------
    def render(self) -> RenderResult:
        return render(self.rows, self.state, self.config)

    def query_string(self) -> str:
        return self.state.to_query()

    def export_csv(self, path: str) -> int:
        views = self.render().visible_rows
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(list(RowView.__dataclass_fields__))
            for v in views:
                w.writerow(list(v.to_dict().values()))
        return len(views)

    def export_json(self, path: str) -> int:
        """Export the visible rows as a JSON list of objects."""
        views = self.render().visible_rows
        with open(path, "w", encoding="utf-8") as f:
            json.dump([v.to_dict() for v in views], f, ensure_ascii=False, indent=2)
        return len(views)
