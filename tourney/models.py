"""
Data model (Tournament)
=======================

Each spreadsheet row is converted into a `Tournament` object.
We keep it immutable (`frozen=True`) so that:
- rows cannot be modified after loading, and
- filters/sorts operate by selecting row IDs rather than editing data.

A row's identity is its position in the loaded sheet (`row_id`); the sheet
has no reliable primary key.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, List, Mapping, Optional, Union

Number = Union[int, float]

NEG_INF = float("-inf")

# columns the pipeline reads; any other column is carried along in `raw`
KNOWN_COLUMNS = (
    "date", "start_time", "late_registration_time",
    "entry_fee", "add_on", "guaranteed_amount", "total_prize",
    "prize_list", "prize_text",
    "title", "shop_name", "area", "link",
)


def _search_text(v: Any) -> str:
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


@dataclass(frozen=True)
class Tournament:
    """One normalized tournament listing."""
    row_id: int
    raw: Mapping[str, Optional[str]] = field(repr=False)
    entry_fee: Optional[Number] = None
    add_on: Optional[Number] = None
    guaranteed_amount: Optional[Number] = None
    total_prize: Optional[Number] = None
    date_only: Optional[date] = None
    start_at: Optional[datetime] = None
    late_registration_at: Optional[datetime] = None
    multiplier: Optional[float] = None
    # sort shadows of the three date/times; -inf when absent
    date_only_ts: float = NEG_INF
    start_time_ts: float = NEG_INF
    late_reg_ts: float = NEG_INF

    def get(self, column: str, default: Optional[str] = None) -> Optional[str]:
        """Raw text of a column (None/blank -> default)."""
        v = self.raw.get(column)
        return default if v is None or v == "" else v

    @property
    def title(self) -> str:
        return self.get("title", "")

    @property
    def shop_name(self) -> str:
        return self.get("shop_name", "")

    @property
    def area(self) -> str:
        return self.get("area", "")

    @property
    def link(self) -> str:
        return self.get("link", "")

    def search_values(self) -> List[str]:
        """Every value of the row as text, for the full-row keyword filters.

        This covers all raw columns (known or not) and the parsed amounts and
        multiplier, so "5000" matches a cell typed as "5,000円".
        """
        out = [str(v) for v in self.raw.values() if v is not None and v != ""]
        for v in (self.entry_fee, self.add_on, self.guaranteed_amount, self.total_prize, self.multiplier):
            if v is not None:
                out.append(_search_text(v))
        return out

    def matches_text(self, needle: str) -> bool:
        """Case-insensitive substring match against any value of the row."""
        n = needle.lower()
        return any(n in v.lower() for v in self.search_values())
