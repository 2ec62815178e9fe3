"""
Board configuration
===================

The multiplier formula and the day-bucket rule were tuned several times while
the listings site evolved. Each tuning knob is a named constant here instead
of being hard-coded in the pipeline. The defaults are the latest tuning:

- cost basis: entry fee + add-on
- sanity ceiling: 500 (ratios at or above it are data-entry noise)
- satellite marker: "サテ" in the title
- day buckets: late-registration instant within [00:00, 00:00 + 30h)

An optional YAML file can override any of them (see `load_config`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

COST_ENTRY_FEE = "entry_fee"
COST_ENTRY_FEE_PLUS_ADD_ON = "entry_fee_plus_add_on"
COST_BASES = (COST_ENTRY_FEE, COST_ENTRY_FEE_PLUS_ADD_ON)

RULE_LATE_REG_WINDOW = "late_registration_window"
RULE_CALENDAR_DATE = "calendar_date"
DAY_BUCKET_RULES = (RULE_LATE_REG_WINDOW, RULE_CALENDAR_DATE)

DEFAULT_MULTIPLIER_CEILING = 500.0
SATELLITE_MARKER = "サテ"
DEFAULT_WINDOW_HOURS = 30

# (lower bound, row class), checked from the highest bound down
DEFAULT_HIGHLIGHT_TIERS: Tuple[Tuple[float, str], ...] = (
    (50, "hl-mult-50plus"),
    (40, "hl-mult-40plus"),
    (30, "hl-mult-30plus"),
    (20, "hl-mult-20plus"),
    (10, "hl-mult-10to19"),
)


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class MultiplierConfig:
    cost_basis: str = COST_ENTRY_FEE_PLUS_ADD_ON
    ceiling: float = DEFAULT_MULTIPLIER_CEILING
    satellite_marker: str = SATELLITE_MARKER


@dataclass(frozen=True)
class DateBucketConfig:
    rule: str = RULE_LATE_REG_WINDOW
    # length of one "day" starting at 00:00 (30h = through 06:00 next day)
    window_hours: int = DEFAULT_WINDOW_HOURS


@dataclass(frozen=True)
class BoardConfig:
    """Everything the pipeline needs besides the rows and the UI state."""
    multiplier: MultiplierConfig = field(default_factory=MultiplierConfig)
    date_bucket: DateBucketConfig = field(default_factory=DateBucketConfig)
    highlight_tiers: Tuple[Tuple[float, str], ...] = DEFAULT_HIGHLIGHT_TIERS


def _multiplier_from(data: Dict[str, Any]) -> MultiplierConfig:
    cfg = MultiplierConfig(
        cost_basis=data.get("cost_basis", COST_ENTRY_FEE_PLUS_ADD_ON),
        ceiling=float(data.get("ceiling", DEFAULT_MULTIPLIER_CEILING)),
        satellite_marker=str(data.get("satellite_marker", SATELLITE_MARKER)),
    )
    if cfg.cost_basis not in COST_BASES:
        raise ConfigError(f"multiplier.cost_basis must be one of {COST_BASES}, got {cfg.cost_basis!r}")
    if cfg.ceiling <= 0:
        raise ConfigError("multiplier.ceiling must be positive")
    return cfg


def _date_bucket_from(data: Dict[str, Any]) -> DateBucketConfig:
    cfg = DateBucketConfig(
        rule=data.get("rule", RULE_LATE_REG_WINDOW),
        window_hours=int(data.get("window_hours", DEFAULT_WINDOW_HOURS)),
    )
    if cfg.rule not in DAY_BUCKET_RULES:
        raise ConfigError(f"date_bucket.rule must be one of {DAY_BUCKET_RULES}, got {cfg.rule!r}")
    if cfg.window_hours <= 0:
        raise ConfigError("date_bucket.window_hours must be positive")
    return cfg


def _tiers_from(data: Any) -> Tuple[Tuple[float, str], ...]:
    if not isinstance(data, list):
        raise ConfigError("highlight_tiers must be a list of {min, class} entries")
    tiers = []
    for item in data:
        try:
            tiers.append((float(item["min"]), str(item["class"])))
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"invalid highlight tier: {item!r}") from e
    tiers.sort(key=lambda t: t[0], reverse=True)
    return tuple(tiers)


def load_config(path: Path) -> BoardConfig:
    """Read a YAML config file. Missing sections keep their defaults.

    Example::

        multiplier:
          cost_basis: entry_fee
          ceiling: 100
        date_bucket:
          rule: calendar_date
    """
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    try:
        multiplier = _multiplier_from(data.get("multiplier") or {})
        date_bucket = _date_bucket_from(data.get("date_bucket") or {})
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigError(f"invalid config value: {e}") from e
    tiers = _tiers_from(data["highlight_tiers"]) if "highlight_tiers" in data else DEFAULT_HIGHLIGHT_TIERS
    return BoardConfig(multiplier=multiplier, date_bucket=date_bucket, highlight_tiers=tiers)
