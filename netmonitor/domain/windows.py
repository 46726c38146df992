"""Time-window catalog and the enum <-> label mapping loaded from key files.

The enums are the internal keys. Labels come from a JSON key-mapping file
and are used only when serialising a snapshot.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Generic, Iterator, Mapping, TypeVar

from netmonitor.core.errors import ConfigError


class TimeWindow(str, Enum):
    LAST_24_HOURS = "LAST_24_HOURS"
    LAST_30_DAYS = "LAST_30_DAYS"
    YEAR_TO_DATE = "YEAR_TO_DATE"


class StatName(str, Enum):
    USER_OPS = "USER_OPS"
    GAS_USED = "GAS_USED"
    UNIQUE_ACTIVE_ACCOUNTS = "UNIQUE_ACTIVE_ACCOUNTS"


class SelectionKind(str, Enum):
    RECENT = "RECENT"
    TOP_GAS_CONSUMERS_24H = "TOP_GAS_CONSUMERS_24H"


def duration_of(window: TimeWindow, now: datetime) -> timedelta:
    """Length of `window` looking back from `now`.

    Year-to-date is the ordinal day of `now` in its year, in whole days.
    """
    if window is TimeWindow.LAST_24_HOURS:
        return timedelta(days=1)
    if window is TimeWindow.LAST_30_DAYS:
        return timedelta(days=30)
    if window is TimeWindow.YEAR_TO_DATE:
        return timedelta(days=now.timetuple().tm_yday)
    raise ValueError(f"Unknown time window: {window!r}")


def query_start(now: datetime) -> datetime:
    """Earliest instant any window can reach: min(now - 30d, Jan 1st)."""
    year_start = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    return min(now - timedelta(days=30), year_start)


E = TypeVar("E", bound=Enum)


class LabelMap(Generic[E]):
    """Enum member -> output label lookup; labels are unique within a map.

    Iteration follows the order the members were configured in.
    """

    def __init__(self, labels: Mapping[E, str]):
        members: dict[str, E] = {}
        for member, label in labels.items():
            if label in members:
                raise ConfigError(
                    f"Duplicate label '{label}' for {members[label].name} and {member.name}"
                )
            members[label] = member
        self._labels: dict[E, str] = dict(labels)

    def label(self, member: E) -> str:
        return self._labels[member]

    def labels(self) -> list[str]:
        return list(self._labels.values())

    def __contains__(self, member: object) -> bool:
        return member in self._labels

    def __iter__(self) -> Iterator[E]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)


@dataclass(frozen=True)
class StatsFamily:
    """One configured statistics family (e.g. usage, activity)."""

    name: str
    stat_names_section: str
    stat_key_prefix: str


USAGE = StatsFamily("usage", "usage_stat_names", "USAGE_STATS")
ACTIVITY = StatsFamily("activity", "activity_stat_names", "ACTIVITY_STATS")

TIME_WINDOWS_SECTION = "time_windows"
TIME_WINDOW_KEY_PREFIX = "TIME_WINDOW"
SELECTIONS_SECTION = "select_accounts_by"
SELECTION_KEY_PREFIX = "ACCOUNTS"


def _parse_section(
    data: Mapping[str, Any], section: str, prefix: str, enum_cls: type[E]
) -> LabelMap[E]:
    raw = data.get(section)
    if not isinstance(raw, dict):
        raise ConfigError(f"Key file section '{section}' missing or not an object")
    labels: dict[E, str] = {}
    for key, label in raw.items():
        head, sep, name = key.partition("__")
        if not sep or head != prefix or name not in enum_cls.__members__:
            raise ConfigError(f"Unknown key '{key}' in section '{section}'")
        if not isinstance(label, str):
            raise ConfigError(f"Label for '{key}' must be a string")
        labels[enum_cls[name]] = label
    return LabelMap(labels)


@dataclass(frozen=True)
class StatsKeys:
    """The catalog of windows, stats and selections for one family."""

    stat_names: LabelMap[StatName]
    time_windows: LabelMap[TimeWindow]
    select_accounts_by: LabelMap[SelectionKind]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], family: StatsFamily) -> "StatsKeys":
        return cls(
            stat_names=_parse_section(
                data, family.stat_names_section, family.stat_key_prefix, StatName
            ),
            time_windows=_parse_section(
                data, TIME_WINDOWS_SECTION, TIME_WINDOW_KEY_PREFIX, TimeWindow
            ),
            select_accounts_by=_parse_section(
                data, SELECTIONS_SECTION, SELECTION_KEY_PREFIX, SelectionKind
            ),
        )

    @classmethod
    def load(cls, path: str | Path, family: StatsFamily) -> "StatsKeys":
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Cannot read {family.name} key file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {family.name} key file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{family.name} key file {path} must hold a JSON object")
        return cls.from_mapping(data, family)
