# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Iterable, Mapping, Optional, Union

from gatewarden.core.enums import Season, Weekday

TimeOfDay = Union[time, str]
CalendarDate = Union[date, str]


def _as_tuple(values: Any) -> tuple:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(values)


@dataclass(frozen=True)
class CurfewRule:
    """
    Immutable snapshot of one tenant-configured curfew rule.

    Field values are kept as they were read from storage. Times and dates
    are parsed at evaluation time so that one malformed row can be skipped
    without failing the whole snapshot load.
    """

    id: str
    start_time: TimeOfDay
    end_time: TimeOfDay
    days_of_week: tuple = ()
    season: Union[Season, str] = Season.ALL_YEAR
    season_start: Optional[CalendarDate] = None
    season_end: Optional[CalendarDate] = None
    is_active: bool = True

    # Display only
    name: str = ""
    description: Optional[str] = None
    tenant_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "days_of_week", _as_tuple(self.days_of_week))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CurfewRule":
        """
        Build a rule from a storage row using the admin layer's column names.

        Args:
            record: Mapping with keys such as start_time, days_of_week,
                season_start_date and is_active

        Returns:
            CurfewRule instance
        """
        return cls(
            id=str(record["id"]),
            name=record.get("name") or "",
            description=record.get("description"),
            tenant_id=record.get("tenant_id"),
            start_time=record.get("start_time"),
            end_time=record.get("end_time"),
            days_of_week=record.get("days_of_week") or (),
            season=record.get("season") or Season.ALL_YEAR,
            season_start=record.get("season_start_date"),
            season_end=record.get("season_end_date"),
            is_active=bool(record.get("is_active", True)),
        )


@dataclass(frozen=True)
class CurfewException:
    """A single date on which one curfew rule is suspended."""

    curfew_id: str
    date: CalendarDate
    reason: str = ""
    id: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "CurfewException":
        """Build an exception from a storage row."""
        return cls(
            id=record.get("id"),
            curfew_id=record.get("curfew_id"),
            date=record.get("exception_date"),
            reason=record.get("reason") or "",
        )


@dataclass(frozen=True)
class DailyWindow:
    """
    Position of a local instant relative to one rule's daily window.

    logical_night is the calendar date the window instance started on; it
    is the date used for weekday matching and exception lookups.
    """

    in_window: bool
    logical_night: date
    anchor_weekday: Weekday


@dataclass(frozen=True)
class SeasonBoundary:
    """
    Recurring month-day range for a named season.

    The range is inclusive at both ends and may wrap the year end
    (e.g. 12-01 to 02-28).
    """

    start: tuple[int, int]
    end: tuple[int, int]

    @classmethod
    def parse(cls, start: str, end: str) -> "SeasonBoundary":
        """
        Parse a boundary from two MM-DD strings.

        Raises:
            ValueError: If either value is not a valid month-day
        """
        return cls(start=_parse_month_day(start), end=_parse_month_day(end))

    def contains(self, day: date) -> bool:
        """Check whether a calendar date falls inside this season."""
        month_day = (day.month, day.day)
        if self.start <= self.end:
            return self.start <= month_day <= self.end
        return month_day >= self.start or month_day <= self.end


def _parse_month_day(value: str) -> tuple[int, int]:
    try:
        month_str, day_str = value.strip().split("-")
        month, day = int(month_str), int(day_str)
        # Leap year so that 02-29 is accepted
        date(2000, month, day)
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid month-day '{value}', expected MM-DD") from e
    return month, day


@dataclass
class EvaluationResult:
    """
    Outcome of evaluating all curfew rules at one instant.

    matched_rules keeps rule input order and lists every applicable rule,
    not only the first one.
    """

    restricted: bool
    matched_rules: list[str] = field(default_factory=list)
    skipped_rules: list[str] = field(default_factory=list)
    evaluated_at: Optional[datetime] = None
    tenant_id: Optional[str] = None
    snapshot_version: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "restricted": self.restricted,
            "matched_rules": list(self.matched_rules),
            "skipped_rules": list(self.skipped_rules),
            "evaluated_at": self.evaluated_at.isoformat() if self.evaluated_at else None,
            "tenant_id": self.tenant_id,
            "snapshot_version": self.snapshot_version,
        }


@dataclass(frozen=True)
class CurfewStats:
    """Counts shown on the curfew settings overview."""

    total_curfews: int
    active_curfews: int
    inactive_curfews: int
    total_exceptions: int

    @property
    def enabled(self) -> bool:
        """Curfew enforcement is considered on when any rule is active."""
        return self.active_curfews > 0

    @classmethod
    def from_rules(
        cls,
        rules: Iterable[CurfewRule],
        exception_count: int,
    ) -> "CurfewStats":
        rules = list(rules)
        active = sum(1 for rule in rules if rule.is_active)
        return cls(
            total_curfews=len(rules),
            active_curfews=active,
            inactive_curfews=len(rules) - active,
            total_exceptions=exception_count,
        )

    def to_dict(self) -> dict:
        return {
            "total_curfews": self.total_curfews,
            "active_curfews": self.active_curfews,
            "inactive_curfews": self.inactive_curfews,
            "total_exceptions": self.total_exceptions,
            "enabled": self.enabled,
        }


@dataclass(frozen=True)
class CurfewRecords:
    """A tenant's rules, exceptions and timezone read in one transaction."""

    rules: tuple = ()
    exceptions: tuple = ()
    timezone: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(self, "exceptions", tuple(self.exceptions))
