# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

"""
Daily time-of-day window evaluation.

A curfew window is a pair of local times. When start < end the window is
[start, end) on a single date. When start > end the window crosses midnight
and every instance belongs to the date it started on (its logical night):
a Monday 22:00-06:00 window covers Monday 22:00 through Tuesday 05:59, and
all of it is anchored to Monday.
"""

from datetime import datetime, time, timedelta
from typing import Optional

from gatewarden.core.enums import Weekday
from gatewarden.core.models.curfew import DailyWindow, TimeOfDay
from gatewarden.exceptions import MalformedCurfewRuleError


def parse_time_of_day(value: TimeOfDay) -> time:
    """
    Parse a stored time of day.

    Args:
        value: datetime.time, or a string in HH:MM or HH:MM:SS 24-hour form

    Returns:
        Naive time with seconds and microseconds as stored

    Raises:
        ValueError: If the value is not a valid 24-hour time
    """
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if not isinstance(value, str):
        raise ValueError(f"Unsupported time value: {value!r}")

    parts = value.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time format '{value}', expected HH:MM")

    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    # time() rejects 24:00 and out-of-range fields
    return time(hour, minute, second)


def evaluate_daily_window(
    local_instant: datetime,
    start_time: TimeOfDay,
    end_time: TimeOfDay,
    curfew_id: Optional[str] = None,
) -> DailyWindow:
    """
    Place a local instant relative to a rule's daily window.

    Args:
        local_instant: Wall-clock instant in the tenant's timezone
        start_time: Window start (inclusive)
        end_time: Window end (exclusive)
        curfew_id: Rule id, used only in error details

    Returns:
        DailyWindow with the logical night and anchor weekday. Outside the
        window these are the instant's own date and weekday.

    Raises:
        MalformedCurfewRuleError: If a time is unparseable or start == end
    """
    try:
        start = parse_time_of_day(start_time)
        end = parse_time_of_day(end_time)
    except ValueError as e:
        raise MalformedCurfewRuleError(curfew_id, str(e)) from e

    if start == end:
        raise MalformedCurfewRuleError(
            curfew_id, f"start_time equals end_time ({start.isoformat(timespec='minutes')})"
        )

    today = local_instant.date()
    clock = local_instant.time().replace(tzinfo=None)

    if start < end:
        return DailyWindow(
            in_window=start <= clock < end,
            logical_night=today,
            anchor_weekday=Weekday.from_date(today),
        )

    # Wraps midnight
    if clock >= start:
        return DailyWindow(
            in_window=True,
            logical_night=today,
            anchor_weekday=Weekday.from_date(today),
        )

    if clock < end:
        yesterday = today - timedelta(days=1)
        return DailyWindow(
            in_window=True,
            logical_night=yesterday,
            anchor_weekday=Weekday.from_date(yesterday),
        )

    return DailyWindow(
        in_window=False,
        logical_night=today,
        anchor_weekday=Weekday.from_date(today),
    )
