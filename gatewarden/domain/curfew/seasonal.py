# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from datetime import date, datetime
from typing import Mapping, Optional

import structlog

from gatewarden.core.enums import Season
from gatewarden.core.models.curfew import CalendarDate, CurfewRule, SeasonBoundary
from gatewarden.exceptions import MalformedCurfewRuleError

logger = structlog.get_logger(__name__)


def parse_calendar_date(value: CalendarDate) -> date:
    """
    Parse a stored calendar date.

    Args:
        value: date, datetime (its date part is used) or ISO YYYY-MM-DD string

    Raises:
        ValueError: If the value is missing or not a valid date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise ValueError(f"Unsupported date value: {value!r}")


class SeasonalWindowEvaluator:
    """
    Decides whether a date falls within a rule's seasonal scope.

    summer and winter have no intrinsic date range. They are only ever in
    season when a boundary has been configured for them; otherwise the
    rule never applies. custom ranges are inclusive and do not recur
    across years.
    """

    def __init__(self, boundaries: Optional[Mapping[Season, SeasonBoundary]] = None):
        """
        Initialize the evaluator.

        Args:
            boundaries: Configured month-day ranges for summer and/or winter
        """
        self._boundaries = dict(boundaries or {})

    @property
    def configured_seasons(self) -> frozenset:
        return frozenset(self._boundaries)

    def is_in_season(self, day: date, rule: CurfewRule) -> bool:
        """
        Check whether a logical night is inside the rule's seasonal scope.

        Args:
            day: Logical night being evaluated
            rule: Curfew rule

        Returns:
            True if the rule's season covers the date

        Raises:
            MalformedCurfewRuleError: Unknown season, or custom season with
                missing or inverted dates
        """
        season = self._parse_season(rule)

        if season == Season.ALL_YEAR:
            return True

        if season == Season.CUSTOM:
            start, end = self._custom_range(rule)
            return start <= day <= end

        boundary = self._boundaries.get(season)
        if boundary is None:
            logger.debug(
                "curfew_season_not_configured",
                curfew_id=rule.id,
                season=season.value,
            )
            return False

        return boundary.contains(day)

    def validate(self, rule: CurfewRule) -> None:
        """
        Check the rule's seasonal fields without evaluating a date.

        Raises:
            MalformedCurfewRuleError: If the season fields cannot be evaluated
        """
        if self._parse_season(rule) == Season.CUSTOM:
            self._custom_range(rule)

    def _parse_season(self, rule: CurfewRule) -> Season:
        try:
            return Season(rule.season)
        except ValueError as e:
            raise MalformedCurfewRuleError(rule.id, f"unknown season {rule.season!r}") from e

    def _custom_range(self, rule: CurfewRule) -> tuple[date, date]:
        if rule.season_start is None or rule.season_end is None:
            raise MalformedCurfewRuleError(
                rule.id, "custom season requires season_start and season_end"
            )

        try:
            start = parse_calendar_date(rule.season_start)
            end = parse_calendar_date(rule.season_end)
        except ValueError as e:
            raise MalformedCurfewRuleError(rule.id, f"invalid season date: {e}") from e

        if start > end:
            raise MalformedCurfewRuleError(
                rule.id,
                f"season_start {start.isoformat()} is after season_end {end.isoformat()}",
            )
        return start, end
