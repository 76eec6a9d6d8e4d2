# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from datetime import date, datetime
from typing import FrozenSet, Iterable, List, Optional, Union

import structlog

from gatewarden.core.enums import Weekday
from gatewarden.core.models.curfew import (
    CurfewException,
    CurfewRule,
    CurfewStats,
    EvaluationResult,
)
from gatewarden.domain.curfew.daily_window import evaluate_daily_window
from gatewarden.domain.curfew.exception_index import ExceptionIndex
from gatewarden.domain.curfew.seasonal import SeasonalWindowEvaluator
from gatewarden.exceptions import MalformedCurfewRuleError

logger = structlog.get_logger(__name__)

ExceptionSource = Union[ExceptionIndex, Iterable[CurfewException]]


def parse_days_of_week(rule: CurfewRule) -> FrozenSet[Weekday]:
    """
    Parse a rule's weekday names.

    Raises:
        MalformedCurfewRuleError: If the set is empty or has an unknown name
    """
    if not rule.days_of_week:
        raise MalformedCurfewRuleError(rule.id, "days_of_week is empty")
    try:
        return frozenset(Weekday.parse(day) for day in rule.days_of_week)
    except (AttributeError, ValueError) as e:
        raise MalformedCurfewRuleError(
            rule.id, f"unknown weekday in {list(rule.days_of_week)!r}"
        ) from e


class CurfewResolver:
    """
    Combines daily window, weekday, season and exception checks across a
    tenant's rules into one restriction decision.

    The resolver holds no mutable state and may be shared between threads.
    Rules are independent: restriction is the OR of all matches and every
    matching rule is reported.
    """

    def __init__(self, seasonal: Optional[SeasonalWindowEvaluator] = None):
        """
        Initialize the resolver.

        Args:
            seasonal: Season evaluator; without one, summer and winter
                rules are never in season
        """
        self.seasonal = seasonal or SeasonalWindowEvaluator()

    def evaluate(
        self,
        instant: datetime,
        rules: Iterable[CurfewRule],
        exceptions: ExceptionSource = (),
    ) -> EvaluationResult:
        """
        Evaluate every active rule at a local instant.

        Malformed rules are logged and reported in skipped_rules; they never
        abort the evaluation.

        Args:
            instant: Wall-clock instant in the tenant's timezone
            rules: Rule snapshot
            exceptions: Prebuilt ExceptionIndex or exception records

        Returns:
            EvaluationResult for the instant
        """
        index = exceptions if isinstance(exceptions, ExceptionIndex) else ExceptionIndex(exceptions)

        matched: List[str] = []
        skipped: List[str] = []

        for rule in rules:
            if not rule.is_active:
                continue
            try:
                if self._applies(instant, rule, index):
                    matched.append(rule.id)
            except MalformedCurfewRuleError as e:
                skipped.append(rule.id)
                logger.warning(
                    "curfew_rule_skipped",
                    curfew_name=rule.name,
                    **e.details,
                )

        return EvaluationResult(
            restricted=bool(matched),
            matched_rules=matched,
            skipped_rules=skipped,
            evaluated_at=instant,
        )

    def _applies(self, instant: datetime, rule: CurfewRule, index: ExceptionIndex) -> bool:
        # Malformed fields are reported even outside the window
        days = parse_days_of_week(rule)
        self.seasonal.validate(rule)

        window = evaluate_daily_window(instant, rule.start_time, rule.end_time, rule.id)
        if not window.in_window:
            return False
        if window.anchor_weekday not in days:
            return False
        if not self.seasonal.is_in_season(window.logical_night, rule):
            return False
        if index.has(rule.id, window.logical_night):
            return False
        return True

    def in_season_rules(self, day: date, rules: Iterable[CurfewRule]) -> List[CurfewRule]:
        """
        Active rules whose seasonal scope covers a date.

        Args:
            day: Calendar date
            rules: Rule snapshot

        Returns:
            Rules in input order; malformed rules are left out
        """
        result = []
        for rule in rules:
            if not rule.is_active:
                continue
            try:
                if self.seasonal.is_in_season(day, rule):
                    result.append(rule)
            except MalformedCurfewRuleError as e:
                logger.warning("curfew_rule_skipped", curfew_name=rule.name, **e.details)
        return result

    def summarize(
        self,
        rules: Iterable[CurfewRule],
        exceptions: ExceptionSource = (),
    ) -> CurfewStats:
        """Count total, active and inactive rules and indexed exceptions."""
        index = exceptions if isinstance(exceptions, ExceptionIndex) else ExceptionIndex(exceptions)
        return CurfewStats.from_rules(rules, exception_count=len(index))
