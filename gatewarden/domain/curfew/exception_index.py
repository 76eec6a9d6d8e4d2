# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Set, Tuple

import structlog

from gatewarden.core.models.curfew import CurfewException
from gatewarden.domain.curfew.seasonal import parse_calendar_date
from gatewarden.exceptions import MalformedCurfewExceptionError

logger = structlog.get_logger(__name__)


class ExceptionIndex:
    """
    Set of (curfew_id, date) pairs on which a rule is suspended.

    Keys must be looked up with the logical night of the window instance,
    not the calendar date of the evaluation instant.
    """

    def __init__(self, exceptions: Iterable[CurfewException] = ()):
        self._keys: Set[Tuple[str, date]] = set()
        self._by_rule: Dict[str, List[date]] = defaultdict(list)
        self.skipped = 0

        for exception in exceptions:
            try:
                key = self._key_for(exception)
            except MalformedCurfewExceptionError as e:
                self.skipped += 1
                logger.warning(
                    "curfew_exception_skipped",
                    exception_id=exception.id,
                    **e.details,
                )
                continue

            if key in self._keys:
                continue
            self._keys.add(key)
            self._by_rule[key[0]].append(key[1])

        for dates in self._by_rule.values():
            dates.sort()

    @staticmethod
    def _key_for(exception: CurfewException) -> Tuple[str, date]:
        if not exception.curfew_id:
            raise MalformedCurfewExceptionError(None, "missing curfew_id")
        if exception.date is None:
            raise MalformedCurfewExceptionError(exception.curfew_id, "missing exception date")
        try:
            day = parse_calendar_date(exception.date)
        except ValueError as e:
            raise MalformedCurfewExceptionError(exception.curfew_id, str(e)) from e
        return str(exception.curfew_id), day

    def has(self, curfew_id: str, logical_night: date) -> bool:
        """Check whether the rule is suspended for the given logical night."""
        return (str(curfew_id), logical_night) in self._keys

    def for_rule(self, curfew_id: str) -> List[date]:
        """Excepted dates for one rule, ascending."""
        return list(self._by_rule.get(str(curfew_id), ()))

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: Tuple[str, date]) -> bool:
        curfew_id, day = key
        return self.has(curfew_id, day)
