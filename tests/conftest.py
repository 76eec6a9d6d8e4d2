# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

"""Shared fixtures for curfew tests."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import pytest

from gatewarden.core.models.curfew import CurfewException, CurfewRecords, CurfewRule

ALL_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def build_rule(
    rule_id: str = "curfew-1",
    start: str = "22:00",
    end: str = "06:00",
    days=ALL_DAYS,
    **overrides,
) -> CurfewRule:
    """Build a rule with sensible defaults for tests."""
    return CurfewRule(
        id=rule_id,
        name=overrides.pop("name", f"Rule {rule_id}"),
        start_time=start,
        end_time=end,
        days_of_week=days,
        **overrides,
    )


class FakeClock:
    """Manually advanced aware-UTC clock."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2025, 6, 6, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class InMemoryCurfewSource:
    """Snapshot source backed by dictionaries, with call counting and failure injection."""

    def __init__(self):
        self.rules: Dict[str, List[CurfewRule]] = {}
        self.exceptions: Dict[str, List[CurfewException]] = {}
        self.timezones: Dict[str, str] = {}
        self.load_count = 0
        self.fail_with: Optional[Exception] = None
        # Called after the records are read, before load returns
        self.during_load: Optional[Callable[[str], None]] = None

    def load(self, tenant_id: str) -> CurfewRecords:
        if self.fail_with is not None:
            raise self.fail_with
        self.load_count += 1
        records = CurfewRecords(
            rules=self.rules.get(tenant_id, []),
            exceptions=self.exceptions.get(tenant_id, []),
            timezone=self.timezones.get(tenant_id),
        )
        if self.during_load is not None:
            self.during_load(tenant_id)
        return records


@pytest.fixture
def clock() -> FakeClock:
    """Fixture for a controllable clock."""
    return FakeClock()


@pytest.fixture
def source() -> InMemoryCurfewSource:
    """Fixture for an in-memory snapshot source."""
    return InMemoryCurfewSource()


@pytest.fixture
def make_rule():
    """Fixture returning the rule builder."""
    return build_rule


@pytest.fixture
def all_days():
    """Fixture for every weekday name."""
    return ALL_DAYS
