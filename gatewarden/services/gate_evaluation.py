# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from datetime import datetime, timezone
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from gatewarden.core.config import Settings, get_settings
from gatewarden.core.models.curfew import CurfewRule, CurfewStats, EvaluationResult
from gatewarden.domain.curfew.resolver import CurfewResolver
from gatewarden.domain.curfew.seasonal import SeasonalWindowEvaluator
from gatewarden.exceptions import ConfigurationError
from gatewarden.services.snapshot_cache import CurfewSnapshot, CurfewSnapshotCache

logger = structlog.get_logger(__name__)


class GateEvaluationService:
    """
    Entry point used by the gate workflow.

    Converts a gate event's UTC timestamp into the tenant's local time,
    reads the tenant's cached rule snapshot and asks the resolver whether
    any curfew applies. Matched rules are returned as ids only.
    """

    def __init__(
        self,
        cache: CurfewSnapshotCache,
        resolver: Optional[CurfewResolver] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the service.

        Args:
            cache: Tenant snapshot cache
            resolver: Curfew resolver (built from settings' season
                boundaries when omitted)
            settings: Settings override
        """
        self.cache = cache
        self.settings = settings or get_settings()
        self.resolver = resolver or CurfewResolver(
            SeasonalWindowEvaluator(self.settings.season_boundaries())
        )

        logger.info(
            "gate_evaluation_service_initialized",
            configured_seasons=sorted(s.value for s in self.resolver.seasonal.configured_seasons),
        )

    def evaluate(self, tenant_id: str, timestamp_utc: datetime) -> EvaluationResult:
        """
        Decide whether any curfew restricts entry at a gate event.

        Args:
            tenant_id: Tenant owning the gate
            timestamp_utc: Event time; naive values are taken as UTC

        Returns:
            EvaluationResult stamped with tenant id and snapshot version

        Raises:
            SnapshotUnavailableError: The tenant's rules could not be loaded
                (retryable)
            ConfigurationError: The tenant's timezone is unknown
        """
        snapshot = self.cache.get(tenant_id)
        local_instant = self._to_local(snapshot, timestamp_utc)

        result = self.resolver.evaluate(
            local_instant,
            snapshot.rules,
            snapshot.exception_index,
        )
        result.tenant_id = tenant_id
        result.snapshot_version = snapshot.version

        logger.info(
            "gate_evaluation_complete",
            tenant_id=tenant_id,
            local_time=local_instant.isoformat(),
            restricted=result.restricted,
            matched_rules=result.matched_rules,
            skipped_rules=result.skipped_rules,
            snapshot_version=snapshot.version,
        )
        return result

    def active_curfews(self, tenant_id: str, timestamp_utc: datetime) -> List[CurfewRule]:
        """
        Active rules whose season covers the tenant-local date of a timestamp.

        Args:
            tenant_id: Tenant identifier
            timestamp_utc: Reference time; naive values are taken as UTC

        Returns:
            Rules in snapshot order
        """
        snapshot = self.cache.get(tenant_id)
        local_day = self._to_local(snapshot, timestamp_utc).date()
        return self.resolver.in_season_rules(local_day, snapshot.rules)

    def stats(self, tenant_id: str) -> CurfewStats:
        """Rule and exception counts for a tenant."""
        snapshot = self.cache.get(tenant_id)
        return self.resolver.summarize(snapshot.rules, snapshot.exception_index)

    def invalidate(self, tenant_id: Optional[str] = None) -> None:
        """Signal that a tenant's rules or exceptions changed."""
        self.cache.invalidate(tenant_id)

    @staticmethod
    def _to_local(snapshot: CurfewSnapshot, timestamp_utc: datetime) -> datetime:
        try:
            tz = ZoneInfo(snapshot.timezone)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise ConfigurationError(
                f"tenant[{snapshot.tenant_id}].timezone",
                f"unknown timezone {snapshot.timezone!r}",
            ) from e

        if timestamp_utc.tzinfo is None:
            timestamp_utc = timestamp_utc.replace(tzinfo=timezone.utc)
        return timestamp_utc.astimezone(tz)
