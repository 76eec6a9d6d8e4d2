# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, Dict, Optional, Protocol, Set

import structlog

from gatewarden.core.config import get_settings
from gatewarden.core.models.curfew import CurfewRecords
from gatewarden.domain.curfew.exception_index import ExceptionIndex
from gatewarden.exceptions import SnapshotUnavailableError

logger = structlog.get_logger(__name__)


class CurfewSnapshotSource(Protocol):
    """Read accessor provided by the persistence layer."""

    def load(self, tenant_id: str) -> CurfewRecords:
        """Read rules, exceptions and timezone as one consistent set."""
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CurfewSnapshot:
    """
    Immutable, fully materialised view of one tenant's curfew configuration.

    The exception index is built once when the snapshot is created.
    """

    tenant_id: str
    rules: tuple
    exceptions: tuple
    timezone: str
    version: int
    loaded_at: datetime
    exception_index: ExceptionIndex = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(self, "exceptions", tuple(self.exceptions))
        object.__setattr__(self, "exception_index", ExceptionIndex(self.exceptions))

    def age_seconds(self, now: datetime) -> float:
        return (now - self.loaded_at).total_seconds()


class CurfewSnapshotCache:
    """
    Per-tenant cache of curfew snapshots.

    Snapshots are never modified in place. A refresh builds a complete new
    snapshot and swaps it in with a single dict assignment, so concurrent
    readers see either the old or the new rule set. Loads for one tenant
    are serialised by a per-tenant lock; fresh reads take no lock.
    """

    def __init__(
        self,
        source: CurfewSnapshotSource,
        ttl_seconds: Optional[int] = None,
        max_staleness_seconds: Optional[int] = None,
        default_timezone: Optional[str] = None,
        retry_after_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize the cache.

        Args:
            source: Persistence read accessors
            ttl_seconds: Age after which a snapshot is refreshed
            max_staleness_seconds: Age up to which an expired snapshot is still
                served when its refresh fails (0 disables)
            default_timezone: Timezone for tenants without one configured
            retry_after_seconds: Retry hint attached to SnapshotUnavailableError
            clock: Returns the current aware UTC time
        """
        settings = get_settings()
        self.source = source
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.curfew_snapshot_ttl_seconds
        self.max_staleness_seconds = (
            max_staleness_seconds
            if max_staleness_seconds is not None
            else settings.curfew_snapshot_max_staleness_seconds
        )
        self.default_timezone = default_timezone or settings.curfew_default_timezone
        self.retry_after_seconds = retry_after_seconds or settings.curfew_snapshot_retry_after_seconds
        self._clock = clock

        self._snapshots: Dict[str, CurfewSnapshot] = {}
        self._versions: Dict[str, int] = {}
        self._invalidated: Set[str] = set()
        # Bumped on every invalidate; a load only clears the flag if unchanged
        self._generations: Dict[str, int] = {}
        self._global_generation = 0
        self._invalidation_guard = Lock()
        self._locks: Dict[str, Lock] = {}
        self._locks_guard = Lock()

        logger.info(
            "curfew_snapshot_cache_initialized",
            ttl_seconds=self.ttl_seconds,
            max_staleness_seconds=self.max_staleness_seconds,
            default_timezone=self.default_timezone,
        )

    def get(self, tenant_id: str) -> CurfewSnapshot:
        """
        Get the current snapshot for a tenant, loading it if needed.

        Args:
            tenant_id: Tenant identifier

        Returns:
            CurfewSnapshot

        Raises:
            SnapshotUnavailableError: No snapshot could be loaded and no
                acceptable stale one exists
        """
        snapshot = self._snapshots.get(tenant_id)
        if snapshot is not None and self._is_fresh(snapshot):
            return snapshot

        with self._lock_for(tenant_id):
            # Another thread may have refreshed while we waited
            snapshot = self._snapshots.get(tenant_id)
            if snapshot is not None and self._is_fresh(snapshot):
                return snapshot

            try:
                return self._refresh(tenant_id)
            except Exception as e:
                return self._fallback(tenant_id, snapshot, e)

    def refresh(self, tenant_id: str) -> CurfewSnapshot:
        """
        Force a reload of a tenant's snapshot.

        Raises:
            SnapshotUnavailableError: If the load fails
        """
        with self._lock_for(tenant_id):
            try:
                return self._refresh(tenant_id)
            except Exception as e:
                raise SnapshotUnavailableError(
                    tenant_id, str(e), retry_after=self.retry_after_seconds
                ) from e

    def invalidate(self, tenant_id: Optional[str] = None) -> None:
        """
        Mark a tenant's snapshot (or all snapshots) for reload on next read.

        The old snapshot stays available as a stale fallback.

        Args:
            tenant_id: Tenant to invalidate; None invalidates every tenant
        """
        with self._invalidation_guard:
            if tenant_id is None:
                self._global_generation += 1
                self._invalidated.update(self._snapshots.keys())
            else:
                self._generations[tenant_id] = self._generations.get(tenant_id, 0) + 1
                self._invalidated.add(tenant_id)
        logger.info("curfew_snapshot_invalidated", tenant_id=tenant_id or "*")

    def clear(self) -> None:
        """Drop every cached snapshot."""
        with self._invalidation_guard:
            self._snapshots = {}
            self._invalidated = set()
        logger.info("curfew_snapshot_cache_cleared")

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        now = self._clock()
        snapshots = dict(self._snapshots)
        return {
            "tenants": len(snapshots),
            "invalidated": len(self._invalidated),
            "ttl_seconds": self.ttl_seconds,
            "max_age_seconds": max(
                (s.age_seconds(now) for s in snapshots.values()), default=0.0
            ),
        }

    def _is_fresh(self, snapshot: CurfewSnapshot) -> bool:
        if snapshot.tenant_id in self._invalidated:
            return False
        return snapshot.age_seconds(self._clock()) < self.ttl_seconds

    def _lock_for(self, tenant_id: str) -> Lock:
        with self._locks_guard:
            lock = self._locks.get(tenant_id)
            if lock is None:
                lock = self._locks[tenant_id] = Lock()
            return lock

    def _refresh(self, tenant_id: str) -> CurfewSnapshot:
        with self._invalidation_guard:
            generation = self._generation(tenant_id)
        records = self.source.load(tenant_id)
        tz_name = records.timezone or self.default_timezone

        version = self._versions.get(tenant_id, 0) + 1
        snapshot = CurfewSnapshot(
            tenant_id=tenant_id,
            rules=records.rules,
            exceptions=records.exceptions,
            timezone=tz_name,
            version=version,
            loaded_at=self._clock(),
        )

        self._versions[tenant_id] = version
        self._snapshots[tenant_id] = snapshot

        with self._invalidation_guard:
            invalidated_during_load = self._generation(tenant_id) != generation
            if invalidated_during_load:
                self._invalidated.add(tenant_id)
            else:
                self._invalidated.discard(tenant_id)

        logger.info(
            "curfew_snapshot_refreshed",
            tenant_id=tenant_id,
            version=version,
            rules=len(snapshot.rules),
            exceptions=len(snapshot.exception_index),
            timezone=tz_name,
            invalidated_during_load=invalidated_during_load,
        )
        return snapshot

    def _generation(self, tenant_id: str) -> tuple:
        return self._global_generation, self._generations.get(tenant_id, 0)

    def _fallback(
        self,
        tenant_id: str,
        snapshot: Optional[CurfewSnapshot],
        error: Exception,
    ) -> CurfewSnapshot:
        if snapshot is not None and self.max_staleness_seconds:
            age = snapshot.age_seconds(self._clock())
            if age <= self.max_staleness_seconds:
                logger.warning(
                    "curfew_snapshot_refresh_failed_serving_stale",
                    tenant_id=tenant_id,
                    version=snapshot.version,
                    age_seconds=round(age, 1),
                    error=str(error),
                )
                return snapshot

        logger.error(
            "curfew_snapshot_unavailable",
            tenant_id=tenant_id,
            had_snapshot=snapshot is not None,
            error=str(error),
        )
        raise SnapshotUnavailableError(
            tenant_id, str(error), retry_after=self.retry_after_seconds
        ) from error
