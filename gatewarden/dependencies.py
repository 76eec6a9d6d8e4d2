# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from typing import Optional
import structlog

from gatewarden.core.config import get_settings
from gatewarden.services.gate_evaluation import GateEvaluationService
from gatewarden.services.snapshot_cache import CurfewSnapshotCache, CurfewSnapshotSource

logger = structlog.get_logger(__name__)


class ServiceContainer:
    """Lazily builds and holds the process-wide curfew services."""

    _instance: Optional["ServiceContainer"] = None

    def __init__(self, source: Optional[CurfewSnapshotSource] = None):
        self._source = source
        self._snapshot_cache = None
        self._gate_evaluation_service = None

    @classmethod
    def get_instance(cls) -> "ServiceContainer":
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    @property
    def source(self) -> CurfewSnapshotSource:
        if self._source is None:
            from gatewarden.adapters.database.postgres.connection import get_connection_pool
            from gatewarden.adapters.database.postgres.repositories import DatabaseCurfewSource

            self._source = DatabaseCurfewSource(get_connection_pool().session_factory)
            logger.info("curfew_source_created", source="database")
        return self._source

    @property
    def snapshot_cache(self) -> CurfewSnapshotCache:
        if self._snapshot_cache is None:
            self._snapshot_cache = CurfewSnapshotCache(self.source)
        return self._snapshot_cache

    @property
    def gate_evaluation_service(self) -> GateEvaluationService:
        if self._gate_evaluation_service is None:
            self._gate_evaluation_service = GateEvaluationService(
                self.snapshot_cache,
                settings=get_settings(),
            )
        return self._gate_evaluation_service


def get_gate_evaluation_service() -> GateEvaluationService:
    return ServiceContainer.get_instance().gate_evaluation_service
