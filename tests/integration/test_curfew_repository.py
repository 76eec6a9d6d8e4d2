# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

import pytest
from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from gatewarden.adapters.database.postgres.connection import (
    DatabaseConfig,
    DatabaseConnectionPool,
)
from gatewarden.adapters.database.postgres.models import (
    CurfewExceptionTable,
    CurfewTable,
    TenantTable,
)
from gatewarden.adapters.database.postgres.repositories import (
    CurfewRepository,
    DatabaseCurfewSource,
)
from gatewarden.core.enums import Season
from gatewarden.core.config import Settings
from gatewarden.exceptions import DatabaseError
from gatewarden.services.gate_evaluation import GateEvaluationService
from gatewarden.services.snapshot_cache import CurfewSnapshotCache


@pytest.fixture(scope="function")
def test_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(scope="function")
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def test_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(test_session):
    """Seed two tenants with rules and exceptions."""
    now = datetime(2025, 6, 1, 12, 0)
    test_session.add_all([
        TenantTable(id="estate-lagos", name="Lekki Gardens", timezone="Africa/Lagos"),
        TenantTable(id="estate-nairobi", name="Karen Ridge", timezone=None),
    ])
    test_session.commit()

    test_session.add_all([
        CurfewTable(
            id="friday-night",
            tenant_id="estate-lagos",
            created_by_admin_id="admin-1",
            name="Friday night",
            start_time="22:00",
            end_time="06:00",
            days_of_week=["friday"],
            created_at=now,
        ),
        CurfewTable(
            id="summer-weekdays",
            tenant_id="estate-lagos",
            name="Summer weekdays",
            description="School holiday quiet hours",
            start_time="13:00",
            end_time="15:00",
            days_of_week=["monday", "tuesday", "wednesday", "thursday", "friday"],
            season=Season.CUSTOM.value,
            season_start_date=date(2025, 6, 1),
            season_end_date=date(2025, 8, 31),
            created_at=now + timedelta(hours=1),
        ),
        CurfewTable(
            id="retired",
            tenant_id="estate-lagos",
            name="Retired rule",
            start_time="00:00",
            end_time="05:00",
            days_of_week=["sunday"],
            is_active=False,
            created_at=now - timedelta(days=30),
        ),
        CurfewTable(
            id="nairobi-night",
            tenant_id="estate-nairobi",
            name="Nightly",
            start_time="23:00",
            end_time="05:00",
            days_of_week=["monday"],
            created_at=now,
        ),
    ])
    test_session.commit()

    test_session.add_all([
        CurfewExceptionTable(
            id="exc-2",
            curfew_id="friday-night",
            tenant_id="estate-lagos",
            exception_date=date(2025, 6, 13),
            reason="Estate party",
        ),
        CurfewExceptionTable(
            id="exc-1",
            curfew_id="friday-night",
            tenant_id="estate-lagos",
            exception_date=date(2025, 6, 6),
            reason="Public holiday",
        ),
    ])
    test_session.commit()
    return test_session


class TestCurfewRepository:

    def test_list_rules_newest_first(self, seeded):
        repo = CurfewRepository(seeded)
        rules = repo.list_rules("estate-lagos")

        assert [rule.id for rule in rules] == ["summer-weekdays", "friday-night", "retired"]

    def test_list_rules_active_only(self, seeded):
        repo = CurfewRepository(seeded)
        rules = repo.list_rules("estate-lagos", active_only=True)

        assert {rule.id for rule in rules} == {"summer-weekdays", "friday-night"}

    def test_rule_fields_mapped(self, seeded):
        rule = CurfewRepository(seeded).get_rule("summer-weekdays")

        assert rule.tenant_id == "estate-lagos"
        assert rule.start_time == "13:00"
        assert rule.days_of_week[0] == "monday"
        assert rule.season == "custom"
        assert rule.season_start == date(2025, 6, 1)
        assert rule.season_end == date(2025, 8, 31)
        assert rule.description == "School holiday quiet hours"
        assert rule.is_active is True

    def test_get_missing_rule(self, seeded):
        assert CurfewRepository(seeded).get_rule("nope") is None

    def test_list_exceptions_ordered(self, seeded):
        exceptions = CurfewRepository(seeded).list_exceptions("estate-lagos")

        assert [e.date for e in exceptions] == [date(2025, 6, 6), date(2025, 6, 13)]
        assert exceptions[0].reason == "Public holiday"
        assert exceptions[0].curfew_id == "friday-night"

    def test_list_exceptions_for_rule(self, seeded):
        exceptions = CurfewRepository(seeded).list_exceptions_for_rule("friday-night")
        assert [e.id for e in exceptions] == ["exc-1", "exc-2"]

    def test_exceptions_scoped_by_tenant(self, seeded):
        assert CurfewRepository(seeded).list_exceptions("estate-nairobi") == []

    def test_get_timezone(self, seeded):
        repo = CurfewRepository(seeded)

        assert repo.get_timezone("estate-lagos") == "Africa/Lagos"
        assert repo.get_timezone("estate-nairobi") is None
        assert repo.get_timezone("missing") is None


class TestDatabaseCurfewSource:

    def test_load_reads_everything(self, seeded, session_factory):
        records = DatabaseCurfewSource(session_factory).load("estate-lagos")

        assert len(records.rules) == 3
        assert len(records.exceptions) == 2
        assert records.timezone == "Africa/Lagos"

    def test_load_uses_one_session(self, seeded, session_factory):
        opened = []

        def factory():
            session = session_factory()
            opened.append(session)
            return session

        DatabaseCurfewSource(factory).load("estate-lagos")

        assert len(opened) == 1

    def test_load_in_single_transaction(self):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "postgresql"
        DatabaseCurfewSource(lambda: session).load("estate-lagos")

        session.begin.assert_called_once()
        session.connection.assert_called_once_with(
            execution_options={"isolation_level": "REPEATABLE READ"}
        )
        assert session.execute.call_count == 3
        session.close.assert_called_once()

    def test_isolation_level_only_on_postgres(self):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "sqlite"
        DatabaseCurfewSource(lambda: session).load("estate-lagos")

        session.connection.assert_not_called()

    def test_wraps_database_errors(self):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "sqlite"
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("server closed"))
        source = DatabaseCurfewSource(lambda: session)

        with pytest.raises(DatabaseError) as exc_info:
            source.load("estate-lagos")

        assert exc_info.value.details["operation"] == "load"
        session.close.assert_called_once()

    def test_end_to_end_evaluation(self, seeded, session_factory):
        cache = CurfewSnapshotCache(
            DatabaseCurfewSource(session_factory),
            ttl_seconds=60,
            max_staleness_seconds=300,
            default_timezone="UTC",
        )
        service = GateEvaluationService(cache, settings=Settings())

        # Friday 2025-06-20 22:30 in Lagos
        restricted = service.evaluate("estate-lagos", datetime(2025, 6, 20, 21, 30, tzinfo=timezone.utc))
        assert restricted.restricted is True
        assert restricted.matched_rules == ["friday-night"]

        # Saturday 2025-06-07 05:00 in Lagos belongs to the excepted Friday night
        excepted = service.evaluate("estate-lagos", datetime(2025, 6, 7, 4, 0, tzinfo=timezone.utc))
        assert excepted.restricted is False

        # Friday 2025-06-20 14:00 in Lagos, in the custom summer range
        afternoon = service.evaluate("estate-lagos", datetime(2025, 6, 20, 13, 0, tzinfo=timezone.utc))
        assert afternoon.matched_rules == ["summer-weekdays"]

    def test_tenant_without_timezone_uses_default(self, seeded, session_factory):
        cache = CurfewSnapshotCache(
            DatabaseCurfewSource(session_factory),
            ttl_seconds=60,
            max_staleness_seconds=300,
            default_timezone="Africa/Nairobi",
        )

        assert cache.get("estate-nairobi").timezone == "Africa/Nairobi"


class TestDatabaseConnectionPool:

    @pytest.fixture
    def pool(self, tmp_path):
        pool = DatabaseConnectionPool(
            DatabaseConfig(database_url=f"sqlite:///{tmp_path / 'gatewarden.db'}", pool_size=2)
        )
        yield pool
        pool.dispose()

    def test_lazy_initialization(self, pool):
        assert pool._initialized is False
        assert pool.engine is not None
        assert pool._initialized is True

    def test_test_connection(self, pool):
        assert pool.test_connection() is True

    def test_session_scope_commits(self, pool):
        SQLModel.metadata.create_all(pool.engine)

        with pool.session_scope() as session:
            session.add(TenantTable(id="t-1", name="Tenant"))

        assert DatabaseCurfewSource(pool.session_factory).load("t-1").timezone == "UTC"

    def test_session_scope_rolls_back(self, pool):
        SQLModel.metadata.create_all(pool.engine)

        with pytest.raises(RuntimeError):
            with pool.session_scope() as session:
                session.add(TenantTable(id="t-2", name="Tenant"))
                session.flush()
                raise RuntimeError("boom")

        assert DatabaseCurfewSource(pool.session_factory).load("t-2").timezone is None

    def test_dispose_resets(self, pool):
        _ = pool.engine
        pool.dispose()
        assert pool._initialized is False
