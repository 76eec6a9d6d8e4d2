# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

"""Read-only repository over the admin layer's curfew tables."""

from typing import Any, Callable, Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from gatewarden.adapters.database.postgres.models import (
    CurfewExceptionTable,
    CurfewTable,
    TenantTable,
)
from gatewarden.core.models.curfew import CurfewException, CurfewRecords, CurfewRule
from gatewarden.exceptions import DatabaseError


def _row_to_record(row: Any) -> Dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


class CurfewRepository:
    """
    Repository for reading curfew rules, exceptions and tenant timezones.

    Rows are converted to immutable domain records without validation;
    malformed rows are skipped later, at evaluation time.
    """

    def __init__(self, session: Session):
        """
        Initialize the repository with a database session.

        Args:
            session: SQLAlchemy database session
        """
        self.session = session

    def list_rules(self, tenant_id: str, active_only: bool = False) -> List[CurfewRule]:
        """
        List a tenant's curfew rules, newest first.

        Args:
            tenant_id: Tenant to read
            active_only: Only return rules with is_active set

        Returns:
            List of CurfewRule records
        """
        stmt = select(CurfewTable).where(CurfewTable.tenant_id == tenant_id)
        if active_only:
            stmt = stmt.where(CurfewTable.is_active == True)
        stmt = stmt.order_by(CurfewTable.created_at.desc(), CurfewTable.id.asc())

        result = self.session.execute(stmt)
        return [CurfewRule.from_record(_row_to_record(row)) for row in result.scalars().all()]

    def get_rule(self, curfew_id: str) -> Optional[CurfewRule]:
        """
        Retrieve a single rule by id.

        Returns:
            CurfewRule if found, None otherwise
        """
        row = self.session.get(CurfewTable, curfew_id)
        return CurfewRule.from_record(_row_to_record(row)) if row else None

    def list_exceptions(self, tenant_id: str) -> List[CurfewException]:
        """
        List all exceptions for a tenant, ordered by rule then date.

        Args:
            tenant_id: Tenant to read

        Returns:
            List of CurfewException records
        """
        stmt = (
            select(CurfewExceptionTable)
            .where(CurfewExceptionTable.tenant_id == tenant_id)
            .order_by(CurfewExceptionTable.curfew_id.asc(), CurfewExceptionTable.exception_date.asc())
        )
        result = self.session.execute(stmt)
        return [CurfewException.from_record(_row_to_record(row)) for row in result.scalars().all()]

    def list_exceptions_for_rule(self, curfew_id: str) -> List[CurfewException]:
        """
        List exceptions for one rule in date order.

        Args:
            curfew_id: Rule to read

        Returns:
            List of CurfewException records
        """
        stmt = (
            select(CurfewExceptionTable)
            .where(CurfewExceptionTable.curfew_id == curfew_id)
            .order_by(CurfewExceptionTable.exception_date.asc())
        )
        result = self.session.execute(stmt)
        return [CurfewException.from_record(_row_to_record(row)) for row in result.scalars().all()]

    def get_timezone(self, tenant_id: str) -> Optional[str]:
        """
        Get the tenant's configured IANA timezone.

        Returns:
            Timezone name, or None when the tenant or its timezone is missing
        """
        stmt = select(TenantTable.timezone).where(TenantTable.id == tenant_id)
        return self.session.execute(stmt).scalar_one_or_none() or None


class DatabaseCurfewSource:
    """
    Snapshot source backed by the curfew tables.

    Rules, exceptions and the tenant timezone are read in one transaction so
    that an admin change committed mid-load is either fully seen or not at
    all. On PostgreSQL the transaction runs at REPEATABLE READ, since READ
    COMMITTED gives each statement its own view.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        isolation_level: str = "REPEATABLE READ",
    ):
        """
        Args:
            session_factory: Callable returning a new SQLAlchemy session
            isolation_level: Isolation used for loads on PostgreSQL
        """
        self._session_factory = session_factory
        self.isolation_level = isolation_level

    def load(self, tenant_id: str) -> CurfewRecords:
        """
        Read a tenant's complete curfew configuration.

        Args:
            tenant_id: Tenant to read

        Returns:
            CurfewRecords from a single transaction

        Raises:
            DatabaseError: If any of the reads fail
        """
        session = self._session_factory()
        try:
            with session.begin():
                if session.get_bind().dialect.name == "postgresql":
                    session.connection(execution_options={"isolation_level": self.isolation_level})
                repo = CurfewRepository(session)
                return CurfewRecords(
                    rules=repo.list_rules(tenant_id),
                    exceptions=repo.list_exceptions(tenant_id),
                    timezone=repo.get_timezone(tenant_id),
                )
        except SQLAlchemyError as e:
            raise DatabaseError("load", str(e)) from e
        finally:
            session.close()
