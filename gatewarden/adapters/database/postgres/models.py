# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from datetime import date, datetime
from typing import Optional
from sqlmodel import SQLModel, Field, Column, JSON
from sqlalchemy import Text, Index, UniqueConstraint


class TenantTable(SQLModel, table=True):
    """
    Tenant (community) table.

    Only the columns the curfew core reads are mapped.
    """
    __tablename__ = "tenants"

    id: str = Field(primary_key=True, max_length=50)
    name: str = Field(max_length=255)
    timezone: Optional[str] = Field(default="UTC", max_length=64)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class CurfewTable(SQLModel, table=True):
    """
    Curfew rule table.

    Written by the admin dashboard; the curfew core only reads it.
    Times are stored as HH:MM strings in the tenant's local time.
    """
    __tablename__ = "curfews"

    # Primary Key
    id: str = Field(primary_key=True, max_length=50)

    # Ownership
    tenant_id: str = Field(foreign_key="tenants.id", index=True, max_length=50)
    created_by_admin_id: Optional[str] = Field(default=None, max_length=50)

    # Display
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, sa_column=Column(Text))

    # Daily window
    start_time: str = Field(max_length=8)
    end_time: str = Field(max_length=8)
    days_of_week: list = Field(default_factory=list, sa_column=Column(JSON))

    # Seasonal scope
    season: str = Field(default="all_year", max_length=20)
    season_start_date: Optional[date] = Field(default=None)
    season_end_date: Optional[date] = Field(default=None)

    is_active: bool = Field(default=True, index=True)

    # Audit
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    __table_args__ = (
        Index('idx_curfews_tenant_active', 'tenant_id', 'is_active'),
    )


class CurfewExceptionTable(SQLModel, table=True):
    """
    Single-date suspensions of a curfew rule.

    (curfew_id, exception_date) is unique.
    """
    __tablename__ = "curfew_exceptions"

    id: str = Field(primary_key=True, max_length=50)
    curfew_id: str = Field(foreign_key="curfews.id", index=True, max_length=50)
    tenant_id: str = Field(foreign_key="tenants.id", index=True, max_length=50)
    created_by_admin_id: Optional[str] = Field(default=None, max_length=50)

    exception_date: date = Field(index=True)
    reason: str = Field(default="", sa_column=Column(Text))

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('curfew_id', 'exception_date', name='uq_curfew_exception_date'),
    )
