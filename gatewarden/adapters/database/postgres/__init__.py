from .models import (
    TenantTable,
    CurfewTable,
    CurfewExceptionTable,
)

from .connection import (
    DatabaseConfig,
    DatabaseConnectionPool,
    get_connection_pool,
    reset_connection_pool,
)

from .repositories import (
    CurfewRepository,
    DatabaseCurfewSource,
)

__all__ = [
    "TenantTable",
    "CurfewTable",
    "CurfewExceptionTable",
    "DatabaseConfig",
    "DatabaseConnectionPool",
    "get_connection_pool",
    "reset_connection_pool",
    "CurfewRepository",
    "DatabaseCurfewSource",
]
