# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from gatewarden.adapters.database.postgres.repositories.curfew import (
    CurfewRepository,
    DatabaseCurfewSource,
)

__all__ = [
    "CurfewRepository",
    "DatabaseCurfewSource",
]
