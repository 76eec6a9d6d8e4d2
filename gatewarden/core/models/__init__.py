# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from gatewarden.core.models.curfew import (
    CurfewRule,
    CurfewException,
    CurfewRecords,
    CurfewStats,
    DailyWindow,
    EvaluationResult,
    SeasonBoundary,
)

__all__ = [
    "CurfewRule",
    "CurfewException",
    "CurfewRecords",
    "CurfewStats",
    "DailyWindow",
    "EvaluationResult",
    "SeasonBoundary",
]
