# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

"""
Curfew evaluation.

Pure, synchronous evaluators that decide whether any configured curfew
restricts gate entry at a given local instant.
"""

from gatewarden.domain.curfew.daily_window import evaluate_daily_window, parse_time_of_day
from gatewarden.domain.curfew.seasonal import SeasonalWindowEvaluator, parse_calendar_date
from gatewarden.domain.curfew.exception_index import ExceptionIndex
from gatewarden.domain.curfew.resolver import CurfewResolver, parse_days_of_week

__all__ = [
    "evaluate_daily_window",
    "parse_time_of_day",
    "SeasonalWindowEvaluator",
    "parse_calendar_date",
    "ExceptionIndex",
    "CurfewResolver",
    "parse_days_of_week",
]
