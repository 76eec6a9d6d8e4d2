# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

from datetime import date
from enum import Enum

class Season(str, Enum):
    """ Seasonal scope of a curfew rule. """
    ALL_YEAR = "all_year"
    SUMMER = "summer"
    WINTER = "winter"
    CUSTOM = "custom"

class Weekday(str, Enum):
    """ Day of week a curfew window is anchored on. """
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, day: date) -> "Weekday":
        """ Weekday of a calendar date (date.weekday() is 0 for Monday). """
        return _WEEKDAY_ORDER[day.weekday()]

    @classmethod
    def parse(cls, value: str) -> "Weekday":
        """ Parse a stored weekday name, tolerating case and whitespace. """
        return cls(value.strip().lower())

_WEEKDAY_ORDER = tuple(Weekday)

class Environment(str, Enum):
    """ Deployment environment """
    DEVELOPMENT = "dev"
    STAGING = "staging"
    PRODUCTION = "prod"
    TEST = "test"

class LogLevel(str, Enum):
    """ Logging levels. """
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
