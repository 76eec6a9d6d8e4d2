# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# GateWarden - Curfew enforcement core for gated-community entry control.

import logging
import sys
from typing import Optional

import structlog

from gatewarden.core.config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure stdlib logging and structlog for the process.

    JSON output is used in production or when log_format is "json";
    everything else gets the console renderer.

    Args:
        settings: Settings to read the level and format from (defaults to global)
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level.value)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(level)

    use_json = settings.is_production or settings.log_format == "json"

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if use_json
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, level: Optional[int] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger bound to a stdlib logger name.

    Args:
        name: Logger name (typically __name__)
        level: Optional logging level override for this logger

    Returns:
        Structured logger instance
    """
    if level is not None:
        logging.getLogger(name).setLevel(level)
    return structlog.get_logger(name)
