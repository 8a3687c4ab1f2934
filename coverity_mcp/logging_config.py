"""
Logging configuration.

Every handler writes to stderr: stdout carries the stdio JSON-RPC stream.
The uvicorn entries only matter for the HTTP transport, which passes this
same dict to uvicorn as its log_config.
"""

import logging
import logging.config
from typing import Any, Dict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
HEALTH_REQUEST = "GET /health "


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for GET /health."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        return HEALTH_REQUEST not in record.getMessage()


def _logger(handler: str, level: str) -> Dict[str, Any]:
    return {"handlers": [handler], "level": level, "propagate": False}


def _stderr_handler(formatter: str, **extra: Any) -> Dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "formatter": formatter,
        "stream": "ext://sys.stderr",
        **extra,
    }


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """dictConfig for the package at ``level``; third-party loggers stay quieter."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"health_check": {"()": HealthCheckFilter}},
        "formatters": {
            "default": {"format": LOG_FORMAT},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "stderr": _stderr_handler("default"),
            "access": _stderr_handler("access", filters=["health_check"]),
        },
        "loggers": {
            "coverity_mcp": _logger("stderr", level),
            "httpx": _logger("stderr", "WARNING"),
            "uvicorn": _logger("stderr", "INFO"),
            "uvicorn.access": _logger("access", "INFO"),
        },
        "root": {"level": "WARNING", "handlers": ["stderr"]},
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(get_logging_config(level))
