# coopfund/logging_config.py

"""
Structured logging configuration.

Development gets human-readable console output, production gets JSON lines
on stdout.

Environment variables:
- LOG_FORMAT: "json" or "console" (default: json in production)
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
"""
import json
import logging
import os
from datetime import datetime, timezone


# Loggers for every ledger app
APP_LOGGERS = (
    'core',
    'utils',
    'members',
    'treasury',
    'investments',
    'ledger',
    'fines',
    'notifications',
)


def get_logging_config(debug: bool = False) -> dict:
    """
    Build the Django LOGGING dict.

    Args:
        debug: Whether running in debug mode
    """
    log_level = os.environ.get("LOG_LEVEL", "DEBUG" if debug else "INFO")
    log_format = os.environ.get("LOG_FORMAT", "console" if debug else "json")

    config = {
        "version": 1,
        "disable_existing_loggers": False,
    }

    if log_format == "json":
        config["formatters"] = {
            "json": {
                "()": "coopfund.logging_config.JsonFormatter",
            },
        }
        config["handlers"] = {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout",
            },
            "null": {
                "class": "logging.NullHandler",
            },
        }
    else:
        config["formatters"] = {
            "verbose": {
                "format": "[{asctime}] {levelname} {name} {message}",
                "style": "{",
            },
        }
        config["handlers"] = {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "verbose",
            },
            "null": {
                "class": "logging.NullHandler",
            },
        }

    config["loggers"] = {
        "": {
            "handlers": ["console"],
            "level": log_level,
        },
        "django": {
            "handlers": ["console"],
            "level": log_level,
            "propagate": False,
        },
        "django.db.backends": {
            "handlers": ["console"] if debug else ["null"],
            "level": "DEBUG" if debug else "INFO",
            "propagate": False,
        },
    }
    for name in APP_LOGGERS:
        config["loggers"][name] = {
            "handlers": ["console"],
            "level": log_level,
            "propagate": False,
        }

    return config


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter.

    Each line carries timestamp, level, logger, message, location and any
    ``extra`` fields passed to the logger.
    """

    STANDARD_ATTRS = {
        "name", "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "lineno", "funcName", "created",
        "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "exc_info", "exc_text", "stack_info",
        "message", "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extras = {}
        for key, value in record.__dict__.items():
            if key in self.STANDARD_ATTRS:
                continue
            try:
                json.dumps(value)
                extras[key] = value
            except (TypeError, ValueError):
                extras[key] = str(value)

        if extras:
            log_entry["extra"] = extras

        return json.dumps(log_entry, default=str)
