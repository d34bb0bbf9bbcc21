import logging
import logging.config
import os
import json
from datetime import datetime, timezone
from typing import Optional
import contextvars

import yaml

from .config import LOG_FORMAT, LOG_LEVEL, LOG_EXCLUDE_PATHS, LOG_SAMPLE_RATE

# Context variable for trace ID
trace_id_var = contextvars.ContextVar('trace_id', default=None)

# LogRecord attributes that are never copied into the structured payload
_RESERVED = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'exc_info', 'exc_text',
    'stack_info', 'taskName', 'message',
}


def get_trace_id() -> Optional[str]:
    """Get the current trace ID from context"""
    return trace_id_var.get()


def log_event(event: str, level: int = logging.INFO, exc_info=None, **fields):
    """Log a named event with structured fields.

    The event name is the log message so it stays stable for alerting;
    everything else travels as extra fields.
    """
    logger = logging.getLogger("flagdeck")
    logger.log(level, event, exc_info=exc_info, extra={"event": event, **fields})


class JsonFormatter(logging.Formatter):
    """Custom JSON formatter with structured fields"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "trace_id": get_trace_id(),
            "component": getattr(record, 'component', 'api'),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED and key not in log_entry:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def _default_config(log_format: str, log_level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JsonFormatter},
            "text": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": log_format,
                "stream": "ext://sys.stdout"
            }
        },
        "loggers": {
            "flagdeck": {"level": log_level, "handlers": ["console"], "propagate": False},
            "uvicorn": {"level": log_level, "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": log_level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": log_level, "handlers": ["console"], "propagate": False},
        },
        "root": {"level": log_level, "handlers": ["console"]}
    }


def setup_logging():
    """Setup logging configuration from YAML file or environment"""
    log_format = LOG_FORMAT if LOG_FORMAT in ("json", "text") else "json"

    # Try to load YAML config
    config = None
    config_path = os.getenv("LOGGING_CONFIG", "LOGGING.yaml")
    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            print(f"Warning: Could not load {config_path}: {e}")

    # Fallback to basic config if YAML not available
    if not config:
        config = _default_config(log_format, LOG_LEVEL)

    # Apply log level override
    for logger in config.get("loggers", {}).values():
        logger["level"] = LOG_LEVEL

    logging.config.dictConfig(config)
    return config


def get_log_policy() -> dict:
    """Request log sampling policy used by the tracing middleware"""
    return {
        "exclude_paths": LOG_EXCLUDE_PATHS,
        "sample_rate": LOG_SAMPLE_RATE,
    }
