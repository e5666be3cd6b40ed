import logging
import logging.config
import os
import yaml
import json
from datetime import datetime, timezone
from typing import Optional
import contextvars

from .config import LOG_CONFIG_FILE, LOG_EXCLUDE_PATHS, LOG_FORMAT, LOG_LEVEL, LOG_SAMPLE_RATE

# Context variable for trace ID
trace_id_var = contextvars.ContextVar('trace_id', default=None)

_RESERVED = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'getMessage', 'exc_info',
    'exc_text', 'stack_info', 'taskName', 'method', 'path', 'status',
    'latency_ms', 'client_ip', 'component',
}

def get_trace_id() -> Optional[str]:
    """Get the current trace ID from context"""
    return trace_id_var.get()

class JsonFormatter(logging.Formatter):
    """JSON formatter with structured fields"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "trace_id": get_trace_id(),
            "method": getattr(record, 'method', None),
            "path": getattr(record, 'path', None),
            "status": getattr(record, 'status', None),
            "latency_ms": getattr(record, 'latency_ms', None),
            "client_ip": getattr(record, 'client_ip', None),
            "component": getattr(record, 'component', 'api'),
        }

        # Add exception info if present
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)

def default_config(log_level: str = LOG_LEVEL, log_format: str = LOG_FORMAT) -> dict:
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
            "fieldjobs": {"level": log_level, "handlers": [], "propagate": True},
            "uvicorn": {"level": log_level, "handlers": [], "propagate": True},
            "uvicorn.error": {"level": log_level, "handlers": [], "propagate": True},
            "uvicorn.access": {"level": log_level, "handlers": [], "propagate": True},
        },
        "root": {
            "level": log_level,
            "handlers": ["console"]
        }
    }

def setup_logging(config_file: str = LOG_CONFIG_FILE):
    """Setup logging configuration from YAML file or environment"""

    # Try to load YAML config
    config = None
    if config_file and os.path.exists(config_file):
        try:
            with open(config_file, 'r') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            print(f"Warning: Could not load {config_file}: {e}")

    # Fallback to built-in config if YAML not available
    if not config:
        config = default_config()

    # Apply environment overrides
    if LOG_FORMAT == "text":
        for handler in config.get("handlers", {}).values():
            if "formatter" in handler:
                handler["formatter"] = "text"

    for logger in config.get("loggers", {}).values():
        logger["level"] = LOG_LEVEL

    logging.config.dictConfig(config)

    # Store configuration for middleware
    logging._config = {
        "exclude_paths": LOG_EXCLUDE_PATHS,
        "sample_rate": LOG_SAMPLE_RATE
    }

    return config
