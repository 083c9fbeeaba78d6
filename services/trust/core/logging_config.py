"""
Logging Configuration
JSON logger that never emits credentials.

Provides:
- CustomJsonFormatter: JSON line formatter with credential redaction
- setup_logging: YAML dictConfig loader with ${VAR} substitution
"""

import json
import logging
import logging.config
import os
import string
from datetime import datetime, timezone

import yaml

REDACTED = "[REDACTED]"

# Extra fields whose name contains any of these are masked.
_SENSITIVE_MARKERS = ("secret", "token", "signature", "authorization", "password", "key")

_STANDARD_ATTRS = {
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}


def is_sensitive_field(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in _SENSITIVE_MARKERS)


class CustomJsonFormatter(logging.Formatter):
    """
    JSON Formatter.

    Fields:
      - _time: ISO8601 timestamp (millisecond precision)
      - level: Log level
      - logger: Logger name (e.g. trust.token)
      - message: Log message
      - any `extra=` fields, credentials masked
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "_time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS or key.startswith("_"):
                continue
            log_data[key] = REDACTED if is_sensitive_field(key) else value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(config_path: str = "logging.yml"):
    """
    Load the YAML config, substitute environment variables, and initialize logging.
    """
    if not os.path.exists(config_path):
        logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
        return

    with open(config_path, "r", encoding="utf-8") as f:
        # Supports ${LOG_LEVEL} format.
        template = string.Template(f.read())

    mapping = os.environ.copy()
    if "LOG_LEVEL" not in mapping:
        mapping["LOG_LEVEL"] = "INFO"

    content = template.safe_substitute(mapping)
    config = yaml.safe_load(content)
    logging.config.dictConfig(config)
