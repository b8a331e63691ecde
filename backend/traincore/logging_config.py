"""
Structured JSON logging for the console core.

Every service and route logs through a named channel (traincore.<channel>).
Aggregation warnings such as skipped rows or unknown status values, gate
denials and role changes therefore carry their channel, the request ID
and the entity IDs they concern. One JSON object is written per line on
stdout.
"""

import logging
import json
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

from traincore.config import LOG_LEVEL

# Set by the request middleware; empty outside a request (tests, scripts)
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CHANNELS = ["http", "db", "attendance", "scoring", "auth", "stats", "tasks"]


class StructuredJsonFormatter(logging.Formatter):
    """
    Render a record as {timestamp, level, message, channel, context, extra}.

    context holds entity IDs (student_id, teacher_id, task_id, ...) plus the
    current request_id; extra holds measurements such as duration_ms or
    skipped-row counts.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": getattr(record, "channel", record.name.split(".")[-1] if "." in record.name else "app"),
            "context": {
                "request_id": request_id_var.get(""),
                **(getattr(record, "context", {}) or {})
            },
            "extra": getattr(record, "extra_data", {}) or {}
        }
        return json.dumps(log_entry, default=str)


def setup_logging():
    """Install the JSON handler on the root logger and level every channel at LOG_LEVEL."""
    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    formatter = StructuredJsonFormatter()

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        get_logger(channel).setLevel(level)

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """Logger for one of CHANNELS."""
    return logging.getLogger(f"traincore.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None):
    """
    Log `message` at `level` (a level name) on `logger`.

    `context` identifies what the entry is about (student_id, batch_id,
    teacher_id, task_id); `extra_data` carries counts and timings.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.log(
        log_level,
        message,
        extra={"context": context or {}, "extra_data": extra_data or {}, "channel": logger.name.split(".")[-1]}
    )


def generate_request_id() -> str:
    """UUID4 string for the X-Request-ID header."""
    return str(uuid.uuid4())
