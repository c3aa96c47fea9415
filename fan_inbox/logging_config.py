"""
Structured JSON logging for the inbox.

Each component gets its own named logger. Keyword arguments passed to a log
call are merged into the emitted JSON object, so callers log facts
(conversation ids, counts, durations) rather than formatted sentences.
"""
import json
import logging
import os
import sys
import time
import traceback
from datetime import datetime, timezone
from functools import wraps
from typing import Optional

LOG_LEVEL = os.environ.get("INBOX_LOG_LEVEL", "INFO").upper()


class JsonLineFormatter(logging.Formatter):
    """One JSON object per line; record context is flattened into it."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "context", {}))
        return json.dumps(entry, default=str)


class StructuredLogger:
    """Thin wrapper that turns keyword arguments into JSON fields."""

    def __init__(self, name: str, level: str = LOG_LEVEL):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level, logging.INFO))
        self.logger.propagate = False
        # Module reloads must not stack duplicate handlers
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(JsonLineFormatter())
            self.logger.addHandler(handler)

    def debug(self, message: str, **context):
        self.logger.debug(message, extra={"context": context})

    def info(self, message: str, **context):
        self.logger.info(message, extra={"context": context})

    def warning(self, message: str, **context):
        self.logger.warning(message, extra={"context": context})

    def error(self, message: str, error: Optional[Exception] = None, **context):
        if error is not None:
            context.update(
                error_type=type(error).__name__,
                error_message=str(error),
                traceback="".join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                ),
            )
        self.logger.error(message, extra={"context": context})


def timed(logger: StructuredLogger):
    """Log how long the wrapped call took, at debug on success and error on failure."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"{func.__name__} failed",
                    error=e,
                    function=func.__name__,
                    duration_ms=round((time.perf_counter() - start) * 1000, 2),
                )
                raise
            logger.debug(
                f"{func.__name__} completed",
                function=func.__name__,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            return result

        return wrapper

    return decorator


api_logger = StructuredLogger("inbox.api")
store_logger = StructuredLogger("inbox.store")
cache_logger = StructuredLogger("inbox.cache")
normalizer_logger = StructuredLogger("inbox.normalizer")
