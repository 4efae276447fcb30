"""
Structured logging formatter for the order services
"""
import json
import logging
from datetime import datetime, timezone


# Extra attributes copied from `logger.info(..., extra={...})` into the JSON body
CONTEXT_FIELDS = (
    "request_id",
    "user_id",
    "role",
    "order_id",
    "day_id",
    "status",
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)
        if hasattr(record, 'duration'):
            log_entry['duration_ms'] = record.duration

        # Add exception info if present
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def get_service_logger(service_name: str) -> logging.Logger:
    """Get a logger instance for a specific service"""
    return logging.getLogger(f"freshsip.services.{service_name}")
