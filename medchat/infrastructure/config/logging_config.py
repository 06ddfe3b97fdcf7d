"""
Logging Configuration
"""
import json
import logging
import sys
import traceback
from datetime import datetime, timezone

from .settings import MonitoringSettings
from medchat.shared.constants import LoggingConstants


class JsonFormatter(logging.Formatter):
    """
    Formatter emitting one JSON object per log record.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception.type"] = record.exc_info[0].__name__
            log_entry["exception.message"] = str(record.exc_info[1])
            log_entry["exception.stacktrace"] = "".join(
                traceback.format_exception(*record.exc_info)
            )

        return json.dumps(log_entry)


def configure_logging(settings: MonitoringSettings) -> None:
    """
    Configure the root logger from monitoring settings.

    Replaces existing root handlers, so calling it again (e.g. once per
    app instance in tests) does not duplicate output.
    """
    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(LoggingConstants.LOG_FORMAT))

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        handlers=[handler],
        force=True
    )

    # SQLAlchemy echoes every statement at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
