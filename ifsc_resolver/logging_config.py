"""
Structured Logging Configuration Module

JSON log lines for table loading and code resolution. Besides the usual
level and message, a record may carry the IFSC being resolved, the table
being loaded and the table sizes of a finished load.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Dict, Optional


TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Record attributes copied into the JSON line when present
STRUCTURED_FIELDS = ("action", "code", "table", "stats")


class JSONFormatter(logging.Formatter):
    """One JSON object per record"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in STRUCTURED_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_entry[name] = value

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", logger_name: str = "ifsc",
                  log_format: str = "json") -> logging.Logger:
    """
    Attach a single stream handler to the resolver's root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Name of the logger
        log_format: "json" for structured output, "text" for plain lines

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if log_format.lower() == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    return logger


def get_logger(name: str = "ifsc") -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, code: Optional[str] = None,
               table: Optional[str] = None, stats: Optional[Dict[str, int]] = None):
    """
    Log a resolver event with structured fields.

    Args:
        logger: Logger instance
        level: Log level name (debug, info, warning, error)
        message: Log message
        action: Operation being performed, e.g. "load_tables"
        code: IFSC or bank code the event is about
        table: Table file the event is about
        stats: Table sizes after a load
    """
    fields = {"action": action, "code": code, "table": table, "stats": stats}
    logger.log(
        getattr(logging, level.upper()), message,
        extra={k: v for k, v in fields.items() if v is not None}
    )
