"""
Structured JSON logging.

Usage:
    from shared.log_config import configure_logging

    configure_logging(level="INFO")
    logger = logging.getLogger(__name__)
    logger.info("Batch complete", extra={"event": "batch_completed", "sent": 3})
"""

import logging

from pythonjsonlogger.json import JsonFormatter

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
DEFAULT_SERVICE_NAME = "attendance_notifier"

LOG_FIELDS = ("asctime", "levelname", "name", "message", "service")
FIELD_RENAME_MAP = {"levelname": "level", "name": "logger"}


class ServiceNameFilter(logging.Filter):
    """Adds the service name to every record."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self._service_name
        return True


def create_json_formatter() -> JsonFormatter:
    format_string = " ".join(f"%({field})s" for field in LOG_FIELDS)
    return JsonFormatter(format_string, rename_fields=FIELD_RENAME_MAP)


def configure_logging(
    level: str = "INFO", service_name: str = DEFAULT_SERVICE_NAME
) -> None:
    """
    Install a single JSON handler on the root logger.

    Raises:
        ValueError: If the level name is not a standard logging level
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level: {level}. Valid: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(ServiceNameFilter(service_name))

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Replace existing handlers to avoid duplicate lines
    root.handlers = [handler]
