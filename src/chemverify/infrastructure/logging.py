"""
Logging setup for the audit pipeline.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
AUDIT_LOGGER_NAME = "chemverify.audit"

_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


class AuditRecordFilter(logging.Filter):
    """Pass only run summary records from the audit logger."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name == AUDIT_LOGGER_NAME


def configure_logging(level: str = "INFO", audit_log_path: str | None = None) -> None:
    """
    Configure root logging.

    Args:
        level: Root log level name.
        audit_log_path: When set, run summaries are also appended to this file.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if audit_log_path:
        handler = logging.FileHandler(audit_log_path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler.addFilter(AuditRecordFilter())
        logging.getLogger().addHandler(handler)
