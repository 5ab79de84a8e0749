"""Structured logging configuration.

Scoring log records carry the identifiers needed to trace a score back to
the exact snapshot that produced it: response, questionnaire, scoring config
(id and version) and the snapshot hash.
"""

import logging
import sys
from typing import Any, Optional

from riskscore.core.config import settings

# Record attributes emitted by StructuredFormatter, in output order
SCORING_CONTEXT_FIELDS = (
    "action",
    "response_id",
    "questionnaire_id",
    "config_id",
    "config_version",
    "snapshot_hash",
)


def scoring_context(
    response_id: Optional[str] = None,
    questionnaire_id: Optional[str] = None,
    config_id: Optional[str] = None,
    config_version: Optional[str] = None,
    snapshot_hash: Optional[str] = None,
) -> dict[str, str]:
    """Build the ``extra`` mapping for a scoring log record.

    Unset identifiers are left out so the formatter skips them.
    """
    context = {
        "response_id": response_id,
        "questionnaire_id": questionnaire_id,
        "config_id": config_id,
        "config_version": config_version,
        "snapshot_hash": snapshot_hash,
    }
    return {key: value for key, value in context.items() if value is not None}


class StructuredFormatter(logging.Formatter):
    """key=value formatter carrying scoring context."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with structured data."""
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in SCORING_CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return " ".join(f"{k}={v}" for k, v in log_data.items())


def setup_logging(level: Optional[str] = None) -> None:
    """Configure application logging.

    Logs go to stderr so command-line output on stdout stays machine readable.

    Args:
        level: Log level name, defaults to ``settings.log_level``
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)

    if settings.is_dev:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = StructuredFormatter()

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


class AuditLogger:
    """Writes scoring and re-scoring events to the ``audit`` logger."""

    def __init__(self) -> None:
        self.logger = get_logger("audit")

    def log(
        self,
        action: str,
        actor_type: str,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        metadata: dict[str, Any] | None = None,
        context: dict[str, str] | None = None,
    ) -> None:
        """Log an audit event.

        Args:
            action: Event name (e.g. "response_scored")
            actor_type: "system" or "user"
            actor_id: Who performed the action
            entity_type: Kind of record acted on
            entity_id: ID of the record acted on
            metadata: Event details, rendered into the message
            context: Scoring identifiers attached as record attributes
                (see scoring_context)
        """
        if not settings.audit_log_enabled:
            return
        self.logger.info(
            f"AUDIT: action={action} actor={actor_type}:{actor_id} "
            f"entity={entity_type}:{entity_id} metadata={metadata or {}}",
            extra={**(context or {}), "action": action},
        )


audit_logger = AuditLogger()
