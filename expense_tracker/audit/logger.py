"""
Audit Logger

Every mutation of the ledger and every file operation is logged as a
structured audit event. This provides:
1. Complete traceability
2. Debugging capability
3. A record of skipped lines and failed saves

The audit logger never raises: a logging failure must not take the
ledger down with it.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(
    level: str = "WARNING",
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """
    Point the standard library root logger (which structlog writes through)
    at stderr or a file. Safe to call more than once.
    """
    handler: logging.Handler
    if log_file is not None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))


class AuditLogger:
    """
    Central audit logging service.

    Events are written to the structured local log with a level that
    matches their severity.
    """

    def __init__(self, correlation_id: Optional[UUID] = None):
        """
        Initialize audit logger.

        Args:
            correlation_id: Attached to every event logged through this
                            instance. A new one is created when omitted.
        """
        self._correlation_id = correlation_id or create_correlation_id()
        self._logger = structlog.get_logger("expense_tracker.audit")

    @property
    def correlation_id(self) -> UUID:
        return self._correlation_id

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        if event.correlation_id is None:
            event.correlation_id = self._correlation_id

        try:
            log_dict = event.to_log_dict()
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Logging must never break a ledger operation
            print(f"audit logging failed: {e}", file=sys.stderr)
            return False

        return True

    def log_expense_added(self, expense_id: int, description: str, amount: str) -> None:
        self.log(AuditEventBuilder.expense_added(expense_id, description, amount))

    def log_expense_updated(self, expense_id: int, fields: list[str]) -> None:
        self.log(AuditEventBuilder.expense_updated(expense_id, fields))

    def log_expense_update_rejected(self, expense_id: int, issues: list[dict]) -> None:
        self.log(AuditEventBuilder.expense_update_rejected(expense_id, issues))

    def log_expense_deleted(self, expense_id: int) -> None:
        self.log(AuditEventBuilder.expense_deleted(expense_id))

    def log_expense_duplicated(self, source_id: int, new_id: int) -> None:
        self.log(AuditEventBuilder.expense_duplicated(source_id, new_id))

    def log_ledger_cleared(self, removed: int) -> None:
        self.log(AuditEventBuilder.ledger_cleared(removed))

    def log_history_applied(self, direction: str, expense_count: int) -> None:
        self.log(AuditEventBuilder.history_applied(direction, expense_count))

    def log_ledger_loaded(self, path: str, loaded: int, skipped: int) -> None:
        self.log(AuditEventBuilder.ledger_loaded(path, loaded, skipped))

    def log_save_failed(self, path: str, error_message: str) -> None:
        self.log(AuditEventBuilder.save_failed(path, error_message))

    def log_backup_created(self, path: str, expense_count: int) -> None:
        self.log(AuditEventBuilder.file_written(
            AuditEventType.BACKUP_CREATED, path, expense_count
        ))

    def log_backup_failed(self, path: str, error_message: str) -> None:
        self.log(AuditEventBuilder.file_failed(
            AuditEventType.BACKUP_FAILED, path, error_message
        ))

    def log_export_completed(self, path: str, expense_count: int) -> None:
        self.log(AuditEventBuilder.file_written(
            AuditEventType.EXPORT_COMPLETED, path, expense_count
        ))

    def log_export_failed(self, path: str, error_message: str) -> None:
        self.log(AuditEventBuilder.file_failed(
            AuditEventType.EXPORT_FAILED, path, error_message
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.log(AuditEventBuilder.system_error(error_type, error_message, details))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    One is created per CLI session and attached to all of its events.
    """
    return uuid4()
