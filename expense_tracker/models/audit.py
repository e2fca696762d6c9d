"""
Audit Models for Expense Tracker

Every mutation of the ledger and every file operation is logged for audit
purposes. This provides:
1. Complete traceability of all operations
2. Debugging information when things go wrong
3. Ability to reconstruct history

Audit events are append-only. They are never modified after creation.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every ledger operation has its own event type.
    """
    # Ledger mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_UPDATE_REJECTED = "expense_update_rejected"
    EXPENSE_DELETED = "expense_deleted"
    EXPENSE_DUPLICATED = "expense_duplicated"
    LEDGER_CLEARED = "ledger_cleared"

    # History
    UNDO_APPLIED = "undo_applied"
    REDO_APPLIED = "redo_applied"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    CORRUPT_LINES_SKIPPED = "corrupt_lines_skipped"
    SAVE_FAILED = "save_failed"
    BACKUP_CREATED = "backup_created"
    BACKUP_FAILED = "backup_failed"

    # Reports
    EXPORT_COMPLETED = "export_completed"
    EXPORT_FAILED = "export_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which expense is this about?
    entity_id: Optional[int] = Field(
        default=None,
        description="ID of the expense this event relates to"
    )

    # Correlation - all events of one session share this
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one CLI session)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, "Lunch", "12.50")
        event = AuditEventBuilder.save_failed("expenses.txt", str(exc))
    """

    @staticmethod
    def expense_added(
        expense_id: int,
        description: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added: {description} - ${amount}",
            details={
                "description": description,
                "amount": amount,
            },
        )

    @staticmethod
    def expense_updated(
        expense_id: int,
        fields: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense {expense_id} updated: {', '.join(fields)}",
            details={"fields": fields},
        )

    @staticmethod
    def expense_update_rejected(
        expense_id: int,
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Update of expense {expense_id} rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def expense_deleted(
        expense_id: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense {expense_id} deleted",
        )

    @staticmethod
    def expense_duplicated(
        source_id: int,
        new_id: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DUPLICATED,
            entity_id=new_id,
            correlation_id=correlation_id,
            description=f"Expense {source_id} duplicated as {new_id}",
            details={"source_id": source_id},
        )

    @staticmethod
    def ledger_cleared(
        removed: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_CLEARED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"All expenses cleared ({removed} removed)",
            details={"removed": removed},
        )

    @staticmethod
    def history_applied(
        direction: str,
        expense_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        event_type = (
            AuditEventType.UNDO_APPLIED
            if direction == "undo"
            else AuditEventType.REDO_APPLIED
        )
        return AuditEvent(
            event_type=event_type,
            correlation_id=correlation_id,
            description=f"{direction.capitalize()} applied, {expense_count} expenses in ledger",
            details={"expense_count": expense_count},
        )

    @staticmethod
    def ledger_loaded(
        path: str,
        loaded: int,
        skipped: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        if skipped:
            return AuditEvent(
                event_type=AuditEventType.CORRUPT_LINES_SKIPPED,
                severity=AuditSeverity.WARNING,
                correlation_id=correlation_id,
                description=f"Skipped {skipped} corrupted lines while loading {path}",
                details={"path": path, "loaded": loaded, "skipped": skipped},
            )
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            correlation_id=correlation_id,
            description=f"Loaded {loaded} expenses from {path}",
            details={"path": path, "loaded": loaded},
        )

    @staticmethod
    def save_failed(
        path: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"Could not save expenses to {path}",
            error_message=error_message,
            details={"path": path},
        )

    @staticmethod
    def file_written(
        event_type: AuditEventType,
        path: str,
        expense_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        verb = "Backup written" if event_type == AuditEventType.BACKUP_CREATED else "Exported"
        return AuditEvent(
            event_type=event_type,
            correlation_id=correlation_id,
            description=f"{verb}: {expense_count} expenses to {path}",
            details={"path": path, "expense_count": expense_count},
        )

    @staticmethod
    def file_failed(
        event_type: AuditEventType,
        path: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"{event_type.value.replace('_', ' ').capitalize()}: {path}",
            error_message=error_message,
            details={"path": path},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.CRITICAL,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
