"""
Activity Models for the Association Ledger

Every state transition and every storage round-trip produces an activity
event. Events are structured log lines for debugging; they are NOT a
history of the ledger and are never persisted or replayed.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we log."""
    # Session lifecycle
    STATE_LOADED = "state_loaded"
    STATE_INITIALIZED = "state_initialized"
    LOAD_FAILED = "load_failed"

    # Mutations
    MUTATION_APPLIED = "mutation_applied"
    MUTATION_REJECTED = "mutation_rejected"

    # Persistence
    STATE_SAVED = "state_saved"
    SAVE_FAILED = "save_failed"

    # Backup
    STATE_EXPORTED = "state_exported"
    IMPORT_REJECTED = "import_rejected"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.mutation_applied("add_member", {...})
        event = ActivityEventBuilder.save_failed("current_state", "disk full")
    """

    @staticmethod
    def state_loaded(key: str, members: int, expenditures: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STATE_LOADED,
            description=f"Ledger loaded from '{key}'",
            details={
                "key": key,
                "members": members,
                "expenditures": expenditures,
            },
        )

    @staticmethod
    def state_initialized(key: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STATE_INITIALIZED,
            description=f"No saved ledger under '{key}', starting fresh",
            details={"key": key},
        )

    @staticmethod
    def load_failed(key: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOAD_FAILED,
            severity=ActivitySeverity.WARNING,
            description="Could not load saved ledger, using a fresh one",
            details={"key": key},
            error_message=error_message,
        )

    @staticmethod
    def mutation_applied(action: str, details: dict[str, Any]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.MUTATION_APPLIED,
            description=f"Applied {action}",
            details={"action": action, **details},
        )

    @staticmethod
    def mutation_rejected(action: str, reason: str, message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.MUTATION_REJECTED,
            severity=ActivitySeverity.WARNING,
            description=f"Rejected {action}: {message}",
            details={"action": action, "reason": reason},
        )

    @staticmethod
    def state_saved(key: str, size_bytes: Optional[int] = None) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STATE_SAVED,
            severity=ActivitySeverity.DEBUG,
            description=f"Ledger saved under '{key}'",
            details={"key": key, "size_bytes": size_bytes},
        )

    @staticmethod
    def save_failed(key: str, error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SAVE_FAILED,
            severity=ActivitySeverity.ERROR,
            description="Ledger could not be saved, changes are in memory only",
            details={"key": key},
            error_message=error_message,
        )

    @staticmethod
    def state_exported(size_bytes: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STATE_EXPORTED,
            description="Ledger exported",
            details={"size_bytes": size_bytes},
        )

    @staticmethod
    def import_rejected(error_message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.IMPORT_REJECTED,
            severity=ActivitySeverity.WARNING,
            description="Import rejected, current ledger kept",
            error_message=error_message,
        )
