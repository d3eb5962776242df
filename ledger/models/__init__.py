"""
Data Models Package

This package contains all Pydantic models used by the ledger.
The persisted document and everything derived from it conform to these schemas.
"""

from ledger.models.ledger import (
    ALL_MONTHS_FILTER,
    MONTHS,
    AppState,
    Contribution,
    Expenditure,
    Member,
    Month,
    default_state,
    new_expenditure_id,
    utc_timestamp,
)
from ledger.models.results import (
    ExpenseReport,
    LedgerTotals,
    MonthlyTotal,
    MutationResult,
    RejectionReason,
    StatementRow,
    StatementSnapshot,
)
from ledger.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Ledger document
    "ALL_MONTHS_FILTER",
    "MONTHS",
    "AppState",
    "Contribution",
    "Expenditure",
    "Member",
    "Month",
    "default_state",
    "new_expenditure_id",
    "utc_timestamp",
    # Derived values
    "ExpenseReport",
    "LedgerTotals",
    "MonthlyTotal",
    "MutationResult",
    "RejectionReason",
    "StatementRow",
    "StatementSnapshot",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
