"""
Derived-Value and Result Models

Nothing here is persisted. These are the read-only values the core hands
to the presentation layer: aggregate totals, statement snapshots, and the
outcome of a mutation.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ledger.models.ledger import AppState, Expenditure, Month


class LedgerTotals(BaseModel):
    """Overall income, expense and balance."""
    model_config = ConfigDict(frozen=True)

    income: float = 0.0
    expense: float = 0.0
    balance: float = 0.0


class MonthlyTotal(BaseModel):
    """Income and expense falling into one month bucket."""
    model_config = ConfigDict(frozen=True)

    income: float = 0.0
    expense: float = 0.0


# =============================================================================
# STATEMENT SNAPSHOTS (handed to renderers / share collaborators)
# =============================================================================

class StatementRow(BaseModel):
    """One member's line on the ledger matrix."""
    model_config = ConfigDict(frozen=True)

    name: str
    # None means no payment recorded for that month
    amounts: dict[Month, Optional[float]] = Field(default_factory=dict)
    total: float = 0.0


class StatementSnapshot(BaseModel):
    """
    Everything a renderer needs to draw the ledger matrix or full report.

    Only the selected months appear as columns; totals are overall,
    not limited to the selection.
    """
    model_config = ConfigDict(frozen=True)

    main_title: str
    sub_title: str
    logo: str = ""
    months: list[Month] = Field(default_factory=list)
    rows: list[StatementRow] = Field(default_factory=list)
    monthly: dict[Month, MonthlyTotal] = Field(default_factory=dict)
    totals: LedgerTotals = Field(default_factory=LedgerTotals)


class ExpenseReport(BaseModel):
    """A filtered, date-sorted expenditure list with its footer total."""
    model_config = ConfigDict(frozen=True)

    month_filter: str
    expenditures: list[Expenditure] = Field(default_factory=list)
    total: float = 0.0

    @property
    def count(self) -> int:
        return len(self.expenditures)


# =============================================================================
# MUTATION RESULTS
# =============================================================================

class RejectionReason(str, Enum):
    """Why a mutation left the state unchanged."""
    INVALID_INDEX = "invalid_index"
    INVALID_MONTH = "invalid_month"
    INVALID_AMOUNT = "invalid_amount"
    EMPTY_NAME = "empty_name"
    DUPLICATE_NAME = "duplicate_name"
    EMPTY_DESCRIPTION = "empty_description"
    UNKNOWN_EXPENDITURE = "unknown_expenditure"
    MALFORMED_IMPORT = "malformed_import"


class MutationResult(BaseModel):
    """
    Outcome of applying one mutation.

    When `applied` is False, `state` is the very object that was passed in.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    state: AppState
    applied: bool
    reason: Optional[RejectionReason] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, state: AppState) -> "MutationResult":
        return cls(state=state, applied=True)

    @classmethod
    def rejected(
        cls,
        state: AppState,
        reason: RejectionReason,
        message: str,
    ) -> "MutationResult":
        return cls(state=state, applied=False, reason=reason, message=message)
