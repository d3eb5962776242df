"""
Core Data Models for the Association Ledger

The whole application state is ONE document (AppState). It is loaded
wholesale, replaced wholesale and persisted wholesale.

These models are a pure data contract:
1. Field names follow Python conventions, aliases follow the stored JSON shape
2. Every field round-trips exactly through model_dump(by_alias=True)
3. No business validation happens here - that is the reducer's job

DESIGN DECISION: Amounts that are missing or unreadable in an imported
document become 0.0 instead of failing the whole document. Totals must
never break because one cell was blank.
"""

from datetime import date as calendar_date, datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Month(str, Enum):
    """
    Canonical month keys.

    Order is significant: it is both the data key set for contributions
    and the display order for every statement.
    """
    JAN = "Jan"
    FEB = "Feb"
    MAR = "Mar"
    APR = "Apr"
    MAY = "May"
    JUN = "Jun"
    JUL = "Jul"
    AUG = "Aug"
    SEP = "Sep"
    OCT = "Oct"
    NOV = "Nov"
    DEC = "Dec"

    @classmethod
    def from_number(cls, number: int) -> "Month":
        """Month for a 1-based calendar month number."""
        return list(cls)[number - 1]


MONTHS: list[str] = [m.value for m in Month]

# Month filter value meaning "no month filtering"
ALL_MONTHS_FILTER = "All"


def _coerce_amount(value: Any) -> float:
    """Read an amount the way a lenient spreadsheet would: junk is zero."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def new_expenditure_id() -> str:
    """Opaque unique identifier for a new expenditure."""
    return str(uuid4())


# =============================================================================
# LEDGER ENTITIES
# =============================================================================

class LedgerModel(BaseModel):
    """Base for every persisted model: camelCase on the wire, snake_case in code."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Contribution(LedgerModel):
    """One member's recorded payment for one month."""

    amount: float = Field(
        default=0.0,
        description="Amount paid for the month"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        return _coerce_amount(v)


class Member(LedgerModel):
    """
    A dues-paying participant.

    Contributions are keyed by month name. A missing key means
    "no payment recorded", which is not the same as a zero payment.
    """

    name: str = Field(
        ...,
        description="Member name, the member's identity within the roster"
    )
    contributions: dict[str, Contribution] = Field(
        default_factory=dict,
        description="Month key -> recorded contribution"
    )


class Expenditure(LedgerModel):
    """An outgoing payment with its supporting vouchers."""

    id: str = Field(
        default_factory=new_expenditure_id,
        description="Unique identifier, immutable after creation"
    )
    date: str = Field(
        default="",
        description="Calendar date of the bill (YYYY-MM-DD)"
    )
    description: str = Field(
        default="",
        description="What the money was spent on"
    )
    amount: float = Field(
        default=0.0,
        description="Amount spent"
    )
    images: list[str] = Field(
        default_factory=list,
        description="Voucher payloads (data URIs or other opaque references)"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        return _coerce_amount(v)

    @property
    def parsed_date(self) -> Optional[calendar_date]:
        """The bill date, or None when the stored string is not a date."""
        try:
            return calendar_date.fromisoformat(self.date[:10])
        except ValueError:
            return None

    @property
    def month(self) -> Optional[Month]:
        """Calendar month of the bill (any year), or None when undated."""
        parsed = self.parsed_date
        return Month.from_number(parsed.month) if parsed else None


class AppState(LedgerModel):
    """
    The single root document.

    CRITICAL: members and expenditures are required. A document without
    them is not a ledger and must never replace the current one.
    """

    main_title: str = Field(
        default="",
        description="Main branding title"
    )
    sub_title: str = Field(
        default="",
        description="Branding subtitle"
    )
    logo: str = Field(
        default="",
        description="Logo image payload (data URI) or empty"
    )
    members: list[Member] = Field(
        ...,
        description="Roster, kept sorted by name"
    )
    expenditures: list[Expenditure] = Field(
        ...,
        description="Expenditures, newest-created first"
    )
    last_backup: str = Field(
        default_factory=utc_timestamp,
        description="When this document was last durably saved"
    )

    def to_document(self) -> dict:
        """The document exactly as it is stored and exported."""
        return self.model_dump(mode="json", by_alias=True)


def default_state(
    main_title: str = "SPSIB ASSOCIATION",
    sub_title: str = "OFFICIAL DIGITAL AUDIT STATEMENT",
) -> AppState:
    """A first-run document: default branding, empty roster, no expenditures."""
    return AppState(
        main_title=main_title,
        sub_title=sub_title,
        logo="",
        members=[],
        expenditures=[],
    )
