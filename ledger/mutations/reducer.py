"""
Ledger Reducer

DESIGN DECISION: Every change to the ledger is a pure function
(state, input) -> MutationResult. No operation touches storage, no
operation mutates the state it was given, and no operation raises for
bad user input.

A rejected operation returns the ORIGINAL state object together with a
reason. The caller can compare identities to know nothing happened.

Invariants enforced here and nowhere else:
1. Member names are unique (case-insensitive) and non-empty
2. The roster stays sorted by name after every add/rename
3. Expenditure ids are unique and never change after creation
4. Contributions for a (member, month) are overwritten, never accumulated
"""

import math
from typing import Any, Optional

from ledger.models.ledger import (
    AppState,
    Contribution,
    Expenditure,
    Member,
    Month,
    new_expenditure_id,
)
from ledger.models.results import MutationResult, RejectionReason
from ledger.mutations.actions import (
    AddMember,
    CreateExpenditure,
    LedgerAction,
    RecordPayment,
    RemoveMember,
    RenameMember,
    ReplaceState,
    UpdateExpenditure,
    UpdateProfile,
)


# =============================================================================
# INPUT CHECKS
# =============================================================================

def _parse_amount(value: Any) -> Optional[float]:
    """A finite number, or None if the input is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    return amount if math.isfinite(amount) else None


def _valid_index(state: AppState, index: Any) -> bool:
    return (
        isinstance(index, int)
        and not isinstance(index, bool)
        and 0 <= index < len(state.members)
    )


def _name_taken(state: AppState, name: str, ignore_index: Optional[int] = None) -> bool:
    wanted = name.casefold()
    return any(
        member.name.casefold() == wanted
        for i, member in enumerate(state.members)
        if i != ignore_index
    )


def _sorted_members(members: list[Member]) -> list[Member]:
    """The one place roster order is decided."""
    return sorted(members, key=lambda m: (m.name.casefold(), m.name))


# =============================================================================
# MEMBER OPERATIONS
# =============================================================================

def record_payment(
    state: AppState,
    member_index: int,
    month: str,
    amount: Any,
) -> MutationResult:
    """Set one member's contribution for a month, replacing any prior amount."""
    if not _valid_index(state, member_index):
        return MutationResult.rejected(
            state,
            RejectionReason.INVALID_INDEX,
            f"No member at position {member_index}",
        )

    try:
        month_key = Month(month).value
    except ValueError:
        return MutationResult.rejected(
            state,
            RejectionReason.INVALID_MONTH,
            f"Unknown month: {month!r}",
        )

    parsed = _parse_amount(amount)
    if parsed is None or parsed <= 0:
        return MutationResult.rejected(
            state,
            RejectionReason.INVALID_AMOUNT,
            "Payment amount must be a positive number",
        )

    member = state.members[member_index]
    contributions = dict(member.contributions)
    contributions[month_key] = Contribution(amount=parsed)

    members = list(state.members)
    members[member_index] = member.model_copy(update={"contributions": contributions})

    return MutationResult.ok(state.model_copy(update={"members": members}))


def add_member(state: AppState, name: str) -> MutationResult:
    """Add a member with no contributions and re-sort the roster."""
    name = (name or "").strip()
    if not name:
        return MutationResult.rejected(
            state,
            RejectionReason.EMPTY_NAME,
            "Member name is required",
        )
    if _name_taken(state, name):
        return MutationResult.rejected(
            state,
            RejectionReason.DUPLICATE_NAME,
            f"A member named {name} already exists",
        )

    members = _sorted_members([*state.members, Member(name=name, contributions={})])
    return MutationResult.ok(state.model_copy(update={"members": members}))


def rename_member(state: AppState, index: int, new_name: str) -> MutationResult:
    """Rename a member, keeping their contributions, and re-sort the roster."""
    if not _valid_index(state, index):
        return MutationResult.rejected(
            state,
            RejectionReason.INVALID_INDEX,
            f"No member at position {index}",
        )

    new_name = (new_name or "").strip()
    if not new_name:
        return MutationResult.rejected(
            state,
            RejectionReason.EMPTY_NAME,
            "Member name is required",
        )
    if _name_taken(state, new_name, ignore_index=index):
        return MutationResult.rejected(
            state,
            RejectionReason.DUPLICATE_NAME,
            f"A member named {new_name} already exists",
        )

    members = list(state.members)
    members[index] = members[index].model_copy(update={"name": new_name})
    return MutationResult.ok(
        state.model_copy(update={"members": _sorted_members(members)})
    )


def remove_member(state: AppState, index: int) -> MutationResult:
    """
    Remove a member together with their contribution history.

    Irreversible. Asking the user for confirmation is the caller's job.
    """
    if not _valid_index(state, index):
        return MutationResult.rejected(
            state,
            RejectionReason.INVALID_INDEX,
            f"No member at position {index}",
        )

    members = [m for i, m in enumerate(state.members) if i != index]
    return MutationResult.ok(state.model_copy(update={"members": members}))


# =============================================================================
# EXPENDITURE OPERATIONS
# =============================================================================

def _check_expenditure_fields(
    state: AppState,
    description: str,
    amount: Any,
) -> tuple[Optional[MutationResult], float]:
    if not (description or "").strip():
        return MutationResult.rejected(
            state,
            RejectionReason.EMPTY_DESCRIPTION,
            "Bill description is required",
        ), 0.0

    parsed = _parse_amount(amount)
    if not parsed:
        return MutationResult.rejected(
            state,
            RejectionReason.INVALID_AMOUNT,
            "Bill amount must be a non-zero number",
        ), 0.0

    return None, parsed


def create_expenditure(
    state: AppState,
    date: str,
    description: str,
    amount: Any,
    images: Optional[list[str]] = None,
) -> MutationResult:
    """Record a new expenditure at the front of the list with a fresh id."""
    rejection, parsed = _check_expenditure_fields(state, description, amount)
    if rejection is not None:
        return rejection

    used_ids = {ex.id for ex in state.expenditures}
    expenditure_id = new_expenditure_id()
    while expenditure_id in used_ids:
        expenditure_id = new_expenditure_id()

    expenditure = Expenditure(
        id=expenditure_id,
        date=date or "",
        description=description,
        amount=parsed,
        images=list(images or []),
    )
    return MutationResult.ok(
        state.model_copy(update={"expenditures": [expenditure, *state.expenditures]})
    )


def update_expenditure(
    state: AppState,
    expenditure_id: str,
    date: str,
    description: str,
    amount: Any,
    images: Optional[list[str]] = None,
) -> MutationResult:
    """Replace date, description, amount and vouchers of one expenditure in place."""
    position = next(
        (i for i, ex in enumerate(state.expenditures) if ex.id == expenditure_id),
        None,
    )
    if position is None:
        return MutationResult.rejected(
            state,
            RejectionReason.UNKNOWN_EXPENDITURE,
            f"No expenditure with id {expenditure_id}",
        )

    rejection, parsed = _check_expenditure_fields(state, description, amount)
    if rejection is not None:
        return rejection

    expenditures = list(state.expenditures)
    expenditures[position] = expenditures[position].model_copy(update={
        "date": date or "",
        "description": description,
        "amount": parsed,
        "images": list(images or []),
    })
    return MutationResult.ok(state.model_copy(update={"expenditures": expenditures}))


# =============================================================================
# DOCUMENT OPERATIONS
# =============================================================================

def update_profile(
    state: AppState,
    main_title: str,
    sub_title: str,
    logo: str,
) -> MutationResult:
    """Replace the three branding fields. Always applies."""
    return MutationResult.ok(state.model_copy(update={
        "main_title": main_title or "",
        "sub_title": sub_title or "",
        "logo": logo or "",
    }))


def replace_state(state: AppState, new_state: AppState) -> MutationResult:
    """Swap the whole document for an already-validated one."""
    return MutationResult.ok(new_state)


# =============================================================================
# DISPATCH
# =============================================================================

def reduce(state: AppState, action: LedgerAction) -> MutationResult:
    """Apply one action to the state."""
    if isinstance(action, RecordPayment):
        return record_payment(state, action.member_index, action.month, action.amount)
    elif isinstance(action, AddMember):
        return add_member(state, action.name)
    elif isinstance(action, RenameMember):
        return rename_member(state, action.index, action.new_name)
    elif isinstance(action, RemoveMember):
        return remove_member(state, action.index)
    elif isinstance(action, CreateExpenditure):
        return create_expenditure(
            state, action.date, action.description, action.amount, action.images
        )
    elif isinstance(action, UpdateExpenditure):
        return update_expenditure(
            state, action.id, action.date, action.description, action.amount, action.images
        )
    elif isinstance(action, UpdateProfile):
        return update_profile(state, action.main_title, action.sub_title, action.logo)
    elif isinstance(action, ReplaceState):
        return replace_state(state, action.state)
    else:
        raise TypeError(f"Unsupported action: {type(action).__name__}")
