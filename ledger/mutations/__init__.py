"""Mutation operations package."""

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
from ledger.mutations.reducer import (
    add_member,
    create_expenditure,
    record_payment,
    reduce,
    remove_member,
    rename_member,
    replace_state,
    update_expenditure,
    update_profile,
)

__all__ = [
    # Actions
    "AddMember",
    "CreateExpenditure",
    "LedgerAction",
    "RecordPayment",
    "RemoveMember",
    "RenameMember",
    "ReplaceState",
    "UpdateExpenditure",
    "UpdateProfile",
    # Operations
    "add_member",
    "create_expenditure",
    "record_payment",
    "reduce",
    "remove_member",
    "rename_member",
    "replace_state",
    "update_expenditure",
    "update_profile",
]
