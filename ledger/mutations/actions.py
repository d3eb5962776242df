"""
Mutation Actions

One model per user intent. The presentation layer builds an action and
hands it to LedgerSession.dispatch(); the reducer turns it into a new
AppState. Actions carry raw user input - checking it is the reducer's job,
so fields here are deliberately permissive.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from ledger.models.ledger import AppState


class RecordPayment(BaseModel):
    """Set (overwrite) one member's contribution for one month."""
    type: Literal["record_payment"] = "record_payment"
    member_index: int
    month: str
    amount: Optional[Any] = None


class AddMember(BaseModel):
    type: Literal["add_member"] = "add_member"
    name: str = ""


class RenameMember(BaseModel):
    type: Literal["rename_member"] = "rename_member"
    index: int
    new_name: str = ""


class RemoveMember(BaseModel):
    """Remove a member and their whole contribution history."""
    type: Literal["remove_member"] = "remove_member"
    index: int


class CreateExpenditure(BaseModel):
    type: Literal["create_expenditure"] = "create_expenditure"
    date: str = ""
    description: str = ""
    amount: Optional[Any] = None
    images: list[str] = Field(default_factory=list)


class UpdateExpenditure(BaseModel):
    """Replace the mutable fields of an existing expenditure; its id stays."""
    type: Literal["update_expenditure"] = "update_expenditure"
    id: str
    date: str = ""
    description: str = ""
    amount: Optional[Any] = None
    images: list[str] = Field(default_factory=list)


class UpdateProfile(BaseModel):
    type: Literal["update_profile"] = "update_profile"
    main_title: str = ""
    sub_title: str = ""
    logo: str = ""


class ReplaceState(BaseModel):
    """Swap in a whole new document (the second half of an import)."""
    type: Literal["replace_state"] = "replace_state"
    state: AppState


LedgerAction = Annotated[
    Union[
        RecordPayment,
        AddMember,
        RenameMember,
        RemoveMember,
        CreateExpenditure,
        UpdateExpenditure,
        UpdateProfile,
        ReplaceState,
    ],
    Field(discriminator="type"),
]
