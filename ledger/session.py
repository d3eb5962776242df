"""
Ledger Session

This module ties the pure core to the outside world. It owns the one
in-memory AppState and is the only place that talks to storage.

Flow for every user action:
1. Action → reducer → MutationResult
2. Rejected → state untouched, reason returned
3. Applied → new state becomes current → saved to storage
4. Save failed → state stays in memory, warning returned (never raised)

DESIGN DECISION: The session never raises for expected problems (bad
input, bad import file, storage outage). The presentation layer gets an
outcome value it can show, and the organizer can keep working.
"""

import asyncio
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from ledger.activity import ActivityLogger
from ledger.config import Settings, get_settings
from ledger.models.ledger import AppState, default_state, utc_timestamp
from ledger.models.results import MutationResult, RejectionReason
from ledger.mutations.actions import (
    CreateExpenditure,
    LedgerAction,
    ReplaceState,
    UpdateExpenditure,
)
from ledger.mutations.reducer import reduce
from ledger.services.backup import MalformedImportError, export_state, import_state
from ledger.services.storage import (
    CorruptDocumentError,
    InMemoryStateStorage,
    JsonFileStateStorage,
    StateStorageInterface,
    StorageError,
)


class DispatchOutcome(BaseModel):
    """What happened to one dispatched action."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    result: MutationResult
    saved: bool = False
    warning: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.result.applied

    @property
    def state(self) -> AppState:
        return self.result.state


def _action_details(action: LedgerAction) -> dict:
    """Loggable summary of an action, without image payloads."""
    if isinstance(action, ReplaceState):
        return {
            "members": len(action.state.members),
            "expenditures": len(action.state.expenditures),
        }
    details = action.model_dump(exclude={"type", "images", "logo"})
    if isinstance(action, (CreateExpenditure, UpdateExpenditure)):
        details["voucher_count"] = len(action.images)
    return details


class LedgerSession:
    """
    The single writer of the ledger.

    Usage:
        session = LedgerSession(storage)
        await session.start()
        outcome = await session.dispatch(AddMember(name="J. DOE"))
    """

    def __init__(
        self,
        storage: StateStorageInterface,
        activity_logger: Optional[ActivityLogger] = None,
        settings: Optional[Settings] = None,
    ):
        self._storage = storage
        self._activity = activity_logger or ActivityLogger()
        self._settings = settings or get_settings()
        self._key = self._settings.storage.state_key
        self._state: Optional[AppState] = None
        self._lock = asyncio.Lock()
        self.last_warning: Optional[str] = None

    @property
    def state(self) -> AppState:
        """The current document. Read-only by convention; change it via dispatch()."""
        if self._state is None:
            raise RuntimeError("Session not started; await start() first")
        return self._state

    @property
    def storage(self) -> StateStorageInterface:
        return self._storage

    def _default_state(self) -> AppState:
        branding = self._settings.branding
        return default_state(branding.main_title, branding.sub_title)

    async def start(self) -> AppState:
        """
        Load the saved ledger, or start a fresh one.

        A missing document is a normal first run. An unreadable one is
        treated the same way, with a warning left in `last_warning`. A
        corrupt document is moved aside first so the next save cannot
        overwrite it.
        """
        try:
            saved = await self._storage.load(self._key)
        except CorruptDocumentError as e:
            self._activity.log_load_failed(self._key, str(e))
            try:
                moved_to = await self._storage.set_aside(self._key)
            except StorageError as move_error:
                self._activity.log_load_failed(self._key, str(move_error))
                moved_to = None
            self.last_warning = "Saved ledger could not be read. Starting with an empty ledger."
            if moved_to:
                self.last_warning += f" The unreadable file was kept at {moved_to}."
            self._state = self._default_state()
            return self._state
        except StorageError as e:
            self._activity.log_load_failed(self._key, str(e))
            self.last_warning = "Saved ledger could not be loaded. Starting with an empty ledger."
            self._state = self._default_state()
            return self._state

        if saved is None:
            self._activity.log_state_initialized(self._key)
            self._state = self._default_state()
        else:
            self._activity.log_state_loaded(
                self._key, len(saved.members), len(saved.expenditures)
            )
            self._state = saved
        return self._state

    async def _save(self) -> tuple[bool, Optional[str]]:
        """
        Save the current state, stamping last_backup on success.

        Must be called with the session lock held, so no other dispatch
        can swap in a newer state while the write is in flight.
        """
        stamped = self.state.model_copy(update={"last_backup": utc_timestamp()})
        try:
            await self._storage.save(self._key, stamped)
        except StorageError as e:
            self._activity.log_save_failed(self._key, str(e))
            warning = "Changes could not be saved. They will be retried on your next change."
            self.last_warning = warning
            return False, warning

        self._state = stamped
        self._activity.log_state_saved(self._key)
        self.last_warning = None
        return True, None

    async def dispatch(self, action: LedgerAction) -> DispatchOutcome:
        """
        Apply one action and persist the result.

        Reduce, swap and save run as one step under the session lock.
        Overlapping calls queue up and each one builds on the state the
        previous one left behind.
        """
        async with self._lock:
            result = reduce(self.state, action)

            if not result.applied:
                self._activity.log_mutation_rejected(
                    action.type,
                    result.reason.value if result.reason else "unknown",
                    result.message or "",
                )
                return DispatchOutcome(result=result)

            self._state = result.state
            self._activity.log_mutation_applied(action.type, _action_details(action))

            saved, warning = await self._save()
            return DispatchOutcome(
                result=MutationResult.ok(self.state),
                saved=saved,
                warning=warning,
            )

    async def import_document(self, raw: Union[str, bytes]) -> DispatchOutcome:
        """Replace the whole ledger with an imported backup."""
        try:
            new_state = import_state(raw)
        except MalformedImportError as e:
            self._activity.log_import_rejected(str(e))
            return DispatchOutcome(
                result=MutationResult.rejected(
                    self.state,
                    RejectionReason.MALFORMED_IMPORT,
                    str(e),
                ),
            )
        return await self.dispatch(ReplaceState(state=new_state))

    def export_document(self) -> str:
        """The current ledger as backup JSON text."""
        document = export_state(self.state)
        self._activity.log_state_exported(len(document.encode("utf-8")))
        return document

    async def retry_save(self) -> DispatchOutcome:
        """Try again to persist the current state after a failed save."""
        async with self._lock:
            saved, warning = await self._save()
            return DispatchOutcome(
                result=MutationResult.ok(self.state),
                saved=saved,
                warning=warning,
            )


def create_ledger_session(
    use_storage: bool = True,
    settings: Optional[Settings] = None,
) -> LedgerSession:
    """
    Factory function to create a ledger session.

    Args:
        use_storage: Whether to persist to the local data directory.
                    Set to False for an in-memory session.
        settings: Settings to use instead of the cached ones.

    Returns:
        An unstarted LedgerSession; await start() before use.
    """
    settings = settings or get_settings()
    activity = ActivityLogger()
    storage: StateStorageInterface

    if use_storage:
        data_dir = settings.storage.data_dir.expanduser()
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
            storage = JsonFileStateStorage(data_dir)
        except OSError as e:
            activity.log_load_failed(settings.storage.state_key, f"Data directory unusable: {e}")
            storage = InMemoryStateStorage()
    else:
        storage = InMemoryStateStorage()

    return LedgerSession(storage, activity_logger=activity, settings=settings)
