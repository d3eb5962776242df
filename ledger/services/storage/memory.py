"""
In-Memory Storage

Used by tests and by sessions that run without a usable data directory.
Documents are kept as serialized JSON so a load always returns a fresh
object, exactly like reading a file back would.
"""

from typing import Optional

from ledger.models.ledger import AppState
from ledger.services.storage.interface import (
    StateStorageInterface,
    StorageUnavailableError,
)


class InMemoryStateStorage(StateStorageInterface):
    """Dict-backed storage. Set `fail_saves`/`fail_loads` to simulate an outage."""

    def __init__(self):
        self._documents: dict[str, str] = {}
        self.fail_saves = False
        self.fail_loads = False
        self.save_count = 0

    async def load(self, key: str) -> Optional[AppState]:
        if self.fail_loads:
            raise StorageUnavailableError("In-memory storage is unavailable")
        raw = self._documents.get(key)
        if raw is None:
            return None
        return AppState.model_validate_json(raw)

    async def save(self, key: str, state: AppState) -> bool:
        if self.fail_saves:
            raise StorageUnavailableError("In-memory storage is unavailable")
        self._documents[key] = state.model_dump_json(by_alias=True)
        self.save_count += 1
        return True

    def raw(self, key: str) -> Optional[str]:
        """The stored JSON text for a key."""
        return self._documents.get(key)
