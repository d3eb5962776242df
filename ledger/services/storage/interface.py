"""
Abstract Storage Interface

DESIGN DECISION: The ledger is stored as ONE document under ONE key.
There are no per-entity rows and no partial updates. This allows us to:
1. Guarantee a save never leaves a half-written ledger behind
2. Use the exact same document shape for the store and for backups
3. Swap the local file store for something else without touching the reducer
4. Use in-memory storage for testing

The interface is intentionally tiny: load a document, save a document.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ledger.models.ledger import AppState


class StateStorageInterface(ABC):
    """
    Abstract interface for whole-document ledger storage.

    Implementations must be safe to call from a single writer that awaits
    each call before the next one. They do not need to handle overlapping
    saves to the same key.
    """

    @abstractmethod
    async def load(self, key: str) -> Optional[AppState]:
        """
        Load the document stored under a key.

        Args:
            key: The fixed logical key of the ledger document

        Returns:
            The stored document, or None if nothing was ever saved

        Raises:
            StorageUnavailableError: If the backend cannot be read
            CorruptDocumentError: If the stored value is not a valid document
        """
        pass

    @abstractmethod
    async def save(self, key: str, state: AppState) -> bool:
        """
        Replace the document stored under a key.

        The write must be complete and durable before this returns.

        Args:
            key: The fixed logical key of the ledger document
            state: The full document to store

        Returns:
            True if saved successfully

        Raises:
            StorageUnavailableError: If the backend cannot be written
        """
        pass

    async def set_aside(self, key: str) -> Optional[str]:
        """
        Move an unreadable document out of the way without deleting it.

        Backends that cannot hold a corrupt document keep this default.

        Returns:
            Where the document was moved, or None if nothing was moved
        """
        return None


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailableError(StorageError):
    """The storage backend could not be reached or written."""
    pass


class CorruptDocumentError(StorageError):
    """A stored value exists but is not a valid ledger document."""
    pass
