"""
Storage Services Package

Provides the abstract whole-document interface and its implementations.
The local JSON file store is the default backend; the in-memory store is
for tests and storage-less sessions.
"""

from ledger.services.storage.interface import (
    CorruptDocumentError,
    StateStorageInterface,
    StorageError,
    StorageUnavailableError,
)
from ledger.services.storage.json_file import JsonFileStateStorage
from ledger.services.storage.memory import InMemoryStateStorage

__all__ = [
    # Interface
    "StateStorageInterface",
    # Exceptions
    "CorruptDocumentError",
    "StorageError",
    "StorageUnavailableError",
    # Implementations
    "InMemoryStateStorage",
    "JsonFileStateStorage",
]
