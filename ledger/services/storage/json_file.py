"""
Local JSON File Storage

DESIGN DECISION: A plain JSON file per key, in a local data directory:
1. The organizer can open and read their ledger with any text editor
2. The file IS a valid backup - same shape as an export
3. No database to install or migrate

Durability: every save writes a complete new document to a temporary
file in the same directory, fsyncs it, then atomically renames it over
the previous one. A crash mid-write leaves the previous document intact.

TRADEOFFS:
- Voucher images are stored inline, so the file grows with every photo
- Rewriting the whole file per change is fine for hundreds of records,
  not for hundreds of thousands
"""

import asyncio
import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ledger.models.ledger import AppState
from ledger.services.storage.interface import (
    CorruptDocumentError,
    StateStorageInterface,
    StorageUnavailableError,
)


class JsonFileStateStorage(StateStorageInterface):
    """
    Stores each key as `<directory>/<key>.json`.

    Blocking file I/O runs in a worker thread so the caller's event loop
    stays responsive.
    """

    def __init__(self, directory: Union[str, Path]):
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """File that holds the document for a key."""
        return self._directory / f"{key}.json"

    def _read_document(self, key: str) -> Optional[AppState]:
        path = self.path_for(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise CorruptDocumentError(f"Stored ledger at {path} is not UTF-8 text: {e}")
        except OSError as e:
            raise StorageUnavailableError(f"Failed to read {path}: {e}")

        try:
            return AppState.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            raise CorruptDocumentError(f"Stored ledger at {path} is not valid: {e}")

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        reraise=True,
    )
    def _write_document(self, key: str, payload: str) -> int:
        self._directory.mkdir(parents=True, exist_ok=True)
        target = self.path_for(key)

        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{key}_", suffix=".json", dir=self._directory
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, target)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

        return len(payload.encode("utf-8"))

    def _move_aside(self, key: str) -> Optional[str]:
        source = self.path_for(key)
        if not source.exists():
            return None
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        target = self._directory / f"{key}.corrupt-{stamp}.json"
        os.replace(source, target)
        return str(target)

    async def set_aside(self, key: str) -> Optional[str]:
        """Rename the file for a key to `<key>.corrupt-<timestamp>.json`."""
        try:
            return await asyncio.to_thread(self._move_aside, key)
        except OSError as e:
            raise StorageUnavailableError(f"Failed to move aside ledger '{key}': {e}")

    async def load(self, key: str) -> Optional[AppState]:
        """Load the document for a key, or None on first run."""
        return await asyncio.to_thread(self._read_document, key)

    async def save(self, key: str, state: AppState) -> bool:
        """Atomically replace the document for a key."""
        payload = state.model_dump_json(by_alias=True)
        try:
            await asyncio.to_thread(self._write_document, key, payload)
        except OSError as e:
            raise StorageUnavailableError(f"Failed to save ledger '{key}': {e}")
        return True
