"""
Backup Export / Import

An export is the stored document, byte-for-byte the same shape: a backup
file can be dropped into the data directory and a stored ledger can be
imported as a backup.

CRITICAL: An import either produces a complete, valid AppState or raises.
There is no partial import and no "best effort" repair of a broken file.
"""

import json
from collections import Counter
from typing import Union

from pydantic import ValidationError

from ledger.config import get_settings
from ledger.models.ledger import AppState


class MalformedImportError(Exception):
    """The supplied document is not a valid ledger."""
    pass


REQUIRED_FIELDS = ("members", "expenditures")


def export_state(state: AppState) -> str:
    """Serialize the full document to portable JSON text."""
    return json.dumps(
        json.loads(state.model_dump_json(by_alias=True)),
        indent=2,
        ensure_ascii=False,
    )


def import_state(raw: Union[str, bytes]) -> AppState:
    """
    Parse and validate an externally supplied document.

    Raises:
        MalformedImportError: If the text is not JSON, not an object,
            lacks members/expenditures, any value has the wrong shape, or
            two expenditures share an id.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedImportError(f"Backup file is not UTF-8 text: {e}")

    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedImportError(f"Backup file is not valid JSON: {e}")

    if not isinstance(document, dict):
        raise MalformedImportError("Backup file must contain a single ledger object")

    missing = [name for name in REQUIRED_FIELDS if name not in document]
    if missing:
        raise MalformedImportError(
            f"Backup file is missing required fields: {', '.join(missing)}"
        )

    try:
        state = AppState.model_validate(document)
    except ValidationError as e:
        raise MalformedImportError(f"Backup file has invalid ledger data: {e}")

    id_counts = Counter(ex.id for ex in state.expenditures)
    duplicates = sorted(ex_id for ex_id, count in id_counts.items() if count > 1)
    if duplicates:
        raise MalformedImportError(
            f"Backup file has duplicate expenditure ids: {', '.join(duplicates)}"
        )

    return state


def suggested_export_filename() -> str:
    """Filename offered when the user downloads a backup."""
    return get_settings().storage.backup_filename
