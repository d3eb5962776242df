"""Services package."""

from ledger.services.backup import (
    MalformedImportError,
    export_state,
    import_state,
    suggested_export_filename,
)
from ledger.services.storage import (
    CorruptDocumentError,
    InMemoryStateStorage,
    JsonFileStateStorage,
    StateStorageInterface,
    StorageError,
    StorageUnavailableError,
)
from ledger.services.vouchers import (
    UnsupportedVoucherError,
    VoucherError,
    VoucherTooLargeError,
    decode_voucher,
    encode_voucher,
    is_data_uri,
)

__all__ = [
    # Backup
    "MalformedImportError",
    "export_state",
    "import_state",
    "suggested_export_filename",
    # Storage
    "CorruptDocumentError",
    "InMemoryStateStorage",
    "JsonFileStateStorage",
    "StateStorageInterface",
    "StorageError",
    "StorageUnavailableError",
    # Vouchers
    "UnsupportedVoucherError",
    "VoucherError",
    "VoucherTooLargeError",
    "decode_voucher",
    "encode_voucher",
    "is_data_uri",
]
