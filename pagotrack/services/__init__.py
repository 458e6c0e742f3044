"""Services package."""

from pagotrack.services.backup import (
    ImportFormatError,
    dumps_backup,
    export_backup,
    parse_backup,
)
from pagotrack.services.receipt import (
    GeminiReceiptService,
    ReceiptError,
    ReceiptExtractionError,
    ReceiptImageError,
    prepare_receipt_image,
)
from pagotrack.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorage,
    StorageError,
    StorageUnavailable,
)

__all__ = [
    # Backup
    "ImportFormatError",
    "dumps_backup",
    "export_backup",
    "parse_backup",
    # Receipt extraction
    "GeminiReceiptService",
    "ReceiptError",
    "ReceiptExtractionError",
    "ReceiptImageError",
    "prepare_receipt_image",
    # Storage
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorage",
    "StorageError",
    "StorageUnavailable",
]
