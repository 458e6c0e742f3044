"""Receipt extraction package."""

from pagotrack.services.receipt.gemini_service import (
    GeminiReceiptService,
    PreparedReceipt,
    ReceiptError,
    ReceiptExtractionError,
    ReceiptImageError,
    parse_extraction_response,
    prepare_receipt_image,
)

__all__ = [
    "GeminiReceiptService",
    "PreparedReceipt",
    "ReceiptError",
    "ReceiptExtractionError",
    "ReceiptImageError",
    "parse_extraction_response",
    "prepare_receipt_image",
]
