"""
Receipt Extraction using Gemini

DESIGN DECISION: A photographed receipt is only a SOURCE OF SUGGESTIONS.
This service:
1. Normalizes the photo with Pillow (orientation, RGB, bounded size, JPEG)
2. Asks Gemini for the paid amount and the payment date
3. Returns a ReceiptSuggestion holding the raw values

It never creates or edits a payment. The suggestion is merged into the
entry form like typed values and validated like them.
"""

import base64
import json
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Optional

import google.generativeai as genai
from PIL import Image, ImageOps, UnidentifiedImageError
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from pagotrack.config import get_settings
from pagotrack.config.settings import GeminiSettings
from pagotrack.models.payment import ReceiptSuggestion

EXTRACTION_PROMPT = """You are reading a photographed payment receipt or transfer voucher.

Extract:
- amount: the total amount paid, as a plain number without currency symbols or thousands separators
- date: the payment date in YYYY-MM-DD format

If a value is not clearly visible, use null. Do not guess.

Respond with ONLY a JSON object in this exact format:
{"amount": 2500.00, "date": "2024-01-12"}"""


class ReceiptError(Exception):
    """Base exception for receipt handling."""
    pass


class ReceiptImageError(ReceiptError):
    """The uploaded file is not a usable image."""
    pass


class ReceiptExtractionError(ReceiptError):
    """Gemini could not be reached or returned nothing usable."""
    pass


@dataclass(frozen=True)
class PreparedReceipt:
    """A normalized receipt photo."""

    jpeg_bytes: bytes
    width: int
    height: int

    @property
    def data_url(self) -> str:
        """Encoded form stored on the payment as receipt_image."""
        encoded = base64.b64encode(self.jpeg_bytes).decode("ascii")
        return f"data:image/jpeg;base64,{encoded}"


def prepare_receipt_image(
    image_bytes: bytes,
    max_dimension: Optional[int] = None,
    max_size_bytes: Optional[int] = None,
) -> PreparedReceipt:
    """
    Normalize a receipt photo.

    Applies EXIF orientation, converts to RGB and scales the longest
    side down to max_dimension.

    Raises:
        ReceiptImageError: If the file is empty, too large or not an image
    """
    app = get_settings().app
    max_dimension = max_dimension or app.receipt_max_dimension
    max_size_bytes = max_size_bytes or app.max_receipt_size_bytes

    if not image_bytes:
        raise ReceiptImageError("Receipt image is empty")
    if len(image_bytes) > max_size_bytes:
        raise ReceiptImageError(
            f"Receipt image is too large ({len(image_bytes)} bytes, max {max_size_bytes})"
        )

    try:
        img = Image.open(BytesIO(image_bytes))
        img = ImageOps.exif_transpose(img)
        if img.mode != "RGB":
            img = img.convert("RGB")
        img.thumbnail((max_dimension, max_dimension))

        out = BytesIO()
        img.save(out, format="JPEG", quality=80, optimize=True)
    except (UnidentifiedImageError, OSError) as e:
        raise ReceiptImageError(f"Could not read receipt image: {e}") from e

    return PreparedReceipt(jpeg_bytes=out.getvalue(), width=img.width, height=img.height)


def parse_extraction_response(text: str) -> ReceiptSuggestion:
    """
    Pull the JSON object out of a model response.

    Raises:
        ReceiptExtractionError: If no JSON object can be found
    """
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise ReceiptExtractionError("Response did not contain a JSON object")

    try:
        data = json.loads(text[start:end])
    except ValueError as e:
        raise ReceiptExtractionError(f"Response JSON could not be parsed: {e}") from e

    if not isinstance(data, dict):
        raise ReceiptExtractionError("Response JSON is not an object")

    return ReceiptSuggestion(amount=data.get("amount"), date=data.get("date"))


class GeminiReceiptService:
    """
    Receipt extraction through Gemini.

    BOUNDARIES:
    - NEVER saves anything
    - NEVER fills in values it could not read
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        attempts: int = 3,
        wait_multiplier: float = 1.0,
    ):
        self._settings = settings
        self._model = model
        self._attempts = attempts
        self._wait_multiplier = wait_multiplier

    def _get_model(self):
        """Configure Google Generative AI on first use."""
        if self._model is None:
            settings = self._settings or get_settings().gemini
            genai.configure(api_key=settings.api_key)
            self._model = genai.GenerativeModel(
                model_name=settings.model_name,
                generation_config={
                    "temperature": settings.temperature,
                    "max_output_tokens": settings.max_tokens,
                }
            )
        return self._model

    async def _generate(self, parts: list) -> str:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._attempts),
                wait=wait_exponential(multiplier=self._wait_multiplier, min=0, max=10),
                reraise=True,
            ):
                with attempt:
                    response = await self._get_model().generate_content_async(parts)
                    return response.text
        except ReceiptError:
            raise
        except Exception as e:
            raise ReceiptExtractionError(f"Gemini request failed: {e}") from e
        raise ReceiptExtractionError("Gemini returned no response")

    async def extract(self, receipt: PreparedReceipt) -> ReceiptSuggestion:
        """
        Ask Gemini for the amount and date on a receipt.

        Raises:
            ReceiptExtractionError: If the request fails after retries or
                the response has no JSON object
        """
        text = await self._generate([
            EXTRACTION_PROMPT,
            {"mime_type": "image/jpeg", "data": receipt.jpeg_bytes},
        ])
        return parse_extraction_response(text or "")
