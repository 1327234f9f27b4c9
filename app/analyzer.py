"""
Receipt image analysis with Google Gemini.

The model is asked for JSON matching ``ParsedReceipt``; anything that does
not parse into it is an ``AnalysisError`` whose message goes back to the
client as-is.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

import google.generativeai as genai
from pydantic import ValidationError

from app.config import settings
from app.errors import AnalysisError
from app.schemas import ParsedReceipt

logger = logging.getLogger(__name__)

PROMPT = """
Analyze the attached receipt image. Extract the following information and reply
with JSON only, matching this shape:

{
  "items": [{"name": string, "count": number, "price": number}],
  "type": string,          // grocery, restaurant, gas, retail or other
  "storeName": string | null,
  "datetime": string       // YYYY-MM-DD HH:mm:ss
}

- If an item's quantity is not printed, use 1 for "count".
- "price" is the total price of the line, not the unit price.
"""


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json ... ``` fence, if any."""
    text = text.strip()
    if text.startswith("```"):
        first_newline = text.find("\n")
        text = text[first_newline + 1:] if first_newline != -1 else text[3:]
        closing = text.rfind("```")
        if closing != -1:
            text = text[:closing]
    return text.strip()


def parse_response(text: str) -> ParsedReceipt:
    try:
        data = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse JSON response from Gemini: %r", text)
        raise AnalysisError("The response from the AI was not valid JSON.") from exc

    try:
        return ParsedReceipt.model_validate(data)
    except ValidationError as exc:
        logger.error("Gemini response did not match the receipt shape: %s", exc)
        raise AnalysisError("The response from the AI did not describe a receipt.") from exc


def _gemini_model(api_key: str, model_name: str) -> Any:
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(model_name)


class ReceiptAnalyzer:
    def __init__(
        self,
        api_key: str = settings.GEMINI_API_KEY,
        model_name: str = settings.PREDICTION_MODEL,
        model_factory: Callable[[str, str], Any] = _gemini_model,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self._model_factory = model_factory
        self._model: Optional[Any] = None

    @property
    def model(self) -> Any:
        if self._model is None:
            if not self.api_key:
                raise AnalysisError("Receipt analysis is not configured.")
            self._model = self._model_factory(self.api_key, self.model_name)
        return self._model

    def analyze(self, image: bytes, mime_type: str) -> ParsedReceipt:
        logger.info("Analyzing receipt image (%d bytes, %s)", len(image), mime_type)
        try:
            response = self.model.generate_content(
                [{"mime_type": mime_type, "data": image}, PROMPT]
            )
            text = response.text or ""
        except AnalysisError:
            raise
        except Exception as exc:
            logger.exception("Gemini request failed")
            raise AnalysisError("Failed to analyze receipt.") from exc

        parsed = parse_response(text)
        logger.info("Analyzer found %d items", len(parsed.items))
        return parsed


_analyzer: Optional[ReceiptAnalyzer] = None


def get_analyzer() -> ReceiptAnalyzer:
    global _analyzer
    if _analyzer is None:
        _analyzer = ReceiptAnalyzer()
    return _analyzer
