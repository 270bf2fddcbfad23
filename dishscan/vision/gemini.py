"""Gemini API analysis backend."""

from __future__ import annotations

import logging

from ..errors import AnalysisTransportError
from ..request import AnalysisRequest
from . import AnalysisBackend

logger = logging.getLogger(__name__)


class GeminiAnalysisBackend(AnalysisBackend):
    """Analyze food and menu photos using Google Gemini's structured output."""

    def __init__(self, api_key: str = "", model: str = "gemini-2.0-flash") -> None:
        self._api_key = api_key
        self._model = model

    async def analyze(self, request: AnalysisRequest) -> str:
        if not self._api_key:
            raise AnalysisTransportError(
                "Gemini API key is not configured. "
                "Check the config file or the GEMINI_API_KEY environment variable."
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(
            self._model,
            system_instruction=request.system_instruction,
            generation_config={
                "response_mime_type": "application/json",
                "response_schema": _gemini_schema(request.schema),
            },
        )

        parts = [
            {"mime_type": request.image.mime_type, "data": request.image.data},
            request.prompt,
        ]

        logger.info("Sending analysis request to %s (%s)", self._model, request.language)
        try:
            response = await model.generate_content_async(parts)
            text = response.text
        except Exception as e:
            raise AnalysisTransportError(f"Gemini request failed: {e}") from e
        return text or ""


def _gemini_schema(schema: dict) -> dict:
    """Convert a JSON-schema style dict to the field spelling Gemini expects."""
    out: dict = {}
    for key, value in schema.items():
        if key == "type":
            out["type"] = value.upper()
        elif key == "properties":
            out["properties"] = {k: _gemini_schema(v) for k, v in value.items()}
        elif key == "items":
            out["items"] = _gemini_schema(value)
        else:
            out[key] = value
    if "enum" in schema:
        out["format"] = "enum"
    return out
