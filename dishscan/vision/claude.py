"""Claude API analysis backend."""

from __future__ import annotations

import logging

from ..errors import AnalysisTransportError
from ..request import AnalysisRequest
from . import AnalysisBackend

logger = logging.getLogger(__name__)


class ClaudeAnalysisBackend(AnalysisBackend):
    """Analyze food and menu photos using Claude's vision capability."""

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def analyze(self, request: AnalysisRequest) -> str:
        if not self._api_key:
            raise AnalysisTransportError(
                "Anthropic API key is not configured. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content: list[dict] = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": request.image.mime_type,
                    "data": request.image.base64,
                },
            },
            {"type": "text", "text": request.prompt_with_schema()},
        ]

        logger.info("Sending analysis request to %s (%s)", self._model, request.language)
        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        try:
            response = await client.messages.create(
                model=self._model,
                max_tokens=8192,
                system=request.system_instruction,
                messages=[{"role": "user", "content": content}],
            )
        except Exception as e:
            raise AnalysisTransportError(f"Claude request failed: {e}") from e

        if not response.content:
            raise AnalysisTransportError("Claude returned an empty response")
        return response.content[0].text
