"""Analysis backend base class and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import ScanConfig
    from ..request import AnalysisRequest


class AnalysisBackend(ABC):
    """Abstract base for the external image analysis service."""

    @abstractmethod
    async def analyze(self, request: AnalysisRequest) -> str:
        """Send one request and return the raw response text.

        Raises:
            AnalysisTransportError: If no response could be obtained.
        """
        ...


def create_backend(config: ScanConfig) -> AnalysisBackend:
    """Create an analysis backend based on configuration."""
    backend_name = config.analysis.backend

    match backend_name:
        case "gemini":
            from .gemini import GeminiAnalysisBackend

            return GeminiAnalysisBackend(
                api_key=config.analysis.gemini.api_key,
                model=config.analysis.gemini.model,
            )
        case "claude":
            from .claude import ClaudeAnalysisBackend

            return ClaudeAnalysisBackend(
                api_key=config.analysis.claude.api_key,
                model=config.analysis.claude.model,
            )
        case _:
            raise ValueError(
                f"Unknown analysis backend: {backend_name!r} "
                f"(choose gemini or claude)"
            )
