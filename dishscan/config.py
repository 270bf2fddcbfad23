"""TOML configuration loader."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .models import LANGUAGES
from .normalizer import ILLUSTRATIVE_URL

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class GeminiConfig:
    api_key: str = ""
    model: str = "gemini-2.0-flash"


@dataclass
class ClaudeConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class AnalysisConfig:
    backend: str = "gemini"
    language: str = "English"
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)


@dataclass
class ImagesConfig:
    session_dir: str = "/tmp/dishscan"
    illustrative_url: str = ILLUSTRATIVE_URL


@dataclass
class ProgressConfig:
    tick_interval: float = 0.1
    ceiling: float = 95.0
    completion_hold: float = 0.5
    error_grace: float = 3.0


@dataclass
class ScanConfig:
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    images: ImagesConfig = field(default_factory=ImagesConfig)
    progress: ProgressConfig = field(default_factory=ProgressConfig)


def load_config(path: str | Path | None = None) -> ScanConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    ana = raw.get("analysis", {})
    img = raw.get("images", {})
    prg = raw.get("progress", {})

    gemini_cfg = ana.get("gemini", {})
    claude_cfg = ana.get("claude", {})

    # Resolve API keys: config file → environment variable
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )

    language = ana.get("language", "English")
    if language not in LANGUAGES:
        raise ValueError(
            f"Unsupported language in config: {language!r} "
            f"(choose from {', '.join(LANGUAGES)})"
        )

    return ScanConfig(
        analysis=AnalysisConfig(
            backend=ana.get("backend", "gemini"),
            language=language,
            gemini=GeminiConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.0-flash"),
            ),
            claude=ClaudeConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
        ),
        images=ImagesConfig(
            session_dir=img.get("session_dir", "/tmp/dishscan"),
            illustrative_url=img.get("illustrative_url", ILLUSTRATIVE_URL),
        ),
        progress=ProgressConfig(
            tick_interval=prg.get("tick_interval", 0.1),
            ceiling=prg.get("ceiling", 95.0),
            completion_hold=prg.get("completion_hold", 0.5),
            error_grace=prg.get("error_grace", 3.0),
        ),
    )
