"""Translate food photos and menus into structured dish breakdowns."""

from .collection import SavedCollection
from .config import (
    AnalysisConfig,
    ClaudeConfig,
    GeminiConfig,
    ImagesConfig,
    ProgressConfig,
    ScanConfig,
    load_config,
)
from .detail import DetailViewController, ImageMode
from .errors import (
    AnalysisParseError,
    AnalysisTransportError,
    IngestionError,
    SaveConsistencyWarning,
    ScanError,
)
from .ingest import EncodedImage, PhotoIngestor
from .models import LANGUAGES, BoundingBox, Dish, ImageRef, SavedItem, SpiceLevel
from .normalizer import ResultNormalizer
from .presentation import Layout, ThumbnailFraming, select_layout, thumbnail_framing
from .progress import ScanPhase, ScanProgressController
from .request import AnalysisRequest, build_request
from .session import Navigation, ScanRunner, ScanSession
from .vision import AnalysisBackend, create_backend

__all__ = [
    "Dish",
    "SavedItem",
    "SpiceLevel",
    "BoundingBox",
    "ImageRef",
    "LANGUAGES",
    "ScanError",
    "IngestionError",
    "AnalysisTransportError",
    "AnalysisParseError",
    "SaveConsistencyWarning",
    "PhotoIngestor",
    "EncodedImage",
    "AnalysisRequest",
    "build_request",
    "AnalysisBackend",
    "create_backend",
    "ResultNormalizer",
    "ScanProgressController",
    "ScanPhase",
    "Layout",
    "ThumbnailFraming",
    "select_layout",
    "thumbnail_framing",
    "DetailViewController",
    "ImageMode",
    "SavedCollection",
    "ScanSession",
    "ScanRunner",
    "Navigation",
    "ScanConfig",
    "AnalysisConfig",
    "GeminiConfig",
    "ClaudeConfig",
    "ImagesConfig",
    "ProgressConfig",
    "load_config",
]
