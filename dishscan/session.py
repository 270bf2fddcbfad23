"""Session state store and the scan pipeline that feeds it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

from .collection import SavedCollection
from .errors import IngestionError, ScanError
from .ingest import PhotoIngestor
from .models import LANGUAGES, Dish, ImageRef
from .normalizer import ResultNormalizer
from .progress import STATUS_ANALYZING, ScanProgressController
from .request import build_request
from .vision import AnalysisBackend

logger = logging.getLogger(__name__)


def _noop() -> None:
    pass


@dataclass
class Navigation:
    """Screen changes requested by the scan pipeline."""

    to_scanning: Callable[[], None] = _noop
    to_results: Callable[[], None] = _noop
    to_capture: Callable[[], None] = _noop


class ScanSession:
    """Single writer for results, history and saved dishes.

    Every scan is tagged with a generation token from ``begin_scan``. Results
    are only committed while their token is the live one, so a cancelled or
    superseded scan can never touch ``current_results`` or ``history``.
    """

    def __init__(
        self,
        default_language: str = "English",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        _check_language(default_language)
        self.default_language = default_language
        self.target_language = default_language
        self.uploaded_image: ImageRef | None = None
        self.saved = SavedCollection(clock=clock)
        self._current: list[Dish] = []
        self._history: list[Dish] = []
        self._generation = 0
        self._live: int | None = None
        self._live_progress: ScanProgressController | None = None
        self._live_release: Callable[[ImageRef], None] | None = None

    @property
    def current_results(self) -> list[Dish]:
        return list(self._current)

    @property
    def history(self) -> list[Dish]:
        """Every committed dish, newest scan first. Repeats are kept."""
        return list(self._history)

    @property
    def scan_count(self) -> int:
        return len(self._history)

    @property
    def saved_count(self) -> int:
        return len(self.saved)

    def set_default_language(self, language: str) -> None:
        _check_language(language)
        self.default_language = language
        self.target_language = language

    def set_target_language(self, language: str) -> None:
        _check_language(language)
        self.target_language = language

    def begin_scan(
        self,
        image: ImageRef,
        progress: ScanProgressController | None = None,
        release: Callable[[ImageRef], None] | None = None,
    ) -> int:
        """Make ``image`` the live scan and return its token.

        A scan still in flight is superseded: its progress is cancelled and
        its photo handed back to ``release`` of the run that registered it.
        """
        if self._live is not None:
            logger.info("Scan %d superseded", self._live)
            self._drop_live(keep=image)
        self._generation += 1
        self._live = self._generation
        self._live_progress = progress
        self._live_release = release
        self.uploaded_image = image
        logger.info("Scan %d started for %s", self._generation, image.path)
        return self._generation

    def is_live(self, token: int) -> bool:
        return self._live is not None and token == self._live

    def commit(self, token: int, dishes: list[Dish]) -> bool:
        if not self.is_live(token):
            logger.warning("Discarding results of stale scan %d", token)
            return False
        self._current = list(dishes)
        self._history = list(dishes) + self._history
        self._live = None
        self._live_progress = None
        self._live_release = None
        logger.info("Scan %d committed %d dish(es)", token, len(dishes))
        return True

    def cancel_scan(self) -> ImageRef | None:
        """Invalidate any in-flight scan and forget the captured photo.

        Returns the photo of the invalidated scan, or None when nothing was
        in flight (the photo may then back committed dishes).
        """
        image = self.uploaded_image if self._live is not None else None
        if self._live is not None:
            logger.info("Scan %d cancelled", self._live)
        self._live = None
        self._live_progress = None
        self._live_release = None
        self.uploaded_image = None
        return image

    def leave_results(self) -> None:
        self._current = []

    def toggle_save(self, dish_id: str) -> bool:
        # Current results may not be in history yet depending on call order
        return self.saved.toggle(dish_id, self._current, self._history)

    def is_saved(self, dish_id: str) -> bool:
        return dish_id in self.saved

    def _drop_live(self, keep: ImageRef) -> None:
        if self._live_progress is not None:
            self._live_progress.cancel()
        image = self.uploaded_image
        if image is not None and image != keep and self._live_release is not None:
            self._live_release(image)
        self._live = None
        self._live_progress = None
        self._live_release = None


class ScanRunner:
    """Run one photo through ingestion, analysis and normalization."""

    def __init__(
        self,
        session: ScanSession,
        ingestor: PhotoIngestor,
        backend: AnalysisBackend,
        normalizer: ResultNormalizer | None = None,
        progress_factory: Callable[[], ScanProgressController] = ScanProgressController,
        navigation: Navigation | None = None,
    ) -> None:
        self._session = session
        self._ingestor = ingestor
        self._backend = backend
        self._normalizer = normalizer or ResultNormalizer()
        self._progress_factory = progress_factory
        self._nav = navigation or Navigation()
        self.progress: ScanProgressController | None = None
        self.last_error: ScanError | None = None

    async def scan(self, image_path: str | Path) -> list[Dish] | None:
        """Ingest a user-selected photo and run it."""
        try:
            ref = self._ingestor.ingest(image_path)
        except IngestionError as e:
            logger.warning("Scan aborted: %s", e)
            self.last_error = e
            self._nav.to_capture()
            return None
        return await self.run(ref)

    async def run(self, ref: ImageRef) -> list[Dish] | None:
        """Analyze an ingested photo; returns the committed dishes or None."""
        if self.progress is not None:
            self.progress.cancel()

        progress = self._progress_factory()
        token = self._session.begin_scan(
            ref, progress=progress, release=self._ingestor.release
        )
        self.progress = progress
        self.last_error = None
        self._nav.to_scanning()
        progress.start()

        try:
            stamp = self._normalizer.scan_stamp()
            payload = self._ingestor.encode(ref)
            request = build_request(payload, self._session.target_language)
            progress.set_status(STATUS_ANALYZING)
            text = await self._backend.analyze(request)
            if not self._session.is_live(token):
                logger.info("Ignoring response for stale scan %d", token)
                progress.cancel()
                return None
            dishes = self._normalizer.normalize(text, ref, stamp)
        except ScanError as e:
            logger.warning("Scan %d failed: %s", token, e)
            if self._session.is_live(token):
                self.last_error = e
                await progress.fail(on_cancel=lambda: self._abandon(token))
            else:
                progress.cancel()
            return None
        except BaseException:
            progress.cancel()
            raise

        if not await progress.complete():
            return None
        if not self._session.commit(token, dishes):
            return None
        self._nav.to_results()
        return dishes

    def cancel(self) -> None:
        """User-initiated cancel: stop progress and drop any pending response."""
        if self.progress is not None:
            self.progress.cancel()
        image = self._session.cancel_scan()
        if image is not None:
            self._ingestor.release(image)
        self._nav.to_capture()

    def _abandon(self, token: int) -> None:
        if not self._session.is_live(token):
            return
        self.cancel()


def _check_language(language: str) -> None:
    if language not in LANGUAGES:
        raise ValueError(
            f"Unsupported language: {language!r} "
            f"(choose from {', '.join(LANGUAGES)})"
        )
