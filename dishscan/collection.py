"""Saved dishes, deduplicated by dish id."""

from __future__ import annotations

import logging
import warnings
from datetime import datetime
from typing import Callable, Iterable

from .errors import SaveConsistencyWarning
from .models import Dish, SavedItem

logger = logging.getLogger(__name__)


class SavedCollection:
    """Most-recent-first list of saved dish snapshots, at most one per id."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._items: list[SavedItem] = []
        self._clock = clock

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, dish_id: object) -> bool:
        return any(item.id == dish_id for item in self._items)

    @property
    def items(self) -> list[SavedItem]:
        return list(self._items)

    @property
    def ids(self) -> list[str]:
        return [item.id for item in self._items]

    def toggle(self, dish_id: str, *sources: Iterable[Dish]) -> bool:
        """Save or unsave ``dish_id``; returns whether it is saved afterwards.

        The dish is looked up in ``sources`` in order. An id found in none of
        them leaves the collection unchanged.
        """
        if dish_id in self:
            self._items = [item for item in self._items if item.id != dish_id]
            logger.debug("Unsaved dish %s", dish_id)
            return False

        dish = _find(dish_id, sources)
        if dish is None:
            logger.warning("Cannot save unknown dish id %s", dish_id)
            warnings.warn(
                f"Dish {dish_id} not found in current results or history",
                SaveConsistencyWarning,
                stacklevel=2,
            )
            return False

        self._items.insert(0, SavedItem(dish=dish, saved_at=self._clock()))
        logger.debug("Saved dish %s (%s)", dish_id, dish.name)
        return True


def _find(dish_id: str, sources: tuple[Iterable[Dish], ...]) -> Dish | None:
    for source in sources:
        for dish in source:
            if dish.id == dish_id:
                return dish
    return None
