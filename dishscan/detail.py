"""Detail view state for a selected dish."""

from __future__ import annotations

from enum import Enum

from .models import Dish
from .presentation import SpotlightRegion, spotlight_region


class ImageMode(Enum):
    ILLUSTRATIVE = "illustrative"
    SOURCE_SCAN = "source_scan"


def default_image_mode(dish: Dish) -> ImageMode:
    # A direct photo has only the scan to show
    return ImageMode.ILLUSTRATIVE if dish.is_menu else ImageMode.SOURCE_SCAN


class DetailViewController:
    """Tracks which dish is open and which of its images is displayed.

    This state is independent of the result list; opening or closing the
    detail view never changes the list.
    """

    def __init__(self) -> None:
        self._selected: Dish | None = None
        self._mode = ImageMode.SOURCE_SCAN

    @property
    def selected(self) -> Dish | None:
        return self._selected

    @property
    def selected_dish_id(self) -> str | None:
        return self._selected.id if self._selected else None

    @property
    def image_mode(self) -> ImageMode:
        return self._mode

    @property
    def is_open(self) -> bool:
        return self._selected is not None

    @property
    def show_toggle(self) -> bool:
        return self._selected is not None and self._selected.is_menu

    def open(self, dish: Dish) -> None:
        self._selected = dish
        self._mode = default_image_mode(dish)

    def close(self) -> None:
        self._selected = None

    def set_image_mode(self, mode: ImageMode) -> None:
        if self._selected is None:
            raise RuntimeError("No dish is open")
        if not self.show_toggle and mode is not ImageMode.SOURCE_SCAN:
            raise ValueError("Photo dishes only have the source scan image")
        self._mode = mode

    def toggle_image_mode(self) -> ImageMode:
        if self._mode is ImageMode.ILLUSTRATIVE:
            self.set_image_mode(ImageMode.SOURCE_SCAN)
        else:
            self.set_image_mode(ImageMode.ILLUSTRATIVE)
        return self._mode

    def display_image(self, uploaded_url: str | None) -> str | None:
        if self._selected is None:
            return None
        if self._mode is ImageMode.ILLUSTRATIVE:
            return self._selected.image
        return uploaded_url or self._selected.image

    @property
    def spotlight(self) -> SpotlightRegion | None:
        """Spotlight for the source scan, for menus and photos alike."""
        if self._selected is None or self._mode is not ImageMode.SOURCE_SCAN:
            return None
        if self._selected.bounding_box is None:
            return None
        return spotlight_region(self._selected.bounding_box)
