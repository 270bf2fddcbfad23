"""Layout and framing decisions for displaying scan results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .models import BOX_SCALE, BoundingBox, Dish

THUMBNAIL_ZOOM = 1.2
ALLERGEN_ICON_LIMIT = 3


class Layout(Enum):
    EMPTY = "empty"
    SINGLE_CARD = "single_card"
    LIST = "list"


@dataclass(frozen=True)
class ThumbnailFraming:
    fit: str = "cover"
    focal_point: tuple[float, float] | None = None  # (x%, y%)
    zoom: float = 1.0


@dataclass(frozen=True)
class SpotlightRegion:
    """Highlighted box in percent of the image; everything outside is dimmed."""

    top: float
    left: float
    height: float
    width: float


@dataclass(frozen=True)
class AllergenSummary:
    shown: tuple[str, ...]
    overflow: int

    @property
    def none_detected(self) -> bool:
        return not self.shown

    def label(self) -> str:
        if self.none_detected:
            return "None detected"
        text = ", ".join(self.shown)
        if self.overflow:
            text += f" +{self.overflow}"
        return text


def select_layout(results: list[Dish]) -> Layout:
    if not results:
        return Layout.EMPTY
    if len(results) == 1:
        return Layout.SINGLE_CARD
    return Layout.LIST


def thumbnail_framing(dish: Dish) -> ThumbnailFraming:
    """Frame a list thumbnail so the dish sits in the middle of it."""
    if dish.is_menu or dish.bounding_box is None:
        # Illustrative images have no spatial relation to the photo
        return ThumbnailFraming()
    return ThumbnailFraming(
        focal_point=dish.bounding_box.center,
        zoom=THUMBNAIL_ZOOM,
    )


def spotlight_region(box: BoundingBox) -> SpotlightRegion:
    pct = BOX_SCALE / 100
    return SpotlightRegion(
        top=box.y_min / pct,
        left=box.x_min / pct,
        height=(box.y_max - box.y_min) / pct,
        width=(box.x_max - box.x_min) / pct,
    )


def result_header(results: list[Dish]) -> tuple[str, str]:
    """Title and item count line for the results screen."""
    is_menu = bool(results) and results[0].is_menu
    title = "Menu Translation" if is_menu else "Dish Analysis"
    count = len(results)
    return title, f"Found {count} Item{'s' if count != 1 else ''}"


def single_card_image(dish: Dish, uploaded_url: str | None) -> str:
    if dish.is_menu:
        return dish.image
    return uploaded_url or dish.image


def single_card_spotlight(dish: Dish) -> SpotlightRegion | None:
    if dish.is_menu or dish.bounding_box is None:
        return None
    return spotlight_region(dish.bounding_box)


def allergen_summary(dish: Dish, limit: int = ALLERGEN_ICON_LIMIT) -> AllergenSummary:
    shown = dish.allergens[:limit]
    return AllergenSummary(shown=shown, overflow=len(dish.allergens) - len(shown))


def spice_meter(dish: Dish, width: int = 3) -> str:
    level = dish.spice_level.intensity
    return "🌶" * level + "·" * (width - level)
