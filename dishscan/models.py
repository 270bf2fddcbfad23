"""Data types shared across the scan pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

LANGUAGES: list[str] = [
    "English",
    "Chinese (Simplified)",
    "Chinese (Traditional)",
    "Japanese",
    "Korean",
    "Spanish",
    "French",
    "Thai",
    "Vietnamese",
    "German",
    "Italian",
]

# Bounding boxes are normalized to this range on both axes.
BOX_SCALE = 1000


class SpiceLevel(Enum):
    NONE = "None"
    MILD = "Mild"
    MEDIUM = "Medium"
    HOT = "Hot"

    @property
    def intensity(self) -> int:
        """Number of chilies to show (0-3)."""
        return _SPICE_INTENSITY[self]


_SPICE_INTENSITY = {
    SpiceLevel.NONE: 0,
    SpiceLevel.MILD: 1,
    SpiceLevel.MEDIUM: 2,
    SpiceLevel.HOT: 3,
}


@dataclass(frozen=True)
class BoundingBox:
    """Region of the captured photo, ``[yMin, xMin, yMax, xMax]`` on a 0-1000 scale."""

    y_min: float
    x_min: float
    y_max: float
    x_max: float

    @classmethod
    def from_list(cls, values: list[float]) -> BoundingBox:
        y_min, x_min, y_max, x_max = values
        return cls(y_min=y_min, x_min=x_min, y_max=y_max, x_max=x_max)

    def to_list(self) -> list[float]:
        return [self.y_min, self.x_min, self.y_max, self.x_max]

    @property
    def center(self) -> tuple[float, float]:
        """Midpoint as ``(x%, y%)`` of the image."""
        cx = (self.x_min + self.x_max) / 2 / (BOX_SCALE / 100)
        cy = (self.y_min + self.y_max) / 2 / (BOX_SCALE / 100)
        return cx, cy


@dataclass(frozen=True)
class ImageRef:
    """A captured photo kept fetchable for the lifetime of a scan."""

    path: str
    mime_type: str
    ingested_at: str  # ISO8601

    @property
    def url(self) -> str:
        return Path(self.path).resolve().as_uri()


@dataclass(frozen=True)
class Dish:
    id: str
    name: str
    original_name: str
    description: str
    spice_level: SpiceLevel
    category: str
    image: str
    is_menu: bool
    english_name: str = ""
    tags: tuple[str, ...] = ()
    allergens: tuple[str, ...] = ()
    bounding_box: BoundingBox | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "originalName": self.original_name,
            "englishName": self.english_name,
            "description": self.description,
            "tags": list(self.tags),
            "allergens": list(self.allergens),
            "spiceLevel": self.spice_level.value,
            "category": self.category,
            "image": self.image,
            "boundingBox": (
                self.bounding_box.to_list() if self.bounding_box else None
            ),
            "isMenu": self.is_menu,
        }


@dataclass(frozen=True)
class SavedItem:
    """Snapshot of a Dish taken when the user saved it."""

    dish: Dish
    saved_at: datetime = field(default_factory=datetime.now)

    @property
    def id(self) -> str:
        return self.dish.id

    def to_dict(self) -> dict:
        return {**self.dish.to_dict(), "savedAt": self.saved_at.isoformat()}
