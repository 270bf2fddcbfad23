"""Turn raw analysis responses into Dish records."""

from __future__ import annotations

import json
import logging
import re
import time
from urllib.parse import quote

from .errors import AnalysisParseError
from .models import BoundingBox, Dish, ImageRef, SpiceLevel

logger = logging.getLogger(__name__)

ILLUSTRATIVE_URL = (
    "https://image.pollinations.ai/prompt/"
    "{query}%20delicious%20food%20professional%20photography%204k?nologo=true"
)


def strip_fences(text: str) -> str:
    """Remove markdown code fences and any prose around the JSON object."""
    cleaned = text.strip()
    cleaned = re.sub(r"^```(?:json)?\s*", "", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"\s*```$", "", cleaned).strip()

    # Drop prose before or after the outermost object
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start : end + 1]
    return cleaned


def illustrative_image_url(query: str, template: str = ILLUSTRATIVE_URL) -> str:
    return template.format(query=quote(query, safe=""))


class ResultNormalizer:
    """Validate an analysis response and assign ids and display images.

    Ids are ``<scan start in ms>-<index>``. The start stamp is bumped when two
    scans begin within the same millisecond so ids are never reused.
    """

    def __init__(self, illustrative_url: str = ILLUSTRATIVE_URL) -> None:
        self._illustrative_url = illustrative_url
        self._last_stamp = 0

    def scan_stamp(self) -> int:
        """Allocate the timestamp prefix for a new scan."""
        stamp = int(time.time() * 1000)
        if stamp <= self._last_stamp:
            stamp = self._last_stamp + 1
        self._last_stamp = stamp
        return stamp

    def normalize(
        self, text: str, uploaded: ImageRef, stamp: int | None = None
    ) -> list[Dish]:
        if stamp is None:
            stamp = self.scan_stamp()
        is_menu, entries = parse_response(text)

        dishes: list[Dish] = []
        for index, entry in enumerate(entries):
            dishes.append(
                self._to_dish(entry, f"{stamp}-{index}", is_menu, uploaded)
            )
        logger.info(
            "Normalized %d dish(es) from %s scan",
            len(dishes),
            "menu" if is_menu else "photo",
        )
        return dishes

    def _to_dish(
        self, entry: dict, dish_id: str, is_menu: bool, uploaded: ImageRef
    ) -> Dish:
        name = entry.get("name")
        if not _is_text(name):
            name = entry["originalName"]
        original_name = entry.get("originalName")
        if not _is_text(original_name):
            original_name = name
        english_name = entry.get("englishName") if _is_text(entry.get("englishName")) else ""

        if is_menu:
            image = illustrative_image_url(
                english_name or name, self._illustrative_url
            )
        else:
            image = uploaded.url

        box = entry.get("boundingBox")
        return Dish(
            id=dish_id,
            name=name,
            original_name=original_name,
            english_name=english_name,
            description=entry["description"],
            tags=tuple(entry.get("tags") or ()),
            allergens=tuple(entry.get("allergens") or ()),
            spice_level=SpiceLevel(entry["spiceLevel"]),
            category=entry["category"],
            image=image,
            bounding_box=BoundingBox.from_list(box) if box else None,
            is_menu=is_menu,
        )


def parse_response(text: str) -> tuple[bool, list[dict]]:
    """Parse and validate the whole response; any bad entry rejects the batch."""
    try:
        data = json.loads(strip_fences(text))
    except json.JSONDecodeError as e:
        raise AnalysisParseError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise AnalysisParseError("Response must be a JSON object")
    if not isinstance(data.get("isMenu"), bool):
        raise AnalysisParseError("Response is missing the boolean 'isMenu' flag")
    entries = data.get("dishes")
    if not isinstance(entries, list):
        raise AnalysisParseError("Response is missing the 'dishes' array")

    for index, entry in enumerate(entries):
        _validate_entry(entry, index)
    return data["isMenu"], entries


def _validate_entry(entry: object, index: int) -> None:
    where = f"dishes[{index}]"
    if not isinstance(entry, dict):
        raise AnalysisParseError(f"{where} is not an object")

    if not _is_text(entry.get("name")) and not _is_text(entry.get("originalName")):
        raise AnalysisParseError(f"{where} has neither 'name' nor 'originalName'")
    for key in ("name", "originalName", "englishName"):
        if entry.get(key) is not None and not isinstance(entry[key], str):
            raise AnalysisParseError(f"{where}.{key} must be a string")
    for key in ("description", "category"):
        if not isinstance(entry.get(key), str):
            raise AnalysisParseError(f"{where} is missing '{key}'")

    spice = entry.get("spiceLevel")
    if spice not in {level.value for level in SpiceLevel}:
        raise AnalysisParseError(f"{where}.spiceLevel is invalid: {spice!r}")

    for key in ("tags", "allergens"):
        value = entry.get(key)
        if value is None:
            continue
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise AnalysisParseError(f"{where}.{key} must be a list of strings")

    box = entry.get("boundingBox")
    if box is not None and box != []:
        if (
            not isinstance(box, list)
            or len(box) != 4
            or not all(
                isinstance(v, (int, float)) and not isinstance(v, bool) for v in box
            )
        ):
            raise AnalysisParseError(f"{where}.boundingBox must be 4 numbers")


def _is_text(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())
