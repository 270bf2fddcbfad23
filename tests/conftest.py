"""Shared fixtures for scan pipeline tests."""

import copy
import json
import sys
from unittest.mock import MagicMock, patch

import pytest

from dishscan.models import ImageRef

MENU_RESPONSE = {
    "isMenu": True,
    "dishes": [
        {
            "name": "Pork Bone Ramen",
            "originalName": "豚骨ラーメン",
            "englishName": "Tonkotsu Ramen",
            "description": "Rich pork broth with thin noodles.",
            "tags": ["Rich", "Savory", "Umami"],
            "allergens": ["Wheat", "Egg", "Soy", "Sesame"],
            "spiceLevel": "None",
            "category": "Soup",
            "boundingBox": [100, 50, 140, 500],
        },
        {
            "name": "Spicy Miso Ramen",
            "originalName": "辛味噌ラーメン",
            "englishName": "Spicy Miso Ramen",
            "description": "Miso broth with chili oil.",
            "tags": ["Spicy", "Salty"],
            "allergens": ["Wheat", "Soy"],
            "spiceLevel": "Hot",
            "category": "Soup",
            "boundingBox": [160, 50, 200, 500],
        },
        {
            "name": "Gyoza",
            "originalName": "餃子",
            "englishName": "Pan-fried Dumplings",
            "description": "Crispy pork dumplings.",
            "tags": ["Crispy"],
            "allergens": [],
            "spiceLevel": "Mild",
            "category": "Side",
            "boundingBox": [220, 50, 260, 500],
        },
    ],
}

PHOTO_RESPONSE = {
    "isMenu": False,
    "dishes": [
        {
            "name": "Pad Thai",
            "originalName": "ผัดไทย",
            "englishName": "Pad Thai",
            "description": "Stir-fried rice noodles with shrimp and peanuts.",
            "tags": ["Sweet", "Sour", "Nutty"],
            "allergens": ["Peanuts", "Shellfish"],
            "spiceLevel": "Medium",
            "category": "Main",
            "boundingBox": [200, 100, 600, 400],
        },
    ],
}


@pytest.fixture
def menu_response():
    return copy.deepcopy(MENU_RESPONSE)


@pytest.fixture
def photo_response():
    return copy.deepcopy(PHOTO_RESPONSE)


@pytest.fixture
def menu_text():
    return json.dumps(MENU_RESPONSE, ensure_ascii=False)


@pytest.fixture
def photo_text():
    return json.dumps(PHOTO_RESPONSE, ensure_ascii=False)


@pytest.fixture
def image_ref(tmp_path):
    img = tmp_path / "photo.jpg"
    img.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return ImageRef(
        path=str(img),
        mime_type="image/jpeg",
        ingested_at="2026-01-01T12:00:00+00:00",
    )


@pytest.fixture
def mock_cv2():
    """Inject a mock cv2 module into sys.modules."""
    mock = MagicMock()
    with patch.dict(sys.modules, {"cv2": mock}):
        yield mock
