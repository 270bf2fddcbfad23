"""Tests for analysis request construction."""

import pytest

from dishscan.ingest import EncodedImage
from dishscan.request import SYSTEM_INSTRUCTION, build_request, response_schema


@pytest.fixture
def encoded():
    return EncodedImage(data=b"jpeg-bytes", mime_type="image/jpeg")


def test_build_request_carries_image_and_language(encoded):
    request = build_request(encoded, "Japanese")
    assert request.image is encoded
    assert request.language == "Japanese"
    assert "Translate details to Japanese" in request.prompt
    assert "PURE JSON" in request.prompt
    assert request.system_instruction == SYSTEM_INSTRUCTION


def test_build_request_rejects_unknown_language(encoded):
    with pytest.raises(ValueError, match="Unsupported language"):
        build_request(encoded, "Klingon")


def test_schema_requires_menu_flag_and_dishes():
    schema = response_schema("French")
    assert schema["required"] == ["isMenu", "dishes"]
    assert schema["properties"]["isMenu"]["type"] == "boolean"


def test_schema_dish_fields():
    item = response_schema("French")["properties"]["dishes"]["items"]
    for key in (
        "name",
        "originalName",
        "englishName",
        "description",
        "tags",
        "allergens",
        "spiceLevel",
        "category",
        "boundingBox",
    ):
        assert key in item["properties"]
        assert key in item["required"]
    assert item["properties"]["spiceLevel"]["enum"] == ["None", "Mild", "Medium", "Hot"]
    assert "French" in item["properties"]["name"]["description"]
    box_desc = item["properties"]["boundingBox"]["description"]
    assert "menu" in box_desc
    assert "food photo" in box_desc


def test_prompt_with_schema_inlines_schema(encoded):
    request = build_request(encoded, "English")
    text = request.prompt_with_schema()
    assert text.startswith(request.prompt)
    assert '"isMenu"' in text
