"""Tests for response parsing and Dish normalization."""

import json

import pytest

from dishscan.errors import AnalysisParseError
from dishscan.models import BoundingBox, SpiceLevel
from dishscan.normalizer import (
    ResultNormalizer,
    illustrative_image_url,
    parse_response,
    strip_fences,
)


def _without(data, index, key):
    del data["dishes"][index][key]
    return json.dumps(data)


class TestStripFences:
    def test_plain_json_untouched(self):
        assert strip_fences('{"a": 1}') == '{"a": 1}'

    def test_json_fence(self):
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_surrounding_prose(self):
        text = 'Here is the analysis:\n{"a": {"b": 2}}\nEnjoy!'
        assert strip_fences(text) == '{"a": {"b": 2}}'

    def test_single_line_fence(self):
        assert strip_fences('```json{"a": 1}```') == '{"a": 1}'


class TestIllustrativeImageUrl:
    def test_query_is_url_encoded(self):
        url = illustrative_image_url("Pan-fried Dumplings & Rice")
        assert url.startswith("https://image.pollinations.ai/prompt/Pan-fried%20Dumplings%20%26%20Rice")
        assert url.endswith("?nologo=true")

    def test_custom_template(self):
        url = illustrative_image_url("Pho Bo", "https://img.example/{query}.jpg")
        assert url == "https://img.example/Pho%20Bo.jpg"


class TestResultNormalizer:
    def test_menu_scan(self, menu_text, image_ref):
        dishes = ResultNormalizer().normalize(menu_text, image_ref, stamp=1700000000000)

        assert [d.id for d in dishes] == [
            "1700000000000-0",
            "1700000000000-1",
            "1700000000000-2",
        ]
        assert all(d.is_menu for d in dishes)
        # Service order is kept
        assert [d.original_name for d in dishes] == ["豚骨ラーメン", "辛味噌ラーメン", "餃子"]
        assert dishes[0].image.startswith(
            "https://image.pollinations.ai/prompt/Tonkotsu%20Ramen"
        )
        assert dishes[1].spice_level is SpiceLevel.HOT
        assert dishes[2].allergens == ()

    def test_photo_scan_uses_uploaded_image(self, photo_text, image_ref):
        dishes = ResultNormalizer().normalize(photo_text, image_ref)

        assert len(dishes) == 1
        dish = dishes[0]
        assert dish.is_menu is False
        assert dish.image == image_ref.url
        assert dish.bounding_box == BoundingBox.from_list([200, 100, 600, 400])
        assert dish.tags == ("Sweet", "Sour", "Nutty")

    def test_ids_unique_and_flag_uniform(self, menu_text, image_ref):
        dishes = ResultNormalizer().normalize(menu_text, image_ref)
        assert len({d.id for d in dishes}) == len(dishes)
        assert len({d.is_menu for d in dishes}) == 1

    def test_fenced_equals_unfenced(self, menu_text, image_ref):
        normalizer = ResultNormalizer()
        plain = normalizer.normalize(menu_text, image_ref, stamp=42)
        fenced = normalizer.normalize(f"```json\n{menu_text}\n```", image_ref, stamp=42)
        assert fenced == plain

    def test_single_line_fenced_equals_unfenced(self, menu_text, image_ref):
        normalizer = ResultNormalizer()
        plain = normalizer.normalize(menu_text, image_ref, stamp=1)
        fenced = normalizer.normalize("```json" + menu_text + "```", image_ref, stamp=1)
        assert fenced == plain

    def test_stamps_never_repeat(self):
        normalizer = ResultNormalizer()
        stamps = [normalizer.scan_stamp() for _ in range(50)]
        assert stamps == sorted(set(stamps))

    def test_missing_tags_and_allergens_default_empty(self, photo_response, image_ref):
        del photo_response["dishes"][0]["tags"]
        photo_response["dishes"][0]["allergens"] = None
        dish = ResultNormalizer().normalize(json.dumps(photo_response), image_ref)[0]
        assert dish.tags == ()
        assert dish.allergens == ()

    def test_missing_bounding_box_is_not_fabricated(self, photo_response, image_ref):
        text = _without(photo_response, 0, "boundingBox")
        dish = ResultNormalizer().normalize(text, image_ref)[0]
        assert dish.bounding_box is None

    def test_empty_bounding_box_means_absent(self, photo_response, image_ref):
        photo_response["dishes"][0]["boundingBox"] = []
        dish = ResultNormalizer().normalize(json.dumps(photo_response), image_ref)[0]
        assert dish.bounding_box is None

    def test_english_name_falls_back_to_name(self, menu_response, image_ref):
        text = _without(menu_response, 2, "englishName")
        dishes = ResultNormalizer().normalize(text, image_ref)
        assert "/prompt/Gyoza%20delicious" in dishes[2].image

    def test_missing_name_uses_original_name(self, menu_response, image_ref):
        text = _without(menu_response, 0, "name")
        dish = ResultNormalizer().normalize(text, image_ref)[0]
        assert dish.name == "豚骨ラーメン"
        assert dish.original_name == "豚骨ラーメン"

    def test_blank_name_uses_original_name(self, menu_response, image_ref):
        menu_response["dishes"][0]["name"] = "   "
        dish = ResultNormalizer().normalize(json.dumps(menu_response), image_ref)[0]
        assert dish.name == "豚骨ラーメン"

    def test_empty_dish_list(self, image_ref):
        dishes = ResultNormalizer().normalize('{"isMenu": false, "dishes": []}', image_ref)
        assert dishes == []


class TestParseResponseErrors:
    def test_not_json(self):
        with pytest.raises(AnalysisParseError, match="not valid JSON"):
            parse_response("Sorry, I can't help with that.")

    def test_top_level_array(self):
        with pytest.raises(AnalysisParseError, match="JSON object"):
            parse_response("[]")

    def test_missing_menu_flag(self):
        with pytest.raises(AnalysisParseError, match="isMenu"):
            parse_response('{"dishes": []}')

    def test_non_boolean_menu_flag(self):
        with pytest.raises(AnalysisParseError, match="isMenu"):
            parse_response('{"isMenu": "yes", "dishes": []}')

    def test_missing_dishes(self):
        with pytest.raises(AnalysisParseError, match="dishes"):
            parse_response('{"isMenu": true}')

    def test_missing_both_names(self, menu_response):
        del menu_response["dishes"][1]["name"]
        del menu_response["dishes"][1]["originalName"]
        with pytest.raises(AnalysisParseError, match=r"dishes\[1\]"):
            parse_response(json.dumps(menu_response))

    @pytest.mark.parametrize("key", ["description", "category", "spiceLevel"])
    def test_missing_required_field_rejects_batch(self, menu_response, key):
        with pytest.raises(AnalysisParseError, match=key):
            parse_response(_without(menu_response, 2, key))

    def test_invalid_spice_level(self, menu_response):
        menu_response["dishes"][0]["spiceLevel"] = "Volcanic"
        with pytest.raises(AnalysisParseError, match="spiceLevel"):
            parse_response(json.dumps(menu_response))

    def test_tags_not_strings(self, menu_response):
        menu_response["dishes"][0]["tags"] = ["Sweet", 3]
        with pytest.raises(AnalysisParseError, match="tags"):
            parse_response(json.dumps(menu_response))

    @pytest.mark.parametrize("box", [[1, 2, 3], [1, 2, 3, "4"], "0,0,10,10", [True, 0, 1, 1]])
    def test_malformed_bounding_box(self, photo_response, box):
        photo_response["dishes"][0]["boundingBox"] = box
        with pytest.raises(AnalysisParseError, match="boundingBox"):
            parse_response(json.dumps(photo_response))
