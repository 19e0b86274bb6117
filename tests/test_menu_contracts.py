"""
Extraction API contract tests.

Covers:
  Validation (returns (ok, error), never raises):
  - Payload must be an object with a fragments list
  - Fragment text / confidence / bounding_box / alternates / id checks, no duplicate ids
  - Layout region checks
  - Configuration preset + field type checks
  - ocr_confidence range

  Decoding:
  - Fragments (dict or list boxes), ids default to list index or the next unused id
  - Regions with ids and texts
  - Configuration: preset then field overrides

  Encoding:
  - Dish / Menu to JSON-safe dicts
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from menu_extract.config import DEFAULT, FAST
from menu_extract.contracts import (
    decode_configuration,
    decode_extract_request,
    decode_fragments,
    decode_regions,
    dish_to_dict,
    menu_to_dict,
    validate_extract_payload,
)
from menu_extract.ocr_types import DietaryTag, Dish, DishCategory, Menu, Rect, RestaurantInfo


def _payload(**extra):
    payload = {
        "fragments": [
            {"text": "Caesar Salad", "confidence": 0.9,
             "bounding_box": {"x": 0.1, "y": 0.7, "width": 0.25, "height": 0.03}},
            {"text": "$12.99", "confidence": 0.9, "bounding_box": [0.36, 0.7, 0.08, 0.03], "id": 7},
        ]
    }
    payload.update(extra)
    return payload


class TestValidation:
    def test_valid(self):
        assert validate_extract_payload(_payload()) == (True, "")

    def test_not_an_object(self):
        ok, err = validate_extract_payload(["nope"])
        assert not ok and "object" in err

    def test_missing_fragments(self):
        ok, err = validate_extract_payload({})
        assert not ok and "fragments" in err

    def test_fragments_optional_when_not_required(self):
        assert validate_extract_payload({}, require_fragments=False) == (True, "")

    @pytest.mark.parametrize("patch,needle", [
        ({"text": 5}, "text"),
        ({"confidence": 1.5}, "confidence"),
        ({"confidence": True}, "confidence"),
        ({"bounding_box": {"x": 0.1}}, "bounding_box.y"),
        ({"bounding_box": [0.1, 0.2]}, "bounding_box"),
        ({"bounding_box": "box"}, "bounding_box"),
        ({"alternates": "Caesar"}, "alternates"),
        ({"id": "seven"}, "id"),
    ])
    def test_bad_fragment(self, patch, needle):
        payload = _payload()
        payload["fragments"][0].update(patch)
        ok, err = validate_extract_payload(payload)
        assert not ok
        assert err.startswith("fragments[0]")
        assert needle in err

    def test_bad_region(self):
        ok, err = validate_extract_payload(_payload(layout_regions=[{"name": "Mains", "member_ids": ["a"]}]))
        assert not ok and "member_ids" in err

    def test_regions_must_be_list(self):
        ok, err = validate_extract_payload(_payload(layout_regions={"name": "Mains"}))
        assert not ok and "layout_regions" in err

    def test_unknown_preset(self):
        ok, err = validate_extract_payload(_payload(configuration={"preset": "turbo"}))
        assert not ok and "turbo" in err

    def test_bad_config_types(self):
        ok, _ = validate_extract_payload(_payload(configuration={"merge_similar_dishes": "yes"}))
        assert not ok
        ok, _ = validate_extract_payload(_payload(configuration={"minimum_dish_confidence": 2}))
        assert not ok

    def test_ocr_confidence_range(self):
        ok, err = validate_extract_payload(_payload(ocr_confidence=3))
        assert not ok and "ocr_confidence" in err

    def test_duplicate_ids(self):
        payload = _payload()
        payload["fragments"][0]["id"] = 7
        ok, err = validate_extract_payload(payload)
        assert not ok
        assert err == "fragments[1].id 7 duplicates fragments[0].id"

    def test_missing_ids_are_not_duplicates(self):
        payload = _payload()
        payload["fragments"].append(dict(payload["fragments"][0]))
        assert validate_extract_payload(payload) == (True, "")


class TestDecoding:
    def test_fragments(self):
        frags = decode_fragments(_payload()["fragments"])
        assert frags[0].bounding_box == Rect(0.1, 0.7, 0.25, 0.03)
        assert frags[0].fragment_id == 0
        assert frags[1].bounding_box == Rect(0.36, 0.7, 0.08, 0.03)
        assert frags[1].fragment_id == 7
        assert frags[1].alternates == ()

    def test_default_ids_skip_explicit_ids(self):
        box = [0.1, 0.5, 0.2, 0.03]
        frags = decode_fragments([
            {"text": "Tomato Soup", "confidence": 0.9, "bounding_box": box},
            {"text": "Caesar Salad", "confidence": 0.9, "bounding_box": box},
            {"text": "$12.99", "confidence": 0.9, "bounding_box": box, "id": 1},
            {"text": "$6.50", "confidence": 0.9, "bounding_box": box, "id": 0},
            {"text": "Iced Tea", "confidence": 0.9, "bounding_box": box},
        ])
        ids = [f.fragment_id for f in frags]
        assert ids == [2, 3, 1, 0, 4]
        assert len(set(ids)) == len(ids)

    def test_regions(self):
        regions = decode_regions([
            {"name": "Starters", "bounding_box": [0, 0.5, 1, 0.5], "member_ids": [0, 7]},
            {"name": "Mains", "member_texts": ["Grilled Salmon"]},
        ])
        assert regions[0].member_ids == (0, 7)
        assert regions[1].member_texts == ("Grilled Salmon",)
        assert regions[1].bounding_box == Rect(0.0, 0.0, 0.0, 0.0)

    def test_configuration_preset_and_override(self):
        config = decode_configuration({"preset": "fast", "enable_advanced_pricing": True})
        assert config.minimum_dish_confidence == FAST.minimum_dish_confidence
        assert config.enable_advanced_pricing is True
        assert config.enable_category_detection is False

    def test_configuration_defaults_to_base(self):
        assert decode_configuration(None) == DEFAULT
        assert decode_configuration({}, base=FAST) == FAST

    def test_configuration_int_threshold(self):
        assert decode_configuration({"minimum_dish_confidence": 1}).minimum_dish_confidence == 1.0

    def test_request(self):
        fragments, regions, config, ocr_conf = decode_extract_request(_payload(ocr_confidence=0.8))
        assert len(fragments) == 2
        assert regions == []
        assert config == DEFAULT
        assert ocr_conf == 0.8


class TestEncoding:
    def test_dish(self):
        dish = Dish(
            name="Grilled Salmon",
            price="$18.00",
            category=DishCategory.MAIN_COURSE,
            allergens=frozenset({"fish", "dairy"}),
            dietary_tags=frozenset({DietaryTag.GLUTEN_FREE, DietaryTag.HEALTHY}),
            extraction_confidence=0.87654,
        )
        assert dish_to_dict(dish) == {
            "name": "Grilled Salmon",
            "description": None,
            "price": "$18.00",
            "category": "Main Course",
            "allergens": ["dairy", "fish"],
            "dietary_tags": ["Gluten Free", "Healthy"],
            "confidence": 0.877,
        }

    def test_menu(self):
        menu = Menu(
            dishes=(Dish(name="Caesar Salad", extraction_confidence=1.0),),
            restaurant_name="Luigi's Bistro",
            ocr_confidence=0.9,
            restaurant_info=RestaurantInfo(name="Luigi's Bistro", confidence=0.7),
            stats={"dishes": 1},
        )
        out = menu_to_dict(menu)
        assert out["restaurant_name"] == "Luigi's Bistro"
        assert out["restaurant_info"]["confidence"] == 0.7
        assert out["dishes"][0]["category"] is None
        assert out["stats"] == {"dishes": 1}
