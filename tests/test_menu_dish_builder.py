"""
Dish candidate builder tests.

Covers:
  - Name from line 0 with prices and decoration cleaned off
  - Multi-line fragments: later non-price line becomes the description
  - A price-only first line hands the name to the next plausible line
  - Non-DishItem groups produce nothing
  - Header / restaurant-info names are rejected
  - A malformed group is dropped and counted; other groups survive
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from menu_extract.dish_builder import (
    build_candidates,
    extract_dish_candidate,
    pick_name_and_description,
    split_lines,
)
from menu_extract.layout.layout_segmenter import build_group
from menu_extract.ocr_types import GroupType, Rect, TextFragment, TextGroup


def _frag(text, x=0.1, y=0.5, w=0.3, conf=0.9) -> TextFragment:
    return TextFragment(text=text, confidence=conf, bounding_box=Rect(x, y, w, 0.03))


def _dish_group(*texts) -> TextGroup:
    frags = [_frag(t, x=0.1 + 0.3 * i) for i, t in enumerate(texts)]
    return build_group(frags, group_type=GroupType.DISH_ITEM)


class TestLines:
    def test_split_lines_trims_and_drops_blanks(self):
        assert split_lines("  Grilled Salmon \n\n  lemon butter  \n") == ["Grilled Salmon", "lemon butter"]

    def test_name_and_description(self):
        name, desc = pick_name_and_description(
            ["Grilled Salmon", "with lemon butter sauce", "$18.00", "served daily"]
        )
        assert name == "Grilled Salmon"
        assert desc == "with lemon butter sauce"

    def test_price_first_line(self):
        name, desc = pick_name_and_description(["12.99", "Grilled Salmon", "lemon butter"])
        assert name == "Grilled Salmon"
        assert desc == "lemon butter"

    def test_no_description(self):
        assert pick_name_and_description(["Caesar Salad"]) == ("Caesar Salad", None)


class TestExtractCandidate:
    def test_single_line_group(self):
        candidate = extract_dish_candidate(_dish_group("Caesar Salad", "$12.99"))
        assert candidate.name == "Caesar Salad"
        assert candidate.description is None
        assert candidate.price is None
        assert candidate.group_confidence == 0.9
        assert len(candidate.source_fragments) == 2

    def test_multiline_fragment(self):
        group = _dish_group("Grilled Salmon\nwith lemon butter sauce\n$18.00")
        candidate = extract_dish_candidate(group)
        assert candidate.name == "Grilled Salmon"
        assert candidate.description == "with lemon butter sauce"

    def test_decoration_cleaned(self):
        candidate = extract_dish_candidate(_dish_group("**Chef's Burger** (new)"))
        assert candidate.name == "Chef's Burger"

    def test_non_dish_group(self):
        group = build_group([_frag("$12.99")], group_type=GroupType.PRICE_ONLY)
        assert extract_dish_candidate(group) is None

    def test_header_name_rejected(self):
        assert extract_dish_candidate(_dish_group("APPETIZERS")) is None

    def test_restaurant_name_rejected(self):
        assert extract_dish_candidate(_dish_group("Luigi's Bistro")) is None

    def test_too_short_rejected(self):
        assert extract_dish_candidate(_dish_group("Ok")) is None


class TestBuildCandidates:
    def test_bad_group_is_counted(self):
        broken = TextGroup(fragments=[], bounding_box=Rect(0, 0, 0, 0),
                           group_type=GroupType.DISH_ITEM, confidence=0.0)
        groups = [_dish_group("Caesar Salad"), broken, _dish_group("Tomato Soup")]
        candidates, errors = build_candidates(groups)
        assert [c.name for c in candidates] == ["Caesar Salad", "Tomato Soup"]
        assert errors == 1

    def test_skips_other_group_types(self):
        groups = [
            build_group([_frag("Desserts")]),
            build_group([_frag("$4.00")]),
            _dish_group("Tiramisu Cake"),
        ]
        candidates, errors = build_candidates(groups)
        assert [c.name for c in candidates] == ["Tiramisu Cake"]
        assert errors == 0
