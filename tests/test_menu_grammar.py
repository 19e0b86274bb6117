"""
Menu grammar heuristics tests.

Covers:
  - Header text: keywords and short ALL-CAPS lines
  - Restaurant info: storefront words (whole words only), phone, URL
  - Plausible dish names: token count, price, header, food keyword, capitalized
  - Dish name cleanup: prices, (asides), [brackets], * and # decoration
  - Dish name validation bounds
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from menu_extract.parsers.menu_grammar import (
    FOOD_KEYWORDS,
    clean_dish_name,
    has_food_keyword,
    is_dish_name_valid,
    is_header_text,
    is_potential_dish_name,
    is_restaurant_info,
    is_section_header_group_text,
)


class TestHeaders:
    def test_keyword_header(self):
        assert is_header_text("Desserts")
        assert is_header_text("Our Starters")

    def test_short_caps_header(self):
        assert is_header_text("APPETIZERS")
        assert is_header_text("SOUP")

    def test_long_caps_line_is_not_header(self):
        assert not is_header_text("SLOW ROASTED PORK SHOULDER PLATTER")

    def test_dish_names_are_not_headers(self):
        assert not is_header_text("Caesar Salad")
        assert not is_header_text("Grilled Salmon")

    def test_section_header_group_text(self):
        assert is_section_header_group_text("Desserts")
        assert is_section_header_group_text("Red Wine List")
        assert not is_section_header_group_text("Caesar Salad")


class TestRestaurantInfo:
    def test_storefront_word(self):
        assert is_restaurant_info("Luigi's Bistro")
        assert is_restaurant_info("Open daily 11am")

    def test_whole_words_only(self):
        assert not is_restaurant_info("Grilled Salmon")
        assert not is_restaurant_info("Barbecue Ribs")

    def test_phone(self):
        assert is_restaurant_info("Call 555-123-4567")
        assert is_restaurant_info("(555) 123-4567")

    def test_url(self):
        assert is_restaurant_info("www.luigis.com")
        assert is_restaurant_info("order at luigis.com")


class TestDishNamePlausibility:
    def test_food_keyword(self):
        assert is_potential_dish_name("grilled salmon")

    def test_capitalized(self):
        assert is_potential_dish_name("Nonna Maria Special")

    def test_single_word_rejected(self):
        assert not is_potential_dish_name("Lasagna")

    def test_too_many_words_rejected(self):
        assert not is_potential_dish_name(" ".join(["Salad"] * 11))

    def test_price_rejected(self):
        assert not is_potential_dish_name("Caesar Salad $12.99")

    def test_header_rejected(self):
        assert not is_potential_dish_name("MAIN COURSES")

    def test_lowercase_without_food_word_rejected(self):
        assert not is_potential_dish_name("served with fries")

    def test_vocabulary_size(self):
        assert len(FOOD_KEYWORDS) == 30
        assert has_food_keyword("Chicken Curry")


class TestCleanup:
    def test_strips_price_and_decoration(self):
        assert clean_dish_name("**Chef's Burger** (new) $12.99") == "Chef's Burger"

    def test_strips_brackets_and_hashes(self):
        assert clean_dish_name("#1 Combo [spicy]") == "1 Combo"

    def test_collapses_whitespace(self):
        assert clean_dish_name("  Grilled   Salmon  ") == "Grilled Salmon"

    def test_price_only_cleans_to_empty(self):
        assert clean_dish_name("$12.99") == ""


class TestValidation:
    def test_valid(self):
        assert is_dish_name_valid("Caesar Salad")

    def test_length_bounds(self):
        assert not is_dish_name_valid("Ok")
        assert not is_dish_name_valid("x" * 101)
        assert is_dish_name_valid("Pho")

    def test_rejects_header_and_restaurant(self):
        assert not is_dish_name_valid("DESSERTS")
        assert not is_dish_name_valid("Luigi's Bistro")

    def test_rejects_empty(self):
        assert not is_dish_name_valid("")
        assert not is_dish_name_valid("   ")
