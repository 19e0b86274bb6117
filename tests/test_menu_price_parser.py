"""
Menu price parser tests.

Covers:
  Pattern order:
  - $, €, £, ¥ prefixed prices
  - Symbol-suffixed prices ("12.99$", "12,99 €")
  - Bare decimal / bare comma prices
  - First pattern in the list wins when several could match
  - Text without a price

  Helpers:
  - parse_price splits value and currency
  - contains_price / strip_prices
  - price_to_cents normalization

  Fragment extraction:
  - PriceInfo per price-bearing fragment, input order, geometry copied
  - formatted reproduces the written price ($12.99, €7,50, 12.99$)
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from menu_extract.ocr_types import Rect, TextFragment
from menu_extract.parsers.price_parser import (
    contains_price,
    extract_price_info,
    extract_price_infos,
    find_price,
    parse_price,
    price_to_cents,
    strip_prices,
)


def _frag(text: str, x: float = 0.1, y: float = 0.5, conf: float = 0.9) -> TextFragment:
    return TextFragment(text=text, confidence=conf, bounding_box=Rect(x, y, 0.2, 0.03))


class TestFindPrice:
    def test_dollar_prefix(self):
        hit = find_price("$12.99")
        assert hit.value == "12.99"
        assert hit.currency == "$"
        assert hit.suffix is False
        assert hit.pattern == "USD"

    def test_euro_prefix_with_comma(self):
        hit = find_price("€7,50")
        assert hit.value == "7,50"
        assert hit.currency == "€"

    def test_pound_prefix(self):
        hit = find_price("Fish & Chips £9.00")
        assert hit.value == "9.00"
        assert hit.currency == "£"

    def test_yen_prefix_whole_number(self):
        hit = find_price("Ramen ¥1200")
        assert hit.value == "1200"
        assert hit.currency == "¥"

    def test_suffix_dollar(self):
        hit = find_price("12.99$")
        assert hit.value == "12.99"
        assert hit.currency == "$"
        assert hit.suffix is True
        assert hit.pattern == "suffix"

    def test_suffix_euro_with_space(self):
        hit = find_price("Tiramisu 12,99 €")
        assert hit.value == "12,99"
        assert hit.currency == "€"
        assert hit.suffix is True

    def test_bare_decimal(self):
        hit = find_price("Soup 12.99")
        assert hit.value == "12.99"
        assert hit.currency is None
        assert hit.pattern == "decimal"

    def test_bare_comma(self):
        hit = find_price("Pasta 8,50")
        assert hit.value == "8,50"
        assert hit.currency is None
        assert hit.pattern == "comma"

    def test_first_pattern_wins(self):
        # bare decimal appears first in the text, but $ is tried first
        hit = find_price("12.99 or $3")
        assert hit.original_text == "$3"
        assert hit.currency == "$"

    def test_no_price(self):
        assert find_price("Grilled Salmon") is None
        assert find_price("") is None

    def test_table_number_is_not_a_price(self):
        assert find_price("Table 4") is None


class TestHelpers:
    def test_parse_price_prefix(self):
        assert parse_price("$12.99") == ("12.99", "$")

    def test_parse_price_suffix_with_space(self):
        assert parse_price("12,99 €") == ("12,99", "€")

    def test_parse_price_bare(self):
        assert parse_price("12.99") == ("12.99", None)

    def test_contains_price(self):
        assert contains_price("Caesar Salad $12.99")
        assert contains_price("7,50")
        assert not contains_price("Caesar Salad")
        assert not contains_price("")

    def test_strip_prices(self):
        assert strip_prices("Caesar Salad $12.99").strip() == "Caesar Salad"
        assert strip_prices("Soup 4.50 / 6.50").replace(" ", "") == "Soup/"

    @pytest.mark.parametrize("value,cents", [
        ("12.99", 1299),
        ("7,50", 750),
        ("1299", 129900),
        ("0.99", 99),
    ])
    def test_price_to_cents(self, value, cents):
        assert price_to_cents(value) == cents

    def test_price_to_cents_rejects_garbage(self):
        assert price_to_cents("") is None
        assert price_to_cents("12.9.9") is None
        assert price_to_cents("abc") is None


class TestFragmentExtraction:
    def test_extract_price_info_copies_geometry(self):
        frag = _frag("$12.99", x=0.7, y=0.8, conf=0.85)
        info = extract_price_info(frag)
        assert info.bounding_box == frag.bounding_box
        assert info.confidence == 0.85
        assert info.original_text == "$12.99"

    def test_extract_price_info_none_without_price(self):
        assert extract_price_info(_frag("Caesar Salad")) is None

    def test_extract_price_infos_in_input_order(self):
        frags = [_frag("$6.50"), _frag("Tomato Soup"), _frag("€7,50"), _frag("12.99$")]
        infos = extract_price_infos(frags)
        assert [i.original_text for i in infos] == ["$6.50", "€7,50", "12.99$"]

    @pytest.mark.parametrize("written", ["$12.99", "€7,50", "12.99$"])
    def test_formatted_reproduces_written_price(self, written):
        info = extract_price_info(_frag(written))
        assert info.formatted == written

    def test_formatted_bare_value(self):
        info = extract_price_info(_frag("12.99"))
        assert info.formatted == "12.99"
