"""
Group Classifier — label a fragment cluster with exactly one GroupType.

Decision order (first match wins):
  1. section-header keyword in the combined text      -> SECTION_HEADER
  2. single fragment, has a price, <= 2 tokens        -> PRICE_ONLY
  3. storefront / phone / URL text                    -> RESTAURANT_INFO
  4. > 50 chars and not a plausible dish name         -> DESCRIPTION
  5. otherwise                                        -> DISH_ITEM
"""

from __future__ import annotations

from typing import Sequence

from ..ocr_types import GroupType, TextFragment, TextGroup
from ..parsers.menu_grammar import (
    is_potential_dish_name,
    is_restaurant_info,
    is_section_header_group_text,
)
from ..parsers.price_parser import contains_price

PRICE_ONLY_MAX_TOKENS = 2
DESCRIPTION_MIN_CHARS = 50


def classify_text(combined_text: str, fragment_count: int = 1) -> GroupType:
    text = combined_text or ""

    if is_section_header_group_text(text):
        return GroupType.SECTION_HEADER

    if (
        fragment_count == 1
        and contains_price(text)
        and len(text.split()) <= PRICE_ONLY_MAX_TOKENS
    ):
        return GroupType.PRICE_ONLY

    if is_restaurant_info(text):
        return GroupType.RESTAURANT_INFO

    if len(text) > DESCRIPTION_MIN_CHARS and not is_potential_dish_name(text):
        return GroupType.DESCRIPTION

    return GroupType.DISH_ITEM


def classify_group_fragments(fragments: Sequence[TextFragment]) -> GroupType:
    combined = " ".join(f.text for f in fragments)
    return classify_text(combined, fragment_count=len(fragments))


def classify_group(group: TextGroup) -> GroupType:
    return classify_group_fragments(group.fragments)
