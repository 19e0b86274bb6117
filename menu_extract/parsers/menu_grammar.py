# menu_extract/parsers/menu_grammar.py
"""
Menu text heuristics — headers, restaurant info, dish-name plausibility and
name cleanup.

Design principles:
  - Pure regex + keyword heuristics, no ML dependencies
  - Vocabularies are module-level constants built once
  - Non-destructive: every helper takes a string and returns a new value
"""

from __future__ import annotations

import re
from typing import FrozenSet, Tuple

from .price_parser import contains_price, strip_prices


# ── Vocabularies ─────────────────────────────────────

# Group-level section headers (classifier step 1, plain substring match)
SECTION_HEADER_KEYWORDS: Tuple[str, ...] = (
    "appetizers", "entrees", "mains", "desserts",
    "beverages", "drinks", "wine", "specials",
)

# Line-level header text (dish-name validation)
HEADER_TEXT_KEYWORDS: Tuple[str, ...] = (
    "appetizers", "entrees", "mains", "main courses", "desserts", "beverages",
    "drinks", "starters", "salads", "soups", "menu", "specials", "wine",
    "beer", "cocktails", "sides",
)

HEADER_CAPS_MAX_LEN = 25

# Storefront words are matched as whole words so "Grilled" never reads as "grill"
RESTAURANT_INFO_WORDS: Tuple[str, ...] = (
    "restaurant", "cafe", "bistro", "grill", "kitchen", "bar", "pub",
    "tel", "phone", "address", "hours", "open", "closed",
)

FOOD_KEYWORDS: FrozenSet[str] = frozenset({
    "salad", "soup", "pasta", "chicken", "beef", "fish", "salmon", "pizza",
    "sandwich", "burger", "wrap", "bowl", "rice", "noodles", "steak",
    "shrimp", "lobster", "dessert", "cake", "pie", "cream", "grilled",
    "fried", "roasted", "steamed", "sautéed", "braised", "tofu", "curry",
    "taco",
})

DISH_NAME_MIN_WORDS = 2
DISH_NAME_MAX_WORDS = 10
DISH_NAME_CAPS_MIN_LEN = 5
DISH_NAME_CAPS_MAX_LEN = 50

VALID_NAME_MIN_LEN = 3
VALID_NAME_MAX_LEN = 100


# ── Regex ────────────────────────────────────────────

_RESTAURANT_WORD_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(w) for w in RESTAURANT_INFO_WORDS) + r")\b",
    re.IGNORECASE,
)

# www.foo.com, http(s)://..., foo.com / foo.net / foo.org
URL_RE = re.compile(
    r"(?:https?://\S+|www\.\S+|\b[\w-]+\.(?:com|net|org|co|io|menu)\b)",
    re.IGNORECASE,
)

# (555) 123-4567, 555-123-4567, +44 20 7946 0958
PHONE_RE = re.compile(
    r"(?:\+\d{1,3}[\s.-]?)?(?:\(\d{2,4}\)|\d{2,4})[\s.-]\d{3,4}[\s.-]\d{3,4}"
)

_WHITESPACE_RE = re.compile(r"\s+")

_ARTIFACT_PATTERNS: Tuple["re.Pattern[str]", ...] = (
    re.compile(r"\(.*?\)"),
    re.compile(r"\[.*?\]"),
    re.compile(r"\*+"),
    re.compile(r"#+"),
)


# ── Predicates ───────────────────────────────────────

def is_section_header_group_text(text: str) -> bool:
    lower = (text or "").lower()
    return any(kw in lower for kw in SECTION_HEADER_KEYWORDS)


def is_header_text(text: str) -> bool:
    """Header keyword anywhere, or short ALL-CAPS text."""
    if not text:
        return False
    lower = text.lower()
    if any(kw in lower for kw in HEADER_TEXT_KEYWORDS):
        return True
    return text.upper() == text and len(text) <= HEADER_CAPS_MAX_LEN


def is_restaurant_info(text: str) -> bool:
    if not text:
        return False
    if _RESTAURANT_WORD_RE.search(text):
        return True
    if URL_RE.search(text):
        return True
    return bool(PHONE_RE.search(text))


def has_food_keyword(text: str) -> bool:
    lower = (text or "").lower()
    return any(kw in lower for kw in FOOD_KEYWORDS)


def is_potential_dish_name(text: str) -> bool:
    """
    Plausible dish name:
      - 2–10 whitespace tokens
      - no price, not header text
      - a food keyword, OR capitalized with 5–50 chars
    """
    if not text:
        return False
    words = text.split()
    if not (DISH_NAME_MIN_WORDS <= len(words) <= DISH_NAME_MAX_WORDS):
        return False
    if contains_price(text):
        return False
    if is_header_text(text):
        return False

    if has_food_keyword(text):
        return True

    is_capitalized = text[0].isupper()
    reasonable_len = DISH_NAME_CAPS_MIN_LEN <= len(text) <= DISH_NAME_CAPS_MAX_LEN
    return is_capitalized and reasonable_len


def clean_dish_name(name: str) -> str:
    """
    Strip prices, (asides), [brackets], * and # decoration; normalize spaces.
    """
    cleaned = strip_prices(name or "")
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    for rx in _ARTIFACT_PATTERNS:
        cleaned = rx.sub("", cleaned)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    return cleaned.strip()


def is_dish_name_valid(name: str) -> bool:
    trimmed = (name or "").strip()
    if not trimmed:
        return False
    if not (VALID_NAME_MIN_LEN <= len(trimmed) <= VALID_NAME_MAX_LEN):
        return False
    if contains_price(trimmed):
        return False
    if is_header_text(trimmed):
        return False
    if is_restaurant_info(trimmed):
        return False
    return True
