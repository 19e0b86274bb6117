# menu_extract/restaurant_info.py
"""
Restaurant info — name, phone and website pulled from the whole page.

Name: among confident fragments (> NAME_MIN_CONFIDENCE), look at the
topmost NAME_TOP_N by max_y and take the first that is not header text,
carries no price and is 3–50 chars long.

Phone / website: first regex hit in the joined page text.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .ocr_types import RestaurantInfo, TextFragment
from .parsers.menu_grammar import PHONE_RE, URL_RE, is_header_text
from .parsers.price_parser import contains_price

NAME_MIN_CONFIDENCE = 0.7
NAME_TOP_N = 3
NAME_MIN_LEN = 3
NAME_MAX_LEN = 50
NAME_FOUND_CONFIDENCE = 0.7


def _looks_like_name(text: str) -> bool:
    stripped = (text or "").strip()
    if is_header_text(stripped):
        return False
    if contains_price(stripped):
        return False
    return NAME_MIN_LEN <= len(stripped) <= NAME_MAX_LEN


def detect_restaurant_name(fragments: Sequence[TextFragment]) -> Optional[str]:
    confident = [f for f in fragments if f.confidence > NAME_MIN_CONFIDENCE]
    top = sorted(confident, key=lambda f: f.bounding_box.max_y, reverse=True)[:NAME_TOP_N]
    for frag in top:
        if _looks_like_name(frag.text):
            return frag.text.strip()
    return None


def detect_phone(text: str) -> Optional[str]:
    m = PHONE_RE.search(text or "")
    return m.group(0).strip() if m else None


def detect_website(text: str) -> Optional[str]:
    m = URL_RE.search(text or "")
    return m.group(0).rstrip(".,;") if m else None


def extract_restaurant_info(fragments: Sequence[TextFragment]) -> RestaurantInfo:
    all_text = " ".join(f.text for f in fragments)
    name = detect_restaurant_name(fragments)
    return RestaurantInfo(
        name=name,
        address=None,
        phone=detect_phone(all_text),
        website=detect_website(all_text),
        confidence=NAME_FOUND_CONFIDENCE if name else 0.0,
    )
