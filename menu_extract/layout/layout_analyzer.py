"""
Layout Analyzer — provider-side section detection.

Builds the LayoutRegion list an OCR provider hands to the grouping engine
when it has no layout model of its own:

- Walk fragments top of page first.
- A section-header-looking fragment closes the current region and opens a
  new one named after it.
- Fragments seen before any header land in a "Menu Items" region.

Also reports rough page stats (column count, line spacing, alignment).
Regions reference fragments by fragment_id when the fragments carry one.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..ocr_types import (
    LayoutAnalysis,
    LayoutRegion,
    TextAlignment,
    TextFragment,
)
from ..ocr_utils import fragments_bounds, mean

DEFAULT_SECTION_NAME = "Menu Items"
MAX_COLUMNS = 3
HEADER_CAPS_MAX_LEN = 20

SECTION_KEYWORDS = (
    "appetizers", "starters", "entrees", "main courses", "mains",
    "desserts", "beverages", "drinks", "wine", "beer", "cocktails",
    "salads", "soups", "pasta", "pizza", "seafood", "specials",
)

# Alignment bands on min_x
_LEFT_MAX = 0.1
_RIGHT_MIN = 0.7
_CENTER_MIN = 0.3
_CENTER_MAX = 0.7


def is_potential_section_header(text: str) -> bool:
    trimmed = (text or "").strip()
    if not trimmed:
        return False
    lower = trimmed.lower()
    if any(kw in lower for kw in SECTION_KEYWORDS):
        return True
    has_alpha = any(c.isalpha() for c in trimmed)
    return has_alpha and trimmed.upper() == trimmed and len(trimmed) <= HEADER_CAPS_MAX_LEN


def _make_region(name: str, members: List[TextFragment]) -> LayoutRegion:
    ids = tuple(f.fragment_id for f in members if f.fragment_id is not None)
    if len(ids) != len(members):
        ids = ()
    return LayoutRegion(
        name=name,
        bounding_box=fragments_bounds(members),
        member_ids=ids,
        member_texts=tuple(f.text for f in members),
    )


def detect_sections(fragments: Sequence[TextFragment]) -> List[LayoutRegion]:
    ordered = sorted(fragments, key=lambda f: -f.bounding_box.min_y)

    regions: List[LayoutRegion] = []
    current_name: Optional[str] = None
    current: List[TextFragment] = []

    for frag in ordered:
        if is_potential_section_header(frag.text):
            if current:
                regions.append(_make_region(current_name or DEFAULT_SECTION_NAME, current))
            current_name = frag.text.strip()
            current = [frag]
        else:
            if current_name is None and not current:
                current_name = DEFAULT_SECTION_NAME
            current.append(frag)

    if current:
        regions.append(_make_region(current_name or DEFAULT_SECTION_NAME, current))

    return regions


def detect_column_count(fragments: Sequence[TextFragment]) -> int:
    if not fragments:
        return 0
    starts = {round(f.bounding_box.min_x * 10) / 10 for f in fragments}
    return min(len(starts), MAX_COLUMNS)


def average_line_spacing(fragments: Sequence[TextFragment]) -> float:
    if len(fragments) < 2:
        return 0.0
    ordered = sorted(fragments, key=lambda f: -f.bounding_box.min_y)
    spacings: List[float] = []
    for upper, lower in zip(ordered, ordered[1:]):
        gap = upper.bounding_box.min_y - lower.bounding_box.max_y
        if gap > 0:
            spacings.append(gap)
    return mean(spacings)


def detect_text_alignment(fragments: Sequence[TextFragment]) -> TextAlignment:
    left = sum(1 for f in fragments if f.bounding_box.min_x < _LEFT_MAX)
    right = sum(1 for f in fragments if f.bounding_box.min_x > _RIGHT_MIN)
    centered = sum(
        1 for f in fragments
        if _CENTER_MIN < f.bounding_box.min_x < _CENTER_MAX
    )
    if left > right and left > centered:
        return TextAlignment.LEFT
    if right > left and right > centered:
        return TextAlignment.RIGHT
    if centered > left and centered > right:
        return TextAlignment.CENTER
    return TextAlignment.MIXED


def analyze_layout(fragments: Sequence[TextFragment]) -> LayoutAnalysis:
    return LayoutAnalysis(
        regions=tuple(detect_sections(fragments)),
        detected_columns=detect_column_count(fragments),
        average_line_spacing=average_line_spacing(fragments),
        text_alignment=detect_text_alignment(fragments),
    )
