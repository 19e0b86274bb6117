# menu_extract/dish_builder.py
"""
Dish Candidate Builder — turn DishItem groups into name/description pairs.

Per group:
  - split the combined text into trimmed, non-empty lines
  - line 0 (or, while the name is still empty, the first plausible dish-name
    line) becomes the cleaned name
  - the first later non-price line becomes the description
  - the candidate is dropped when the cleaned name fails validation

A group that blows up while being read only loses its own candidate.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from .ocr_types import DishCandidate, GroupType, TextGroup
from .parsers.menu_grammar import (
    clean_dish_name,
    is_dish_name_valid,
    is_potential_dish_name,
)
from .parsers.price_parser import contains_price

log = logging.getLogger(__name__)


def split_lines(text: str) -> List[str]:
    return [ln.strip() for ln in (text or "").splitlines() if ln.strip()]


def pick_name_and_description(lines: List[str]) -> Tuple[str, Optional[str]]:
    name = ""
    description: Optional[str] = None

    for index, line in enumerate(lines):
        if index == 0 or (not name and is_potential_dish_name(line)):
            name = clean_dish_name(line)
        elif description is None and not contains_price(line):
            description = line

    return name, description


def extract_dish_candidate(group: TextGroup) -> Optional[DishCandidate]:
    if group.group_type != GroupType.DISH_ITEM:
        return None
    if not group.fragments:
        raise ValueError("empty text group")

    lines = split_lines(group.combined_text)
    if not lines:
        return None

    name, description = pick_name_and_description(lines)
    if not name or not is_dish_name_valid(name):
        return None

    return DishCandidate(
        name=name,
        description=description,
        source_fragments=list(group.fragments),
        group_confidence=group.confidence,
    )


def build_candidates(groups: Iterable[TextGroup]) -> Tuple[List[DishCandidate], int]:
    """
    Returns (candidates, dropped_by_error).
    """
    candidates: List[DishCandidate] = []
    errors = 0
    for group in groups:
        try:
            candidate = extract_dish_candidate(group)
        except (ValueError, TypeError, AttributeError) as e:
            errors += 1
            log.warning("dropping group during candidate extraction: %s", e)
            continue
        if candidate is None:
            continue
        candidates.append(candidate)
    return candidates, errors
