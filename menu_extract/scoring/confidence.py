"""
Confidence Scoring — turn categorized candidates into validated Dishes.

Start from the originating group's confidence, apply additive adjustments,
round to SCORE_DIGITS places, clamp to [0, 1], keep the candidate when
score >= threshold (inclusive).
"""

from __future__ import annotations

from typing import Iterable, List

from ..ocr_types import Dish, DishCandidate, DishCategory
from ..ocr_utils import clamp

PRICE_BONUS = 0.2
DESCRIPTION_BONUS = 0.1
DESCRIPTION_MIN_CHARS = 10     # strictly longer than this earns the bonus
CATEGORY_BONUS = 0.1
SHORT_NAME_PENALTY = 0.2
SHORT_NAME_CHARS = 5           # strictly shorter than this is penalized
ALL_CAPS_PENALTY = 0.1
SCORE_DIGITS = 6               # float drift from the adjustments stays below this

DEFAULT_MIN_DISH_CONFIDENCE = 0.3


def score_confidence(candidate: DishCandidate) -> float:
    score = float(candidate.group_confidence)

    if candidate.price is not None:
        score += PRICE_BONUS
    if candidate.description is not None and len(candidate.description) > DESCRIPTION_MIN_CHARS:
        score += DESCRIPTION_BONUS
    if candidate.category is not None and candidate.category != DishCategory.UNKNOWN:
        score += CATEGORY_BONUS

    if len(candidate.name) < SHORT_NAME_CHARS:
        score -= SHORT_NAME_PENALTY
    if candidate.name.upper() == candidate.name:
        score -= ALL_CAPS_PENALTY

    return clamp(round(score, SCORE_DIGITS), 0.0, 1.0)


def to_dish(candidate: DishCandidate, confidence: float) -> Dish:
    return Dish(
        name=candidate.name,
        description=candidate.description,
        price=candidate.price,
        category=candidate.category,
        allergens=frozenset(candidate.allergens),
        dietary_tags=frozenset(candidate.dietary_tags),
        extraction_confidence=confidence,
    )


def validate_candidates(
    candidates: Iterable[DishCandidate],
    minimum_confidence: float = DEFAULT_MIN_DISH_CONFIDENCE,
) -> List[Dish]:
    """Score every candidate and keep those at or above the threshold."""
    dishes: List[Dish] = []
    for candidate in candidates:
        score = score_confidence(candidate)
        if score >= minimum_confidence:
            dishes.append(to_dish(candidate, score))
    return dishes
