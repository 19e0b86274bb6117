"""
Cross-Item Merge — collapse near-duplicate dishes (typically OCR double-reads).

Similarity is the Jaccard index of the two names' lowercase word sets.
Pairs above MERGE_THRESHOLD merge:

  - base = the dish with the higher extraction confidence
  - base scalar fields win; the other dish fills base's None fields
  - allergens and dietary tags are unioned
  - confidence = max of the two

Pass order is input order: dish i seeds, every later unprocessed dish that is
directly similar to dish i folds into it. A chain A~B~C with A !~ C can stay
split; this is not a connected-components closure.
"""
from __future__ import annotations

from typing import FrozenSet, List, Sequence, Set

from .ocr_types import Dish

MERGE_THRESHOLD = 0.8  # strictly greater than


def _name_tokens(name: str) -> FrozenSet[str]:
    return frozenset((name or "").lower().split())


def _name_similarity(a: str, b: str) -> float:
    """Jaccard similarity (0.0-1.0) of the two names' word sets."""
    tokens_a = _name_tokens(a)
    tokens_b = _name_tokens(b)
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / float(len(union))


def are_dishes_similar(a: Dish, b: Dish, threshold: float = MERGE_THRESHOLD) -> bool:
    return _name_similarity(a.name, b.name) > threshold


def merge_dishes(a: Dish, b: Dish) -> Dish:
    """Field-level merge; ties on confidence keep `a` as the base."""
    if a.extraction_confidence >= b.extraction_confidence:
        base, other = a, b
    else:
        base, other = b, a

    return Dish(
        name=base.name,
        description=base.description if base.description is not None else other.description,
        price=base.price if base.price is not None else other.price,
        category=base.category if base.category is not None else other.category,
        allergens=base.allergens | other.allergens,
        dietary_tags=base.dietary_tags | other.dietary_tags,
        extraction_confidence=max(base.extraction_confidence, other.extraction_confidence),
    )


def merge_similar_dishes(
    dishes: Sequence[Dish],
    threshold: float = MERGE_THRESHOLD,
) -> List[Dish]:
    merged: List[Dish] = []
    processed: Set[int] = set()

    for i, seed in enumerate(dishes):
        if i in processed:
            continue
        processed.add(i)
        current = seed

        for j in range(i + 1, len(dishes)):
            if j in processed:
                continue
            if are_dishes_similar(seed, dishes[j], threshold=threshold):
                current = merge_dishes(current, dishes[j])
                processed.add(j)

        merged.append(current)

    return merged
