# menu_extract/price_association.py
"""
Price Associator — attach the spatially nearest detected price to each
dish candidate.

- Prices are detected page-wide (every filtered fragment), independent of
  grouping, so a price that landed in its own PriceOnly group still counts.
- Nearest = smallest Euclidean distance between box centers.
- Attached only when that distance is below ASSOCIATION_CUTOFF.
- Nearest-neighbor per candidate: one price may serve several candidates.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .ocr_types import DishCandidate, PriceInfo, Rect
from .ocr_utils import center_distance, fragments_bounds

log = logging.getLogger(__name__)

ASSOCIATION_CUTOFF = 0.15  # normalized page width


def candidate_bounds(candidate: DishCandidate) -> Rect:
    if not candidate.source_fragments:
        raise ValueError(f"candidate {candidate.name!r} has no source fragments")
    bounds = fragments_bounds(candidate.source_fragments)
    if not bounds.is_finite():
        raise ValueError(f"candidate {candidate.name!r} has non-finite geometry")
    return bounds


def find_nearest_price(
    candidate: DishCandidate,
    prices: Sequence[PriceInfo],
    cutoff: float = ASSOCIATION_CUTOFF,
) -> Optional[PriceInfo]:
    if not prices:
        return None

    bounds = candidate_bounds(candidate)

    best: Optional[PriceInfo] = None
    best_distance = float("inf")
    for price in prices:
        distance = center_distance(bounds, price.bounding_box)
        if distance < best_distance:
            best = price
            best_distance = distance

    if best is not None and best_distance < cutoff:
        return best
    return None


def associate_prices(
    candidates: List[DishCandidate],
    prices: Sequence[PriceInfo],
    cutoff: float = ASSOCIATION_CUTOFF,
) -> Tuple[List[DishCandidate], int]:
    """
    Mutates each candidate's price in place; returns (candidates, dropped).
    A candidate whose geometry cannot be read is dropped.
    """
    kept: List[DishCandidate] = []
    dropped = 0
    for candidate in candidates:
        try:
            nearest = find_nearest_price(candidate, prices, cutoff=cutoff)
        except ValueError as e:
            dropped += 1
            log.warning("dropping candidate during price association: %s", e)
            continue
        if nearest is not None:
            candidate.price = nearest.formatted
        kept.append(candidate)
    return kept, dropped
