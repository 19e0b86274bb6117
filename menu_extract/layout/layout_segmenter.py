"""
Layout Segmenter — spatial grouping of OCR fragments into TextGroups.

Two modes:
- Layout-assisted: each provider region claims its member fragments and
  becomes one DishItem group. Linkage is by fragment identity; text-only
  regions claim at most one unclaimed fragment per member text, so a page
  with two "Soup of the Day" lines never double-claims.
- Proximity: greedy single pass. Each unclaimed fragment seeds a group and
  pulls in every still-unclaimed fragment related to the seed.

Every input fragment ends up in exactly one group.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Set

from ..ocr_types import GroupType, LayoutRegion, TextFragment, TextGroup
from ..ocr_utils import (
    fragments_bounds,
    fragments_confidence,
    horizontal_overlap_ratio,
    vertical_center_delta,
)
from .group_classifier import classify_group_fragments

log = logging.getLogger(__name__)

# --- Tunables (normalized page units) --------------------------------------

SAME_LINE_THRESHOLD = 0.03       # |Δ midY| for "same line"
COLUMN_OVERLAP_MIN = 0.10        # overlap / narrower width for "same column"
COLUMN_VERTICAL_THRESHOLD = 0.15  # |Δ midY| allowed for stacked same-column text


# --- Relation --------------------------------------------------------------

def are_fragments_related(a: TextFragment, b: TextFragment) -> bool:
    """
    Same line (vertical centers within SAME_LINE_THRESHOLD), or stacked in the
    same column (x-overlap > 10% of the narrower box AND vertical centers
    within COLUMN_VERTICAL_THRESHOLD).
    """
    dy = vertical_center_delta(a.bounding_box, b.bounding_box)
    if dy < SAME_LINE_THRESHOLD:
        return True
    overlap_ratio = horizontal_overlap_ratio(a.bounding_box, b.bounding_box)
    return overlap_ratio > COLUMN_OVERLAP_MIN and dy < COLUMN_VERTICAL_THRESHOLD


# --- Group construction ----------------------------------------------------

def build_group(
    fragments: List[TextFragment],
    group_type: Optional[GroupType] = None,
) -> TextGroup:
    """
    Wrap fragments into a TextGroup with union bbox + mean confidence.
    group_type=None runs the classifier.
    """
    if not fragments:
        raise ValueError("a text group needs at least one fragment")
    gtype = group_type if group_type is not None else classify_group_fragments(fragments)
    return TextGroup(
        fragments=list(fragments),
        bounding_box=fragments_bounds(fragments),
        group_type=gtype,
        confidence=fragments_confidence(fragments),
    )


def group_by_proximity(fragments: Sequence[TextFragment]) -> List[TextGroup]:
    """
    Greedy O(n²) clustering; first-seen-first-grouped.
    """
    groups: List[TextGroup] = []
    claimed: Set[int] = set()

    for i, seed in enumerate(fragments):
        if i in claimed:
            continue
        claimed.add(i)
        members = [seed]

        for j, other in enumerate(fragments):
            if j in claimed:
                continue
            if are_fragments_related(seed, other):
                members.append(other)
                claimed.add(j)

        groups.append(build_group(members))

    return groups


def _claim_region_members(
    region: LayoutRegion,
    fragments: Sequence[TextFragment],
    claimed: Set[int],
    index_by_id: Dict[int, int],
) -> List[int]:
    """Indices (into fragments) this region claims, in input order."""
    picked: List[int] = []

    if region.member_ids:
        for fid in region.member_ids:
            idx = index_by_id.get(fid)
            if idx is None or idx in claimed or idx in picked:
                continue
            picked.append(idx)
        return sorted(picked)

    for member_text in region.member_texts:
        for idx, frag in enumerate(fragments):
            if idx in claimed or idx in picked:
                continue
            if frag.text == member_text:
                picked.append(idx)
                break
    return sorted(picked)


def group_by_layout(
    fragments: Sequence[TextFragment],
    regions: Sequence[LayoutRegion],
) -> List[TextGroup]:
    """
    One DishItem group per region with at least one claimed fragment; anything
    left over goes through proximity grouping.
    """
    index_by_id: Dict[int, int] = {}
    for idx, frag in enumerate(fragments):
        if frag.fragment_id is not None and frag.fragment_id not in index_by_id:
            index_by_id[frag.fragment_id] = idx

    groups: List[TextGroup] = []
    claimed: Set[int] = set()

    for region in regions:
        picked = _claim_region_members(region, fragments, claimed, index_by_id)
        if not picked:
            log.debug("layout region %r matched no fragments", region.name)
            continue
        claimed.update(picked)
        members = [fragments[i] for i in picked]
        groups.append(build_group(members, group_type=GroupType.DISH_ITEM))

    remaining = [f for i, f in enumerate(fragments) if i not in claimed]
    if remaining:
        groups.extend(group_by_proximity(remaining))

    return groups


def group_fragments(
    fragments: Sequence[TextFragment],
    regions: Optional[Sequence[LayoutRegion]] = None,
    use_layout: bool = True,
) -> List[TextGroup]:
    """Entry point: layout-assisted when regions are supplied and enabled."""
    if not fragments:
        return []
    if use_layout and regions:
        return group_by_layout(fragments, regions)
    return group_by_proximity(fragments)
