# menu_extract/ocr_utils.py
"""
Geometry + small stats helpers shared by grouping, price association and
layout analysis.

All boxes are normalized Rects (see ocr_types for the y-up convention).
"""

from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

from .ocr_types import Rect, TextFragment, ZERO_RECT


# =============================
# Small stats helpers
# =============================

def median(values: List[float]) -> float:
    if not values:
        return 0.0
    vals = sorted(values)
    n = len(vals)
    mid = n // 2
    if n % 2:
        return float(vals[mid])
    return float((vals[mid - 1] + vals[mid]) / 2.0)


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return float(sum(values)) / float(len(values))


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


# =============================
# Rect helpers
# =============================

def union_rect(boxes: Iterable[Rect]) -> Rect:
    """Minimal rectangle covering every box (ZERO_RECT for no boxes)."""
    boxes = list(boxes)
    if not boxes:
        return ZERO_RECT
    x1 = min(b.min_x for b in boxes)
    y1 = min(b.min_y for b in boxes)
    x2 = max(b.max_x for b in boxes)
    y2 = max(b.max_y for b in boxes)
    return Rect.from_xyxy(x1, y1, x2, y2)


def fragments_bounds(fragments: Iterable[TextFragment]) -> Rect:
    return union_rect(f.bounding_box for f in fragments)


def fragments_confidence(fragments: Sequence[TextFragment]) -> float:
    """Arithmetic mean of member confidences (0.0 for no fragments)."""
    return mean([f.confidence for f in fragments])


def center_distance(a: Rect, b: Rect) -> float:
    """Euclidean distance between the two box centers."""
    dx = a.mid_x - b.mid_x
    dy = a.mid_y - b.mid_y
    return math.sqrt(dx * dx + dy * dy)


def horizontal_overlap(a: Rect, b: Rect) -> float:
    """Width of the shared x-span (0 if disjoint)."""
    return max(0.0, min(a.max_x, b.max_x) - max(a.min_x, b.min_x))


def horizontal_overlap_ratio(a: Rect, b: Rect) -> float:
    """Shared x-span as a fraction of the narrower box; 0 for zero-width boxes."""
    narrower = min(a.width, b.width)
    if narrower <= 0:
        return 0.0
    return horizontal_overlap(a, b) / narrower


def vertical_center_delta(a: Rect, b: Rect) -> float:
    return abs(a.mid_y - b.mid_y)


def pixel_box_to_rect(
    left: float, top: float, width: float, height: float,
    image_size: Tuple[int, int],
) -> Rect:
    """
    Convert a top-left-origin pixel box into a normalized y-up Rect.
    """
    img_w, img_h = image_size
    if img_w <= 0 or img_h <= 0:
        return ZERO_RECT
    x = clamp(left / float(img_w), 0.0, 1.0)
    w = clamp(width / float(img_w), 0.0, 1.0 - x)
    bottom_px = top + height
    y = clamp(1.0 - bottom_px / float(img_h), 0.0, 1.0)
    h = clamp(height / float(img_h), 0.0, 1.0 - y)
    return Rect(x=x, y=y, width=w, height=h)
