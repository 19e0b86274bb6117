"""
Menu Extract Types — fragments, groups, candidates, dishes, menu.

Coordinate convention:
- All boxes are normalized to the unit square [0, 1] x [0, 1].
- Origin is bottom-left: a LARGER y means HIGHER on the page.
  Grouping, restaurant-name detection and layout analysis all read
  "top of page" as max_y descending.

Lifecycle:
- TextFragment / LayoutRegion come from the OCR provider (read-only here).
- TextGroup / DishCandidate live for one pipeline run.
- Dish / Menu are the immutable output.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Set, Tuple


# ────────────────────────────────────────────────
# 🧩 Base geometric unit: normalized rectangle
# ────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2.0

    @property
    def center(self) -> Tuple[float, float]:
        return (self.mid_x, self.mid_y)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.width, self.height))

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "Rect":
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)


ZERO_RECT = Rect(0.0, 0.0, 0.0, 0.0)


# ────────────────────────────────────────────────
# 🔤 OCR provider inputs
# ────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class TextFragment:
    """
    One OCR-recognized span.

    fragment_id is the provider's stable identity for this span (usually its
    index in the provider output). Layout regions reference fragments by it.
    """
    text: str
    confidence: float               # 0.0–1.0
    bounding_box: Rect
    alternates: Tuple[str, ...] = ()
    fragment_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class LayoutRegion:
    """
    Named region from a pre-computed layout analysis.

    member_ids is preferred; member_texts is the legacy text-only linkage.
    """
    name: str
    bounding_box: Rect
    member_ids: Tuple[int, ...] = ()
    member_texts: Tuple[str, ...] = ()


class TextAlignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    MIXED = "mixed"


@dataclass(frozen=True, slots=True)
class LayoutAnalysis:
    regions: Tuple[LayoutRegion, ...]
    detected_columns: int = 1
    average_line_spacing: float = 0.0
    text_alignment: TextAlignment = TextAlignment.MIXED


# ────────────────────────────────────────────────
# 🧱 Groups (transient, one run)
# ────────────────────────────────────────────────

class GroupType(str, Enum):
    DISH_ITEM = "dish_item"
    SECTION_HEADER = "section_header"
    PRICE_ONLY = "price_only"
    DESCRIPTION = "description"
    RESTAURANT_INFO = "restaurant_info"


@dataclass(slots=True)
class TextGroup:
    """
    Cluster of fragments believed to be one logical menu element.
    fragments keeps discovery order, not display order.
    """
    fragments: List[TextFragment]
    bounding_box: Rect
    group_type: GroupType
    confidence: float

    @property
    def combined_text(self) -> str:
        return " ".join(f.text for f in self.fragments)


# ────────────────────────────────────────────────
# 💵 Prices
# ────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class PriceInfo:
    value: str                      # numeric part as written ("12.99", "7,50")
    currency: Optional[str]         # "$" | "€" | "£" | "¥" | None
    bounding_box: Rect
    confidence: float
    original_text: str              # matched substring
    currency_suffix: bool = False   # True for "12.99$" style

    @property
    def formatted(self) -> str:
        if not self.currency:
            return self.value
        if self.currency_suffix:
            return f"{self.value}{self.currency}"
        return f"{self.currency}{self.value}"


# ────────────────────────────────────────────────
# 🍽️ Categories & dietary tags
# ────────────────────────────────────────────────

class DishCategory(str, Enum):
    APPETIZER = "Appetizer"
    MAIN_COURSE = "Main Course"
    DESSERT = "Dessert"
    BEVERAGE = "Beverage"
    SPECIAL = "Special"
    UNKNOWN = "Unknown"


class DietaryTag(str, Enum):
    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    GLUTEN_FREE = "Gluten Free"
    DAIRY_FREE = "Dairy Free"
    SPICY = "Spicy"
    HEALTHY = "Healthy"


# ────────────────────────────────────────────────
# 🎯 Candidates (mutable across stages 4–7) and output dishes
# ────────────────────────────────────────────────

@dataclass
class DishCandidate:
    name: str
    source_fragments: List[TextFragment]
    group_confidence: float
    description: Optional[str] = None
    price: Optional[str] = None
    category: Optional[DishCategory] = None
    allergens: Set[str] = field(default_factory=set)
    dietary_tags: Set[DietaryTag] = field(default_factory=set)


@dataclass(frozen=True)
class Dish:
    name: str
    description: Optional[str] = None
    price: Optional[str] = None
    category: Optional[DishCategory] = None
    allergens: FrozenSet[str] = frozenset()
    dietary_tags: FrozenSet[DietaryTag] = frozenset()
    extraction_confidence: float = 0.0


@dataclass(frozen=True)
class RestaurantInfo:
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    confidence: float = 0.0


@dataclass(frozen=True)
class Menu:
    dishes: Tuple[Dish, ...]
    restaurant_name: Optional[str] = None
    ocr_confidence: float = 0.0
    restaurant_info: Optional[RestaurantInfo] = None
    stats: Dict[str, int] = field(default_factory=dict)


# ────────────────────────────────────────────────
# Exports
# ────────────────────────────────────────────────

__all__ = [
    "Rect",
    "ZERO_RECT",
    "TextFragment",
    "LayoutRegion",
    "LayoutAnalysis",
    "TextAlignment",
    "GroupType",
    "TextGroup",
    "PriceInfo",
    "DishCategory",
    "DietaryTag",
    "DishCandidate",
    "Dish",
    "RestaurantInfo",
    "Menu",
]
