"""
menu_extract/category_infer.py

Lightweight category, dietary and allergen inference for dish candidates.

Goals:
- No heavyweight ML deps.
- Static keyword vocabularies, built once at import.
- Category = best fraction of a category's keywords found in the text.
- Dietary tags / allergens = every vocabulary with at least one hit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple
import re

from .ocr_types import DietaryTag, DishCandidate, DishCategory


# ------------------------
# Data structures
# ------------------------

@dataclass
class CategoryGuess:
    category: DishCategory
    score: float  # 0.0–1.0, fraction of the category's keywords matched
    reason: str = ""


# ------------------------
# Keyword vocabularies
# ------------------------

# Order matters: ties on score go to the earlier category.
CATEGORY_KEYWORDS: Mapping[DishCategory, Tuple[str, ...]] = {
    DishCategory.APPETIZER: (
        "appetizer", "starter", "small plate", "share", "tapas", "bruschetta",
        "soup", "salad", "wings", "nachos", "dip", "cheese", "olives",
    ),
    DishCategory.MAIN_COURSE: (
        "entree", "main", "pasta", "pizza", "burger", "steak", "chicken",
        "fish", "salmon", "beef", "pork", "lamb", "seafood", "rice", "noodles",
    ),
    DishCategory.DESSERT: (
        "dessert", "sweet", "cake", "pie", "ice cream", "chocolate",
        "cheesecake", "cookie", "brownie", "fruit", "sorbet", "pudding",
    ),
    DishCategory.BEVERAGE: (
        "drink", "beverage", "coffee", "tea", "juice", "soda", "water",
        "wine", "beer", "cocktail", "smoothie", "latte", "cappuccino",
    ),
    DishCategory.SPECIAL: (
        "special", "chef", "signature", "house", "seasonal", "featured", "daily",
    ),
}

DEFAULT_CATEGORY = DishCategory.MAIN_COURSE

DIETARY_KEYWORDS: Mapping[DietaryTag, Tuple[str, ...]] = {
    DietaryTag.VEGETARIAN: ("vegetarian", "veggie", "no meat", "plant-based"),
    DietaryTag.VEGAN: ("vegan", "plant-based", "no dairy", "no eggs"),
    DietaryTag.GLUTEN_FREE: ("gluten free", "gluten-free", "gf", "celiac"),
    DietaryTag.DAIRY_FREE: ("dairy free", "dairy-free", "lactose free", "no dairy"),
    DietaryTag.SPICY: ("spicy", "hot", "chili", "jalapeño", "habanero", "sriracha", "🌶"),
    DietaryTag.HEALTHY: ("healthy", "light", "low fat", "fresh", "organic", "superfood"),
}

ALLERGEN_KEYWORDS: Mapping[str, Tuple[str, ...]] = {
    "nuts": ("nuts", "almond", "walnut", "pecan", "cashew", "pistachio"),
    "peanuts": ("peanut", "peanuts"),
    "shellfish": ("shellfish", "shrimp", "lobster", "crab", "oyster", "clam"),
    "fish": ("fish", "salmon", "tuna", "cod", "halibut"),
    "eggs": ("egg", "eggs", "mayo", "mayonnaise"),
    "dairy": ("milk", "cheese", "butter", "cream", "yogurt"),
    "soy": ("soy", "tofu", "soybean", "edamame"),
    "wheat": ("wheat", "bread", "pasta", "flour", "gluten"),
}


# ------------------------
# Text helpers
# ------------------------

_whitespace_re = re.compile(r"\s+")


def _norm(text: Optional[str]) -> str:
    if not text:
        return ""
    text = text.strip().lower()
    return _whitespace_re.sub(" ", text)


def candidate_text(name: Optional[str], description: Optional[str]) -> str:
    """Lowercased "name description" used by every matcher below."""
    return _norm(f"{name or ''} {description or ''}")


def _matched_keywords(text: str, keywords: Iterable[str]) -> List[str]:
    return [kw for kw in keywords if kw in text]


def _keyword_score(text: str, category: DishCategory) -> float:
    keywords = CATEGORY_KEYWORDS.get(category, ())
    if not text or not keywords:
        return 0.0
    return len(_matched_keywords(text, keywords)) / float(len(keywords))


# ------------------------
# Core inference
# ------------------------

def infer_category_for_text(
    name: Optional[str],
    description: Optional[str] = None,
) -> CategoryGuess:
    text = candidate_text(name, description)

    best_category = DEFAULT_CATEGORY
    best_score = 0.0
    for category in CATEGORY_KEYWORDS:
        score = _keyword_score(text, category)
        if score > best_score:
            best_category = category
            best_score = score

    if best_score <= 0.0:
        return CategoryGuess(
            category=DEFAULT_CATEGORY,
            score=0.0,
            reason="no keyword match; using default",
        )

    hits = _matched_keywords(text, CATEGORY_KEYWORDS[best_category])
    return CategoryGuess(
        category=best_category,
        score=best_score,
        reason="matched " + ", ".join(hits),
    )


def detect_dietary_tags(name: Optional[str], description: Optional[str] = None) -> Set[DietaryTag]:
    text = candidate_text(name, description)
    return {
        tag for tag, keywords in DIETARY_KEYWORDS.items()
        if _matched_keywords(text, keywords)
    }


def detect_allergens(name: Optional[str], description: Optional[str] = None) -> Set[str]:
    text = candidate_text(name, description)
    return {
        allergen for allergen, keywords in ALLERGEN_KEYWORDS.items()
        if _matched_keywords(text, keywords)
    }


def apply_inference_to_candidates(
    candidates: Iterable[DishCandidate],
    enable_category: bool = True,
    enable_dietary: bool = True,
) -> List[DishCandidate]:
    """
    Mutates each candidate in place and returns them as a list.

    The two switches are independent: category can be off while dietary tags
    and allergens are still collected, and vice versa.
    """
    out: List[DishCandidate] = []
    for candidate in candidates:
        if enable_category:
            guess = infer_category_for_text(candidate.name, candidate.description)
            candidate.category = guess.category
        if enable_dietary:
            candidate.dietary_tags |= detect_dietary_tags(candidate.name, candidate.description)
            candidate.allergens |= detect_allergens(candidate.name, candidate.description)
        out.append(candidate)
    return out


def category_score_table(name: Optional[str], description: Optional[str] = None) -> Dict[DishCategory, float]:
    """Per-category scores, handy for debugging a surprising pick."""
    text = candidate_text(name, description)
    return {category: _keyword_score(text, category) for category in CATEGORY_KEYWORDS}
