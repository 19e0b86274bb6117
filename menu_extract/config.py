# menu_extract/config.py
"""
Parsing configuration — stage toggles + the dish confidence threshold.

Each toggle disables exactly the stage it names:
  enable_advanced_pricing   -> price detection + association
  enable_category_detection -> category scoring
  enable_dietary_analysis   -> dietary tags + allergens
  merge_similar_dishes      -> near-duplicate merge
  enable_layout_awareness   -> layout-assisted grouping (proximity otherwise)

Presets mirror the scan scenarios the capture UI offers. Env overrides use the
MENU_* variables (see configuration_from_env).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .scoring.confidence import DEFAULT_MIN_DISH_CONFIDENCE


@dataclass(frozen=True)
class ParsingConfiguration:
    enable_advanced_pricing: bool = True
    enable_category_detection: bool = True
    enable_dietary_analysis: bool = True
    minimum_dish_confidence: float = DEFAULT_MIN_DISH_CONFIDENCE
    merge_similar_dishes: bool = True
    enable_layout_awareness: bool = True
    # Fragment floor; None means "same as minimum_dish_confidence"
    minimum_fragment_confidence: Optional[float] = None

    @property
    def fragment_floor(self) -> float:
        if self.minimum_fragment_confidence is not None:
            return self.minimum_fragment_confidence
        return self.minimum_dish_confidence


DEFAULT = ParsingConfiguration()

FAST = ParsingConfiguration(
    enable_advanced_pricing=False,
    enable_category_detection=False,
    enable_dietary_analysis=False,
    minimum_dish_confidence=0.5,
    merge_similar_dishes=False,
    enable_layout_awareness=False,
)

COMPREHENSIVE = ParsingConfiguration(minimum_dish_confidence=0.2)

LOW_QUALITY_IMAGE = ParsingConfiguration(minimum_dish_confidence=0.1)


class ParsingScenario(str, Enum):
    QUICK_SCAN = "quick_scan"
    STANDARD_MENU = "standard_menu"
    DETAILED_ANALYSIS = "detailed_analysis"
    LOW_QUALITY_IMAGE = "low_quality_image"


_SCENARIO_PRESETS = {
    ParsingScenario.QUICK_SCAN: FAST,
    ParsingScenario.STANDARD_MENU: DEFAULT,
    ParsingScenario.DETAILED_ANALYSIS: COMPREHENSIVE,
    ParsingScenario.LOW_QUALITY_IMAGE: LOW_QUALITY_IMAGE,
}


def recommended_configuration(scenario: ParsingScenario) -> ParsingConfiguration:
    return _SCENARIO_PRESETS[ParsingScenario(scenario)]


# -----------------------------
# Env overrides
# -----------------------------

def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def configuration_from_env(base: ParsingConfiguration = DEFAULT) -> ParsingConfiguration:
    """
    MENU_MIN_DISH_CONFIDENCE, MENU_MIN_FRAGMENT_CONFIDENCE (floats) and
    MENU_ENABLE_PRICING / MENU_ENABLE_CATEGORIES / MENU_ENABLE_DIETARY /
    MENU_MERGE_SIMILAR / MENU_ENABLE_LAYOUT ("1"/"0") override the base preset.
    """
    return replace(
        base,
        enable_advanced_pricing=_env_flag("MENU_ENABLE_PRICING", base.enable_advanced_pricing),
        enable_category_detection=_env_flag("MENU_ENABLE_CATEGORIES", base.enable_category_detection),
        enable_dietary_analysis=_env_flag("MENU_ENABLE_DIETARY", base.enable_dietary_analysis),
        minimum_dish_confidence=_env_float("MENU_MIN_DISH_CONFIDENCE", base.minimum_dish_confidence),
        merge_similar_dishes=_env_flag("MENU_MERGE_SIMILAR", base.merge_similar_dishes),
        enable_layout_awareness=_env_flag("MENU_ENABLE_LAYOUT", base.enable_layout_awareness),
        minimum_fragment_confidence=_env_float(
            "MENU_MIN_FRAGMENT_CONFIDENCE", base.minimum_fragment_confidence
        ),
    )
