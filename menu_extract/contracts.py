# menu_extract/contracts.py
from __future__ import annotations

import math
from dataclasses import fields, replace
from typing import Any, Dict, List, Optional, Tuple

from .config import (
    COMPREHENSIVE,
    DEFAULT,
    FAST,
    LOW_QUALITY_IMAGE,
    ParsingConfiguration,
)
from .ocr_types import Dish, LayoutRegion, Menu, Rect, RestaurantInfo, TextFragment

"""
Contracts & validators for the extraction API (JSON in, JSON out).

The portal stays thin: it validates with validate_extract_payload(), decodes
with decode_extract_request(), and serializes with menu_to_dict().

Request shape:
  {
    "fragments": [
      {"text": "Caesar Salad", "confidence": 0.95,
       "bounding_box": {"x": 0.1, "y": 0.8, "width": 0.3, "height": 0.03},
       "alternates": ["Caesar Salad"], "id": 0},
      ...
    ],
    "layout_regions": [                                   # optional
      {"name": "Starters", "bounding_box": {...},
       "member_ids": [0, 1], "member_texts": ["..."]}
    ],
    "configuration": {"preset": "fast", "minimum_dish_confidence": 0.4},  # optional
    "ocr_confidence": 0.91                                # optional
  }

bounding_box may also be a 4-item list [x, y, width, height].
"""

PRESETS: Dict[str, ParsingConfiguration] = {
    "default": DEFAULT,
    "fast": FAST,
    "comprehensive": COMPREHENSIVE,
    "low_quality_image": LOW_QUALITY_IMAGE,
}

CONFIG_BOOL_KEYS = {
    "enable_advanced_pricing",
    "enable_category_detection",
    "enable_dietary_analysis",
    "merge_similar_dishes",
    "enable_layout_awareness",
}
CONFIG_FLOAT_KEYS = {"minimum_dish_confidence", "minimum_fragment_confidence"}


# ---------------------------------------------------------------------------
# Basic helpers
# ---------------------------------------------------------------------------

def _is_number(x: Any) -> bool:
    if isinstance(x, bool):
        return False
    if not isinstance(x, (int, float)):
        return False
    return math.isfinite(float(x))


def _is_intlike(x: Any) -> bool:
    if isinstance(x, bool):
        return False
    try:
        int(x)
        return True
    except (TypeError, ValueError):
        return False


def _rect_error(raw: Any, where: str) -> Optional[str]:
    if isinstance(raw, (list, tuple)):
        if len(raw) != 4 or not all(_is_number(v) for v in raw):
            return f"{where} must be [x, y, width, height] numbers"
        return None
    if isinstance(raw, dict):
        for key in ("x", "y", "width", "height"):
            if not _is_number(raw.get(key)):
                return f"{where}.{key} must be a number"
        return None
    return f"{where} must be an object or a 4-item list"


def rect_from_json(raw: Any) -> Rect:
    if isinstance(raw, (list, tuple)):
        x, y, w, h = (float(v) for v in raw)
        return Rect(x, y, w, h)
    return Rect(float(raw["x"]), float(raw["y"]), float(raw["width"]), float(raw["height"]))


def rect_to_json(rect: Rect) -> Dict[str, float]:
    return {"x": rect.x, "y": rect.y, "width": rect.width, "height": rect.height}


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------

def _validate_fragment(i: int, frag: Any) -> Tuple[bool, str]:
    if not isinstance(frag, dict):
        return False, f"fragments[{i}] must be an object"
    if not isinstance(frag.get("text"), str):
        return False, f"fragments[{i}].text must be a string"
    conf = frag.get("confidence")
    if not _is_number(conf) or not (0.0 <= float(conf) <= 1.0):
        return False, f"fragments[{i}].confidence must be a number in [0, 1]"
    err = _rect_error(frag.get("bounding_box"), f"fragments[{i}].bounding_box")
    if err:
        return False, err
    alternates = frag.get("alternates", [])
    if not isinstance(alternates, list) or not all(isinstance(a, str) for a in alternates):
        return False, f"fragments[{i}].alternates must be a list of strings"
    if "id" in frag and frag["id"] is not None and not _is_intlike(frag["id"]):
        return False, f"fragments[{i}].id must be an integer or null"
    return True, ""


def _validate_region(i: int, region: Any) -> Tuple[bool, str]:
    if not isinstance(region, dict):
        return False, f"layout_regions[{i}] must be an object"
    if not isinstance(region.get("name", ""), str):
        return False, f"layout_regions[{i}].name must be a string"
    if "bounding_box" in region:
        err = _rect_error(region["bounding_box"], f"layout_regions[{i}].bounding_box")
        if err:
            return False, err
    ids = region.get("member_ids", [])
    if not isinstance(ids, list) or not all(_is_intlike(v) for v in ids):
        return False, f"layout_regions[{i}].member_ids must be a list of integers"
    texts = region.get("member_texts", [])
    if not isinstance(texts, list) or not all(isinstance(t, str) for t in texts):
        return False, f"layout_regions[{i}].member_texts must be a list of strings"
    return True, ""


def validate_configuration(raw: Any) -> Tuple[bool, str]:
    if raw is None:
        return True, ""
    if not isinstance(raw, dict):
        return False, "configuration must be an object"
    preset = raw.get("preset")
    if preset is not None and preset not in PRESETS:
        return False, f"unknown configuration preset '{preset}'"
    for key in CONFIG_BOOL_KEYS:
        if key in raw and not isinstance(raw[key], bool):
            return False, f"configuration.{key} must be a boolean"
    for key in CONFIG_FLOAT_KEYS:
        if key in raw and raw[key] is not None:
            if not _is_number(raw[key]) or not (0.0 <= float(raw[key]) <= 1.0):
                return False, f"configuration.{key} must be a number in [0, 1]"
    return True, ""


def validate_extract_payload(payload: Any, require_fragments: bool = True) -> Tuple[bool, str]:
    """
    Shape check only; never raises. Returns (ok, error_message).
    """
    if not isinstance(payload, dict):
        return False, "payload must be a JSON object"

    if require_fragments:
        if "fragments" not in payload:
            return False, "missing top-level keys: fragments"
        frags = payload.get("fragments")
        if not isinstance(frags, list):
            return False, "fragments must be a list"
        seen_ids: Dict[int, int] = {}
        for i, frag in enumerate(frags):
            ok, err = _validate_fragment(i, frag)
            if not ok:
                return ok, err
            if frag.get("id") is not None:
                fid = int(frag["id"])
                if fid in seen_ids:
                    return False, f"fragments[{i}].id {fid} duplicates fragments[{seen_ids[fid]}].id"
                seen_ids[fid] = i

    regions = payload.get("layout_regions")
    if regions is not None:
        if not isinstance(regions, list):
            return False, "layout_regions must be a list"
        for i, region in enumerate(regions):
            ok, err = _validate_region(i, region)
            if not ok:
                return ok, err

    ok, err = validate_configuration(payload.get("configuration"))
    if not ok:
        return ok, err

    ocr_conf = payload.get("ocr_confidence")
    if ocr_conf is not None and not (_is_number(ocr_conf) and 0.0 <= float(ocr_conf) <= 1.0):
        return False, "ocr_confidence must be a number in [0, 1]"

    return True, ""


# ---------------------------------------------------------------------------
# Decoding (assumes validate_extract_payload passed)
# ---------------------------------------------------------------------------

def decode_fragments(items: List[Dict[str, Any]]) -> List[TextFragment]:
    """
    Missing ids default to the list index so layout linkage still works.
    An index already taken by an explicit id falls through to the next unused
    integer, so every decoded fragment has a distinct id.
    """
    used = {int(item["id"]) for item in items if item.get("id") is not None}
    next_free = 0
    out: List[TextFragment] = []
    for idx, item in enumerate(items):
        raw_id = item.get("id")
        if raw_id is not None:
            fid = int(raw_id)
        elif idx not in used:
            fid = idx
            used.add(fid)
        else:
            while next_free in used:
                next_free += 1
            fid = next_free
            used.add(fid)
        out.append(
            TextFragment(
                text=item["text"],
                confidence=float(item["confidence"]),
                bounding_box=rect_from_json(item["bounding_box"]),
                alternates=tuple(item.get("alternates") or ()),
                fragment_id=fid,
            )
        )
    return out


def decode_regions(items: Optional[List[Dict[str, Any]]]) -> List[LayoutRegion]:
    out: List[LayoutRegion] = []
    for item in items or []:
        bbox = item.get("bounding_box")
        out.append(
            LayoutRegion(
                name=item.get("name", ""),
                bounding_box=rect_from_json(bbox) if bbox is not None else Rect(0.0, 0.0, 0.0, 0.0),
                member_ids=tuple(int(v) for v in item.get("member_ids") or ()),
                member_texts=tuple(item.get("member_texts") or ()),
            )
        )
    return out


def decode_configuration(
    raw: Optional[Dict[str, Any]],
    base: ParsingConfiguration = DEFAULT,
) -> ParsingConfiguration:
    if not raw:
        return base
    config = PRESETS.get(raw.get("preset") or "", base)
    known = {f.name for f in fields(ParsingConfiguration)}
    overrides = {k: v for k, v in raw.items() if k in known}
    for key in CONFIG_FLOAT_KEYS:
        if overrides.get(key) is not None:
            overrides[key] = float(overrides[key])
    return replace(config, **overrides)


def decode_extract_request(
    payload: Dict[str, Any],
    base: ParsingConfiguration = DEFAULT,
) -> Tuple[List[TextFragment], List[LayoutRegion], ParsingConfiguration, Optional[float]]:
    ocr_conf = payload.get("ocr_confidence")
    return (
        decode_fragments(payload.get("fragments") or []),
        decode_regions(payload.get("layout_regions")),
        decode_configuration(payload.get("configuration"), base=base),
        float(ocr_conf) if ocr_conf is not None else None,
    )


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def dish_to_dict(dish: Dish) -> Dict[str, Any]:
    return {
        "name": dish.name,
        "description": dish.description,
        "price": dish.price,
        "category": dish.category.value if dish.category is not None else None,
        "allergens": sorted(dish.allergens),
        "dietary_tags": sorted(tag.value for tag in dish.dietary_tags),
        "confidence": round(dish.extraction_confidence, 3),
    }


def restaurant_info_to_dict(info: Optional[RestaurantInfo]) -> Optional[Dict[str, Any]]:
    if info is None:
        return None
    return {
        "name": info.name,
        "address": info.address,
        "phone": info.phone,
        "website": info.website,
        "confidence": round(info.confidence, 3),
    }


def menu_to_dict(menu: Menu) -> Dict[str, Any]:
    return {
        "restaurant_name": menu.restaurant_name,
        "restaurant_info": restaurant_info_to_dict(menu.restaurant_info),
        "ocr_confidence": round(menu.ocr_confidence, 3),
        "dishes": [dish_to_dict(d) for d in menu.dishes],
        "stats": dict(menu.stats),
    }
