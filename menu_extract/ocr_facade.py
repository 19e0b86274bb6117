# menu_extract/ocr_facade.py
"""
OCR façade — Tesseract in, TextFragments out.
Bridges pytesseract to the menu parsing pipeline.

Public API:
- fragments_from_tesseract_data(data, image_size) -> [TextFragment]
- ocr_image(image) -> (fragments, layout_analysis)
- overall_confidence(fragments) -> float
- extract_menu_from_image(image, configuration) -> Menu
- health() -> engine + versions

Tesseract rows (image_to_data, Output.DICT) are word-level with a top-left
pixel origin and conf on a 0–100 scale (-1 for non-text rows). Fragments are
normalized to the unit square with a bottom-left origin and conf in 0–1.
With merge_lines=True, words sharing (block_num, par_num, line_num) become
one fragment, which is what the grouping heuristics expect.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from PIL import Image
import pytesseract

from .config import ParsingConfiguration
from .layout.layout_analyzer import analyze_layout
from .ocr_pipeline import MenuParsingPipeline
from .ocr_types import LayoutAnalysis, Menu, TextFragment
from .ocr_utils import fragments_confidence, pixel_box_to_rect, union_rect

log = logging.getLogger(__name__)

OCR_CONFIG = os.getenv("MENU_TESSERACT_CONFIG", "--oem 3 --psm 6")
OCR_LANG = os.getenv("MENU_TESSERACT_LANG", "eng")
ENGINE_NAME = "menu-extract-tesseract"

LineKey = Tuple[int, int, int]


def _tesseract_cmd() -> str:
    """Locate the tesseract executable (TESSERACT_CMD env wins)."""
    cmd = os.environ.get("TESSERACT_CMD") or ""
    if cmd:
        return cmd
    cmd = getattr(pytesseract.pytesseract, "tesseract_cmd", "") or ""
    if cmd and cmd != "tesseract":
        return cmd
    return shutil.which("tesseract") or cmd


def _configure_tesseract() -> None:
    cmd = os.environ.get("TESSERACT_CMD")
    if cmd:
        pytesseract.pytesseract.tesseract_cmd = cmd


def _conf(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return -1.0


def _line_key(data: Dict[str, List], i: int) -> LineKey:
    def _num(key: str) -> int:
        try:
            return int(data.get(key, [0] * (i + 1))[i])
        except (TypeError, ValueError, IndexError):
            return 0
    return _num("block_num"), _num("par_num"), _num("line_num")


def fragments_from_tesseract_data(
    data: Dict[str, List],
    image_size: Tuple[int, int],
    merge_lines: bool = True,
) -> List[TextFragment]:
    """
    Convert one image_to_data dict into fragments.

    Rows with negative conf or blank text are skipped. Fragment ids are the
    output order, so layout regions built from these fragments can link by id.
    """
    texts = data.get("text") or []

    # (text, conf 0-1, rect, line key) per usable word
    words: List[Tuple[str, float, Any, LineKey]] = []
    for i, raw in enumerate(texts):
        text = (raw or "").strip()
        conf = _conf(data["conf"][i])
        if not text or conf < 0:
            continue
        rect = pixel_box_to_rect(
            float(data["left"][i]),
            float(data["top"][i]),
            float(data["width"][i]),
            float(data["height"][i]),
            image_size,
        )
        words.append((text, min(conf / 100.0, 1.0), rect, _line_key(data, i)))

    if not merge_lines:
        return [
            TextFragment(text=text, confidence=conf, bounding_box=rect, fragment_id=idx)
            for idx, (text, conf, rect, _key) in enumerate(words)
        ]

    lines: Dict[LineKey, List[Tuple[str, float, Any]]] = {}
    order: List[LineKey] = []
    for text, conf, rect, key in words:
        if key not in lines:
            lines[key] = []
            order.append(key)
        lines[key].append((text, conf, rect))

    fragments: List[TextFragment] = []
    for idx, key in enumerate(order):
        members = lines[key]
        fragments.append(
            TextFragment(
                text=" ".join(m[0] for m in members),
                confidence=sum(m[1] for m in members) / len(members),
                bounding_box=union_rect(m[2] for m in members),
                fragment_id=idx,
            )
        )
    return fragments


def ocr_image(
    image: Image.Image,
    merge_lines: bool = True,
) -> Tuple[List[TextFragment], LayoutAnalysis]:
    """Run Tesseract on a PIL image; returns fragments + layout analysis."""
    _configure_tesseract()
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    data = pytesseract.image_to_data(
        image,
        lang=OCR_LANG,
        config=OCR_CONFIG,
        output_type=pytesseract.Output.DICT,
    )
    fragments = fragments_from_tesseract_data(data, image.size, merge_lines=merge_lines)
    log.info("tesseract: %d fragments from %dx%d image", len(fragments), image.size[0], image.size[1])
    return fragments, analyze_layout(fragments)


def overall_confidence(fragments: Sequence[TextFragment]) -> float:
    return fragments_confidence(fragments)


def extract_menu_from_image(
    image: Image.Image,
    configuration: Optional[ParsingConfiguration] = None,
    pipeline: Optional[MenuParsingPipeline] = None,
    use_layout_regions: bool = False,
) -> Tuple[Menu, LayoutAnalysis]:
    fragments, analysis = ocr_image(image)
    pipeline = pipeline or MenuParsingPipeline(configuration)
    menu = pipeline.parse_menu(
        fragments,
        layout_regions=list(analysis.regions) if use_layout_regions else None,
        configuration=configuration,
        ocr_confidence=overall_confidence(fragments),
    )
    return menu, analysis


def health() -> Dict[str, Any]:
    cmd = _tesseract_cmd()
    version: Optional[str] = None
    if cmd:
        try:
            pytesseract.pytesseract.tesseract_cmd = cmd
            version = str(pytesseract.get_tesseract_version())
        except (pytesseract.TesseractNotFoundError, OSError, RuntimeError) as e:
            log.warning("tesseract version check failed: %s", e)
            version = None

    return {
        "engine": ENGINE_NAME,
        "tesseract": {
            "cmd": cmd,
            "version": version,
            "found_on_disk": bool(cmd and Path(cmd).exists()),
            "config": OCR_CONFIG,
            "lang": OCR_LANG,
        },
    }
