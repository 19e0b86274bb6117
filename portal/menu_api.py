# portal/menu_api.py
"""
Menu extraction API (JSON).

- POST /api/menu/extract        fragments JSON -> Menu JSON
- POST /api/menu/extract/image  multipart image (field "file") -> Tesseract -> Menu JSON
- POST /api/menu/cancel         cancel the in-flight extraction, if any
- GET  /api/menu/status         stage / progress of the shared pipeline

All errors are {"ok": false, "error": "..."}:
  400 bad payload / unreadable image
  409 an extraction is already running, or the run was cancelled
  413 upload too large
  422 no dishes survived validation
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, current_app, jsonify, request
from PIL import Image, UnidentifiedImageError
from werkzeug.exceptions import RequestEntityTooLarge

from menu_extract import ocr_facade
from menu_extract.config import ParsingConfiguration
from menu_extract.contracts import (
    decode_configuration,
    decode_extract_request,
    menu_to_dict,
    rect_to_json,
    validate_configuration,
    validate_extract_payload,
)
from menu_extract.errors import AlreadyProcessing, Cancelled, MenuExtractionError, NoDishesFound
from menu_extract.ocr_pipeline import MenuParsingPipeline

log = logging.getLogger(__name__)

bp = Blueprint("menu_api", __name__, url_prefix="/api/menu")

ALLOWED_IMAGE_EXTS = {"jpg", "jpeg", "png", "tif", "tiff", "bmp", "webp"}


def _pipeline() -> MenuParsingPipeline:
    return current_app.extensions["menu_pipeline"]


def _base_configuration() -> ParsingConfiguration:
    return current_app.config["MENU_PARSING_CONFIGURATION"]


def _error(message: str, status: int, **extra: Any):
    return jsonify({"ok": False, "error": message, **extra}), status


def _extraction_error_response(e: MenuExtractionError):
    if isinstance(e, AlreadyProcessing):
        return _error(str(e), 409, code=e.code)
    if isinstance(e, Cancelled):
        return _error(str(e), 409, code=e.code, cancelled=True)
    if isinstance(e, NoDishesFound):
        return _error(str(e), 422, code=e.code)
    return _error(str(e), 500, code=e.code)


def _layout_to_dict(analysis) -> Dict[str, Any]:
    return {
        "detected_columns": analysis.detected_columns,
        "average_line_spacing": round(analysis.average_line_spacing, 4),
        "text_alignment": analysis.text_alignment.value,
        "sections": [r.name for r in analysis.regions],
        # same shape /extract accepts as layout_regions
        "regions": [
            {
                "name": r.name,
                "bounding_box": rect_to_json(r.bounding_box),
                "member_ids": list(r.member_ids),
                "member_texts": list(r.member_texts),
            }
            for r in analysis.regions
        ],
    }


@bp.route("/extract", methods=["POST"])
def extract_menu():
    payload = request.get_json(silent=True)
    if payload is None:
        return _error("Expected JSON payload", 400)

    ok, err = validate_extract_payload(payload)
    if not ok:
        return _error(err, 400)

    fragments, regions, configuration, ocr_confidence = decode_extract_request(
        payload, base=_base_configuration()
    )
    try:
        menu = _pipeline().parse_menu(
            fragments,
            layout_regions=regions or None,
            configuration=configuration,
            ocr_confidence=ocr_confidence,
        )
    except MenuExtractionError as e:
        return _extraction_error_response(e)

    return jsonify({"ok": True, "menu": menu_to_dict(menu)})


def _image_form_configuration() -> Tuple[Optional[ParsingConfiguration], str]:
    raw = request.form.get("configuration")
    if not raw:
        return _base_configuration(), ""
    try:
        parsed = json.loads(raw)
    except ValueError:
        return None, "configuration must be valid JSON"
    ok, err = validate_configuration(parsed)
    if not ok:
        return None, err
    return decode_configuration(parsed, base=_base_configuration()), ""


@bp.route("/extract/image", methods=["POST"])
def extract_menu_from_image():
    try:
        file = request.files.get("file")
    except RequestEntityTooLarge:
        return _error("File too large. Try a smaller image or raise MAX_CONTENT_LENGTH.", 413)

    if file is None:
        return _error("No file field 'file' provided", 400)
    if not file.filename:
        return _error("Empty filename", 400)
    ext = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
    if ext not in ALLOWED_IMAGE_EXTS:
        return _error("Unsupported file type. Allowed: " + ", ".join(sorted(ALLOWED_IMAGE_EXTS)), 400)

    configuration, err = _image_form_configuration()
    if configuration is None:
        return _error(err, 400)
    use_layout_regions = request.form.get("use_layout_regions", "0") == "1"

    try:
        image = Image.open(file.stream)
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        return _error(f"Unreadable image: {e}", 400)

    try:
        menu, analysis = ocr_facade.extract_menu_from_image(
            image,
            configuration=configuration,
            pipeline=_pipeline(),
            use_layout_regions=use_layout_regions,
        )
    except MenuExtractionError as e:
        return _extraction_error_response(e)

    return jsonify({"ok": True, "menu": menu_to_dict(menu), "layout": _layout_to_dict(analysis)})


@bp.route("/cancel", methods=["POST"])
def cancel_extraction():
    cancelled = _pipeline().cancel()
    return jsonify({"ok": True, "cancelled": cancelled})


@bp.route("/status", methods=["GET"])
def extraction_status():
    pipeline = _pipeline()
    return jsonify({
        "ok": True,
        "stage": pipeline.stage.value,
        "progress": pipeline.progress,
        "is_processing": pipeline.is_processing,
    })
