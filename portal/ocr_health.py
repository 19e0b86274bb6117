from __future__ import annotations
from flask import Blueprint, jsonify

from menu_extract import ocr_facade

bp = Blueprint("ocr_health", __name__)

@bp.route("/api/health", methods=["GET"])
def ocr_health():
    return jsonify({"ok": True, **ocr_facade.health()})
