# portal/app.py
from flask import Flask, jsonify

# --- Standard libs & typing ---
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from werkzeug.exceptions import RequestEntityTooLarge

from menu_extract.config import configuration_from_env
from menu_extract.ocr_pipeline import MenuParsingPipeline

# --- Paths ---
ROOT = Path(__file__).resolve().parents[1]

# --- Load .env if present (TESSERACT_CMD / MENU_* flags / LOG_LEVEL) ---
load_dotenv(ROOT / ".env")

log = logging.getLogger(__name__)


def _configure_logging() -> None:
    level_name = (os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _on_progress(stage, progress: float) -> None:
    log.debug("pipeline progress: %s %.1f", stage.value, progress)


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    _configure_logging()

    app = Flask(__name__)

    # --- Config ---
    app.config["MAX_CONTENT_LENGTH"] = int(os.getenv("MENU_MAX_UPLOAD_MB", "20")) * 1024 * 1024
    app.config["MENU_PARSING_CONFIGURATION"] = configuration_from_env()
    if config:
        app.config.update(config)

    # One pipeline per app: concurrent requests get 409, not a queue
    app.extensions["menu_pipeline"] = MenuParsingPipeline(
        app.config["MENU_PARSING_CONFIGURATION"],
        progress_callback=_on_progress,
    )

    from portal.menu_api import bp as menu_api_bp
    from portal.ocr_health import bp as ocr_health_bp
    app.register_blueprint(menu_api_bp)
    app.register_blueprint(ocr_health_bp)

    @app.errorhandler(RequestEntityTooLarge)
    def _too_large(_e):
        return jsonify({"ok": False, "error": "File too large. Try a smaller image or raise MAX_CONTENT_LENGTH."}), 413

    @app.errorhandler(404)
    def _not_found(_e):
        return jsonify({"ok": False, "error": "not found"}), 404

    @app.errorhandler(405)
    def _method_not_allowed(_e):
        return jsonify({"ok": False, "error": "method not allowed"}), 405

    log.info("menu extraction portal ready (config=%s)", app.config["MENU_PARSING_CONFIGURATION"])
    return app


if __name__ == "__main__":
    create_app().run(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "5000")),
        debug=os.getenv("FLASK_DEBUG", "0") == "1",
    )
