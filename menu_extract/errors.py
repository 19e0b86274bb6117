# menu_extract/errors.py
"""
Typed failures surfaced by the extraction pipeline.

Only these reach the caller; per-group / per-candidate problems inside a
stage drop that item and show up in the run stats instead.
"""

from __future__ import annotations


class MenuExtractionError(Exception):
    """Base class for pipeline failures."""

    code = "menu_extraction_error"


class AlreadyProcessing(MenuExtractionError):
    """A second extraction was requested while one is in flight."""

    code = "already_processing"

    def __init__(self, message: str = "an extraction is already running on this pipeline") -> None:
        super().__init__(message)


class NoDishesFound(MenuExtractionError):
    """Validation left zero dishes (or there was nothing to read)."""

    code = "no_dishes_found"

    def __init__(self, message: str = "no dishes found in the menu", candidates_seen: int = 0) -> None:
        super().__init__(message)
        self.candidates_seen = candidates_seen


class Cancelled(MenuExtractionError):
    """Cooperative cancellation honored at a stage boundary."""

    code = "cancelled"

    def __init__(self, stage: str = "", message: str = "") -> None:
        super().__init__(message or f"extraction cancelled before stage {stage or '?'}")
        self.stage = stage
