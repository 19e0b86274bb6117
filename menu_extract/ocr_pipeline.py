# menu_extract/ocr_pipeline.py
"""
Menu Parsing Pipeline — OCR fragments in, structured Menu out.

Stages (strictly sequential per run):
  filter -> Grouping -> Extracting -> Pricing -> Categorizing -> Validating
  -> merge + restaurant info -> Completed

- One run at a time per pipeline instance; a second call while one is in
  flight raises AlreadyProcessing instead of queueing.
- All per-run state (stage, progress, cancel flag, stats) lives in a
  RunContext; separate pipeline instances share nothing.
- cancel() is honored at the next stage boundary only. A cancelled run raises
  Cancelled, returns the pipeline to IDLE and produces no Menu.
- Each stage is pure in-memory work; failures inside a stage drop the single
  group/candidate involved and are counted in Menu.stats.

Env flags (see config.configuration_from_env) are read by callers, not here.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from .category_infer import apply_inference_to_candidates
from .config import DEFAULT, ParsingConfiguration
from .cross_item import merge_similar_dishes
from .dish_builder import build_candidates
from .errors import AlreadyProcessing, Cancelled, NoDishesFound
from .layout.layout_segmenter import group_fragments
from .ocr_types import GroupType, LayoutRegion, Menu, TextFragment
from .ocr_utils import fragments_confidence
from .parsers.price_parser import extract_price_infos
from .price_association import associate_prices
from .restaurant_info import extract_restaurant_info
from .scoring.confidence import validate_candidates

log = logging.getLogger(__name__)


class PipelineStage(str, Enum):
    IDLE = "idle"
    GROUPING = "grouping"
    EXTRACTING = "extracting"
    PRICING = "pricing"
    CATEGORIZING = "categorizing"
    VALIDATING = "validating"
    COMPLETED = "completed"
    FAILED = "failed"


STAGE_PROGRESS: Dict[PipelineStage, float] = {
    PipelineStage.IDLE: 0.0,
    PipelineStage.GROUPING: 0.1,
    PipelineStage.EXTRACTING: 0.3,
    PipelineStage.PRICING: 0.5,
    PipelineStage.CATEGORIZING: 0.7,
    PipelineStage.VALIDATING: 0.9,
    PipelineStage.COMPLETED: 1.0,
}

ProgressCallback = Callable[[PipelineStage, float], None]


@dataclass
class RunContext:
    configuration: ParsingConfiguration
    cancel_event: threading.Event = field(default_factory=threading.Event)
    stage: PipelineStage = PipelineStage.IDLE
    progress: float = 0.0
    stats: Dict[str, int] = field(default_factory=dict)
    started_at: float = field(default_factory=time.perf_counter)

    def bump(self, key: str, amount: int = 1) -> None:
        self.stats[key] = self.stats.get(key, 0) + amount


class MenuParsingPipeline:
    def __init__(
        self,
        configuration: Optional[ParsingConfiguration] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        self.configuration = configuration or DEFAULT
        self.progress_callback = progress_callback
        self._lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._stage = PipelineStage.IDLE
        self._progress = 0.0
        self._run: Optional[RunContext] = None

    # ---- observable state (safe to read from other threads) ----

    @property
    def stage(self) -> PipelineStage:
        with self._state_lock:
            return self._stage

    @property
    def progress(self) -> float:
        with self._state_lock:
            return self._progress

    @property
    def is_processing(self) -> bool:
        return self._lock.locked()

    def cancel(self) -> bool:
        """Request cancellation of the in-flight run. False when idle."""
        with self._state_lock:
            run = self._run
        if run is None:
            return False
        run.cancel_event.set()
        log.info("menu extraction cancel requested (stage=%s)", run.stage.value)
        return True

    # ---- run ----

    def parse_menu(
        self,
        fragments: Sequence[TextFragment],
        layout_regions: Optional[Sequence[LayoutRegion]] = None,
        configuration: Optional[ParsingConfiguration] = None,
        ocr_confidence: Optional[float] = None,
    ) -> Menu:
        if not self._lock.acquire(blocking=False):
            raise AlreadyProcessing()

        ctx = RunContext(configuration=configuration or self.configuration)
        with self._state_lock:
            self._run = ctx
        try:
            menu = self._run_stages(ctx, list(fragments or []), layout_regions, ocr_confidence)
        except Cancelled:
            self._set_stage(ctx, PipelineStage.IDLE, notify=False)
            log.info("menu extraction cancelled")
            raise
        except NoDishesFound:
            self._set_stage(ctx, PipelineStage.FAILED, notify=False)
            log.info("menu extraction found no dishes (stats=%s)", ctx.stats)
            raise
        except Exception:
            self._set_stage(ctx, PipelineStage.FAILED, notify=False)
            log.exception("menu extraction failed")
            raise
        finally:
            with self._state_lock:
                self._run = None
            self._lock.release()

        return menu

    def _set_stage(self, ctx: RunContext, stage: PipelineStage, notify: bool = True) -> None:
        progress = STAGE_PROGRESS.get(stage, ctx.progress)
        ctx.stage = stage
        ctx.progress = progress
        with self._state_lock:
            self._stage = stage
            self._progress = progress
        if notify and self.progress_callback is not None:
            self.progress_callback(stage, progress)

    def _enter(self, ctx: RunContext, stage: PipelineStage) -> None:
        """Stage boundary: honor a pending cancel, then advance."""
        if ctx.cancel_event.is_set():
            raise Cancelled(stage=stage.value)
        log.debug("stage %s (t=%.1fms)", stage.value, (time.perf_counter() - ctx.started_at) * 1000.0)
        self._set_stage(ctx, stage)

    def _run_stages(
        self,
        ctx: RunContext,
        fragments: List[TextFragment],
        layout_regions: Optional[Sequence[LayoutRegion]],
        ocr_confidence: Optional[float],
    ) -> Menu:
        config = ctx.configuration
        ctx.stats["fragments_in"] = len(fragments)
        log.info("menu extraction start: %d fragments", len(fragments))

        if not fragments:
            raise NoDishesFound("no text fragments to parse")

        # Fragment filter
        floor = config.fragment_floor
        filtered = [f for f in fragments if f.confidence >= floor]
        ctx.stats["fragments_filtered_out"] = len(fragments) - len(filtered)

        self._enter(ctx, PipelineStage.GROUPING)
        groups = group_fragments(
            filtered,
            regions=layout_regions,
            use_layout=config.enable_layout_awareness,
        )
        ctx.stats["groups"] = len(groups)
        ctx.stats["dish_groups"] = sum(1 for g in groups if g.group_type == GroupType.DISH_ITEM)

        self._enter(ctx, PipelineStage.EXTRACTING)
        candidates, group_errors = build_candidates(groups)
        ctx.stats["candidates"] = len(candidates)
        ctx.stats["group_errors"] = group_errors

        self._enter(ctx, PipelineStage.PRICING)
        if config.enable_advanced_pricing:
            # prices are page-wide: low-confidence fragments still count
            prices = extract_price_infos(fragments)
            candidates, dropped = associate_prices(candidates, prices)
            ctx.stats["prices_detected"] = len(prices)
            ctx.stats["prices_attached"] = sum(1 for c in candidates if c.price is not None)
            ctx.stats["pricing_errors"] = dropped

        self._enter(ctx, PipelineStage.CATEGORIZING)
        if config.enable_category_detection or config.enable_dietary_analysis:
            candidates = apply_inference_to_candidates(
                candidates,
                enable_category=config.enable_category_detection,
                enable_dietary=config.enable_dietary_analysis,
            )

        self._enter(ctx, PipelineStage.VALIDATING)
        dishes = validate_candidates(candidates, minimum_confidence=config.minimum_dish_confidence)
        ctx.stats["validated"] = len(dishes)
        ctx.stats["rejected"] = len(candidates) - len(dishes)
        if not dishes:
            raise NoDishesFound(candidates_seen=len(candidates))

        if config.merge_similar_dishes:
            merged = merge_similar_dishes(dishes)
            ctx.stats["merged_away"] = len(dishes) - len(merged)
            dishes = merged

        info = extract_restaurant_info(fragments)
        if ocr_confidence is None:
            ocr_confidence = fragments_confidence(fragments)

        # last boundary: a cancel that landed during validation still wins
        self._enter(ctx, PipelineStage.COMPLETED)
        ctx.stats["dishes"] = len(dishes)

        log.info(
            "menu extraction done: %d dishes from %d candidates (%.1fms)",
            len(dishes),
            len(candidates),
            (time.perf_counter() - ctx.started_at) * 1000.0,
        )
        return Menu(
            dishes=tuple(dishes),
            restaurant_name=info.name,
            ocr_confidence=float(ocr_confidence),
            restaurant_info=info,
            stats=dict(ctx.stats),
        )


def parse_menu(
    fragments: Sequence[TextFragment],
    layout_regions: Optional[Sequence[LayoutRegion]] = None,
    configuration: Optional[ParsingConfiguration] = None,
    ocr_confidence: Optional[float] = None,
) -> Menu:
    """One-shot convenience wrapper around a fresh pipeline."""
    return MenuParsingPipeline(configuration).parse_menu(
        fragments,
        layout_regions=layout_regions,
        ocr_confidence=ocr_confidence,
    )
