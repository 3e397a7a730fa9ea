"""Pipeline orchestrator: detections → classify → select → place → render command."""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Any, Sequence

from ad_overlay.config import AppConfig, CatalogConfig
from ad_overlay.processing.catalog import AssetCatalog, DirectoryCatalog, StaticCatalog
from ad_overlay.processing.classifier import Classifier
from ad_overlay.processing.placement import PlacementPlanner
from ad_overlay.processing.screen import ScreenGeometry
from ad_overlay.processing.selector import AdSelector
from ad_overlay.recording.decision_logger import DecisionLogger
from ad_overlay.recording.models import (
    DecisionRecord,
    Detection,
    RenderCommand,
    ScreenDimensions,
)

logger = logging.getLogger(__name__)


def build_catalog(config: CatalogConfig) -> AssetCatalog:
    """Create the asset catalog named by ``config.backend``."""
    if config.backend == "directory":
        return DirectoryCatalog(config.asset_dir)
    if config.backend == "static":
        return StaticCatalog(config.assets)
    raise ValueError(f"Unknown catalog backend: {config.backend!r}")


class Pipeline:
    """Turns one frame snapshot's detections into a render command.

    The detections passed to :meth:`decide` are used for both classification
    and placement so the two always see the same frame.
    """

    def __init__(self, config: AppConfig, catalog: AssetCatalog | None = None,
                 decision_logger: DecisionLogger | None = None,
                 rng: random.Random | None = None):
        self._config = config
        self._catalog = catalog if catalog is not None else build_catalog(config.catalog)
        self._decision_logger = decision_logger

        # The classifier's default category is the selector's fallback too
        config.selection.default_category = config.classification.default_category

        # Components
        self._classifier = Classifier(config.classification)
        self._selector = AdSelector(config.selection, self._catalog, rng=rng)
        self._planner = PlacementPlanner(config.placement)
        self._screen = ScreenGeometry(config.screen)

        # Serializes decisions so history and screen reads stay consistent
        self._decide_lock = threading.Lock()

        # Stats
        self._decision_count = 0
        self._placeholder_count = 0
        self._relocated_count = 0

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def classifier(self) -> Classifier:
        return self._classifier

    @property
    def selector(self) -> AdSelector:
        return self._selector

    @property
    def planner(self) -> PlacementPlanner:
        return self._planner

    @property
    def screen(self) -> ScreenDimensions:
        return self._screen.dimensions

    @property
    def decision_logger(self) -> DecisionLogger | None:
        return self._decision_logger

    @property
    def stats(self) -> dict[str, Any]:
        with self._decide_lock:
            screen = self._screen.dimensions
            return {
                "decisions": self._decision_count,
                "placeholders": self._placeholder_count,
                "relocated": self._relocated_count,
                "screen": {"width": screen.width, "height": screen.height},
                "history": self._selector.history,
            }

    def update_screen(self, width: int, height: int) -> ScreenDimensions:
        """Screen geometry notifier hook (rotation/resize)."""
        return self._screen.update(width, height)

    def update_placement_config(self, **kwargs: Any) -> None:
        """Update placement parameters at runtime (the planner references the config)."""
        for key, value in kwargs.items():
            if hasattr(self._config.placement, key):
                setattr(self._config.placement, key, value)
        logger.info("Placement config updated: %s", kwargs)

    def decide(self, detections: Sequence[Detection]) -> RenderCommand:
        """Run the full decision for one frame snapshot."""
        with self._decide_lock:
            category = self._classifier.classify(detections)
            directive = self._selector.select(category)
            placement = self._planner.place(
                directive.asset.width,
                directive.asset.height,
                directive.profile.preferred_corner,
                self._screen.dimensions,
                detections,
            )

            self._decision_count += 1
            if directive.is_placeholder:
                self._placeholder_count += 1
            if placement.relocated:
                self._relocated_count += 1

        command = RenderCommand(category=category, directive=directive,
                                placement=placement)
        logger.info("Decision: %s -> %s at (%d, %d)", category,
                    directive.asset.id, placement.x, placement.y)

        if self._decision_logger is not None:
            self._decision_logger.log_decision(DecisionRecord(
                timestamp=time.time(),
                category=category,
                asset_id=directive.asset.id,
                placeholder=directive.is_placeholder,
                x=placement.x,
                y=placement.y,
                score=placement.score,
                relocated=placement.relocated,
                detection_count=len(detections),
            ))

        return command

    def close(self) -> None:
        if self._decision_logger is not None:
            self._decision_logger.close()
