"""Collision-aware ad placement on screen.

The planner starts from the category's preferred corner. It only moves the ad
when the preferred rectangle covers more than ``collision_threshold`` of some
detection's own box, measured against the detection so small objects that are
fully covered still count. Alternatives are the four corners and the bottom
center, scored by covered fraction times label importance.
"""

from __future__ import annotations

import logging
from typing import Sequence

from ad_overlay.config import PlacementConfig
from ad_overlay.recording.models import (
    Corner,
    Detection,
    PlacementResult,
    Rect,
    ScreenDimensions,
)

logger = logging.getLogger(__name__)


class PlacementPlanner:
    """Computes the top-left coordinate for an ad of a given size."""

    def __init__(self, config: PlacementConfig):
        self._cfg = config

    def place(self, ad_width: int, ad_height: int, preferred_corner: Corner,
              screen: ScreenDimensions,
              detections: Sequence[Detection]) -> PlacementResult:
        """Return the position that keeps the ad off important content."""
        px, py = self.anchor(preferred_corner, ad_width, ad_height, screen)

        # A zero-area ad cannot occlude anything
        if ad_width <= 0 or ad_height <= 0:
            return PlacementResult(px, py)

        boxed = [d for d in detections if d.bounding_box is not None]
        if not boxed:
            return PlacementResult(px, py)

        preferred = Rect.from_xywh(px, py, ad_width, ad_height)
        if not self._has_significant_collision(preferred, boxed):
            return PlacementResult(px, py)

        best: tuple[int, int] | None = None
        best_score = float("inf")
        for x, y in self.candidates(ad_width, ad_height, screen):
            rect = Rect.from_xywh(x, y, ad_width, ad_height)
            score = self.collision_score(rect, boxed)
            if score < best_score:
                best_score = score
                best = (x, y)

        logger.debug("Preferred %s at (%d, %d) collides, moved to %s (score %.3f)",
                     preferred_corner.value, px, py, best, best_score)
        return PlacementResult(best[0], best[1], score=best_score,
                               relocated=best != (px, py))

    def anchor(self, corner: Corner, ad_width: int, ad_height: int,
               screen: ScreenDimensions) -> tuple[int, int]:
        """Top-left coordinate for ``corner``, clamped to the margin box."""
        m = self._cfg.margin
        right = screen.width - ad_width - m
        bottom = screen.height - ad_height - m

        if corner == Corner.TOP_LEFT:
            x, y = m, m
        elif corner == Corner.TOP_RIGHT:
            x, y = right, m
        elif corner == Corner.BOTTOM_LEFT:
            x, y = m, bottom
        elif corner == Corner.BOTTOM_RIGHT:
            x, y = right, bottom
        else:
            x, y = (screen.width - ad_width) // 2, (screen.height - ad_height) // 2

        return self._clamp(x, y, ad_width, ad_height, screen)

    def candidates(self, ad_width: int, ad_height: int,
                   screen: ScreenDimensions) -> list[tuple[int, int]]:
        """Fallback positions in evaluation order: corners, then bottom center."""
        positions = [
            self.anchor(Corner.TOP_LEFT, ad_width, ad_height, screen),
            self.anchor(Corner.TOP_RIGHT, ad_width, ad_height, screen),
            self.anchor(Corner.BOTTOM_LEFT, ad_width, ad_height, screen),
            self.anchor(Corner.BOTTOM_RIGHT, ad_width, ad_height, screen),
        ]
        bottom_center = ((screen.width - ad_width) // 2,
                         screen.height - ad_height - self._cfg.margin)
        positions.append(self._clamp(*bottom_center, ad_width, ad_height, screen))
        return positions

    def collision_score(self, ad_rect: Rect, detections: Sequence[Detection]) -> float:
        """Sum of covered fraction times importance over intersecting detections."""
        score = 0.0
        for det in detections:
            box = det.bounding_box
            if box is None:
                continue
            overlap = ad_rect.intersection_area(box)
            if overlap == 0:
                continue
            score += (overlap / box.area) * self.importance(det)
        return score

    def importance(self, detection: Detection) -> float:
        """Highest importance weight among the detection's labels."""
        highest = self._cfg.default_importance
        for label in detection.all_labels:
            label = label.lower()
            for key, weight in self._cfg.importance.items():
                if key.lower() in label and weight > highest:
                    highest = weight
        return highest

    def _has_significant_collision(self, ad_rect: Rect,
                                   detections: Sequence[Detection]) -> bool:
        for det in detections:
            box = det.bounding_box
            overlap = ad_rect.intersection_area(box)
            if overlap > box.area * self._cfg.collision_threshold:
                return True
        return False

    def _clamp(self, x: int, y: int, ad_width: int, ad_height: int,
               screen: ScreenDimensions) -> tuple[int, int]:
        # Oversized ads land on the margin and run off the far edge
        m = self._cfg.margin
        x = max(m, min(x, screen.width - m - ad_width))
        y = max(m, min(y, screen.height - m - ad_height))
        return x, y
