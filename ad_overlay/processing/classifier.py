"""Keyword classifier: maps a frame's detections to a content category."""

from __future__ import annotations

import logging
from typing import Sequence

from ad_overlay.config import ClassificationConfig
from ad_overlay.recording.models import Detection

logger = logging.getLogger(__name__)


class Classifier:
    """Scores each category by the confidence of detections matching its keywords."""

    def __init__(self, config: ClassificationConfig):
        self._cfg = config

    @property
    def categories(self) -> list[str]:
        """Supported categories in declared order."""
        return list(self._cfg.keywords.keys())

    @property
    def default_category(self) -> str:
        return self._cfg.default_category

    def classify(self, detections: Sequence[Detection]) -> str:
        """Return the category best supported by the detections.

        Falls back to the default category when nothing is detected or no
        label matches any keyword.
        """
        if len(detections) == 0:
            return self._cfg.default_category

        scores = self.score(detections)

        best_category = self._cfg.default_category
        best_score = 0.0
        for category, score in scores.items():
            logger.debug("Category %s scored %.3f", category, score)
            if score > best_score:
                best_score = score
                best_category = category

        logger.debug("Selected category %s (score %.3f)", best_category, best_score)
        return best_category

    def score(self, detections: Sequence[Detection]) -> dict[str, float]:
        """Accumulate per-category scores, one increment per detection and category."""
        scores = {category: 0.0 for category in self._cfg.keywords}

        for det in detections:
            if det.confidence < self._cfg.min_confidence:
                continue
            # An empty label is contained in every keyword and matches every category
            label = det.label.lower()

            for category, keywords in self._cfg.keywords.items():
                for keyword in keywords:
                    keyword = keyword.lower()
                    if keyword in label or label in keyword:
                        scores[category] += det.confidence
                        break

        return scores
