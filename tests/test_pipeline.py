"""Tests for the decision pipeline and screen geometry."""

from __future__ import annotations

import random
import threading

import pytest

from ad_overlay.config import AppConfig, ClassificationConfig, ScreenConfig
from ad_overlay.pipeline import Pipeline
from ad_overlay.processing.screen import ScreenGeometry
from ad_overlay.recording.models import Detection, DetectionKind, Rect


class TestPipeline:
    def test_empty_frame_uses_defaults(self, pipeline):
        """No detections: default category, its ad, and its preferred corner."""
        command = pipeline.decide([])
        assert command.category == "entertainment"
        assert command.directive.asset.id == "ad_entertainment"
        assert (command.placement.x, command.placement.y) == (960, 20)

    def test_sports_frame_avoids_player(self, pipeline):
        """The same detections drive classification and placement."""
        dets = [
            Detection(DetectionKind.SCENE, "stadium", 0.88),
            Detection(DetectionKind.OBJECT, "ball", 0.95, Rect(400, 200, 500, 250)),
            # Player standing in the bottom-right ad slot
            Detection(DetectionKind.OBJECT, "player", 0.82, Rect(980, 560, 1180, 700),
                      labels=("person",)),
        ]
        command = pipeline.decide(dets)

        assert command.category == "sports"
        assert command.directive.profile.preferred_corner.value == "bottom_right"
        assert command.placement.relocated
        assert (command.placement.x, command.placement.y) == (20, 20)

    def test_decisions_are_logged(self, pipeline):
        pipeline.decide([])
        pipeline.decide([Detection(DetectionKind.OBJECT, "chef", 0.9)])

        records = pipeline.decision_logger.get_recent(10)
        assert [r.category for r in records] == ["cooking", "entertainment"]
        assert records[0].detection_count == 1
        assert pipeline.stats["decisions"] == 2

    def test_screen_update_changes_placement(self, pipeline):
        """Rotation notifications move the corner anchors."""
        pipeline.update_screen(720, 1280)
        command = pipeline.decide([])
        assert (command.placement.x, command.placement.y) == (400, 20)

    def test_invalid_screen_update_rejected(self, pipeline):
        with pytest.raises(ValueError):
            pipeline.update_screen(0, 720)
        assert pipeline.screen.width == 1280

    def test_history_stays_bounded_under_concurrency(self, pipeline):
        """Concurrent decisions never grow the history past its capacity."""
        def worker():
            for _ in range(20):
                pipeline.decide([Detection(DetectionKind.OBJECT, "ball", 0.9)])

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert pipeline.stats["decisions"] == 80
        assert len(pipeline.selector.history) == 5

    def test_stats_wait_for_in_flight_decision(self, pipeline):
        """Stats are read under the decision lock, never mid-update."""
        snapshots = []
        reader = threading.Thread(target=lambda: snapshots.append(pipeline.stats))

        with pipeline._decide_lock:
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()

        reader.join(timeout=5.0)
        assert not reader.is_alive()
        assert snapshots[0]["decisions"] == 0

    def test_selector_falls_back_to_classifier_default(self):
        """One default category drives both classification and ad fallback."""
        config = AppConfig(classification=ClassificationConfig(default_category="music"))
        pipeline = Pipeline(config, rng=random.Random(1))

        assert config.selection.default_category == "music"
        assert pipeline.decide([]).category == "music"
        directive = pipeline.selector.select("knitting")
        assert directive.asset.id == "ad_music"


class TestScreenGeometry:
    def test_update_replaces_dimensions(self):
        geometry = ScreenGeometry(ScreenConfig(width=1280, height=720))
        dims = geometry.update(1920, 1080)
        assert geometry.dimensions == dims
        assert (dims.width, dims.height) == (1920, 1080)
