"""Tests for asset catalogs, the compositor, and the decision log."""

from __future__ import annotations

import cv2
import numpy as np
import pytest

from ad_overlay.processing.catalog import AssetLoadError, DirectoryCatalog, StaticCatalog
from ad_overlay.processing.compositor import apply_transparency, compose
from ad_overlay.recording.models import (
    AdDirective,
    AdvertisementAsset,
    DecisionRecord,
    PlacementResult,
    PresentationProfile,
    RenderCommand,
)


def make_command(image: np.ndarray, x: int, y: int,
                 transparency: float = 0.0) -> RenderCommand:
    h, w = image.shape[:2]
    directive = AdDirective(
        asset=AdvertisementAsset("ad", "sports", w, h),
        profile=PresentationProfile(transparency=transparency),
        image=image,
    )
    return RenderCommand("sports", directive, PlacementResult(x, y))


class TestStaticCatalog:
    def test_lookup_keeps_declared_order(self, sports_catalog):
        assert sports_catalog.lookup("sports") == ["sports_a", "sports_b", "sports_c"]
        assert sports_catalog.lookup("weather") == []

    def test_load_renders_sized_tile(self, sports_catalog):
        image = sports_catalog.load("ent_a")
        assert image.shape == (100, 200, 4)
        assert image.dtype == np.uint8

    def test_unknown_asset_raises(self, sports_catalog):
        with pytest.raises(AssetLoadError):
            sports_catalog.load("missing")

    def test_zero_size_asset_raises(self):
        catalog = StaticCatalog({"sports": [{"id": "empty", "width": 0, "height": 0}]})
        with pytest.raises(AssetLoadError):
            catalog.load("empty")


class TestDirectoryCatalog:
    def test_scans_category_dirs(self, tmp_path):
        (tmp_path / "sports").mkdir()
        (tmp_path / "music").mkdir()
        cv2.imwrite(str(tmp_path / "sports" / "b.png"), np.zeros((40, 80, 3), np.uint8))
        cv2.imwrite(str(tmp_path / "sports" / "a.png"), np.zeros((50, 60, 3), np.uint8))
        (tmp_path / "sports" / "notes.txt").write_text("ignored")

        catalog = DirectoryCatalog(tmp_path)
        assert catalog.lookup("sports") == ["sports/a", "sports/b"]
        assert catalog.lookup("music") == []
        assert catalog.load("sports/a").shape == (50, 60, 4)

    def test_corrupt_file_raises(self, tmp_path):
        (tmp_path / "sports").mkdir()
        (tmp_path / "sports" / "bad.png").write_bytes(b"not an image")
        catalog = DirectoryCatalog(tmp_path)
        with pytest.raises(AssetLoadError):
            catalog.load("sports/bad")

    def test_missing_root_is_empty(self, tmp_path):
        catalog = DirectoryCatalog(tmp_path / "absent")
        assert catalog.lookup("sports") == []


class TestCompositor:
    def test_transparency_sets_alpha(self):
        image = np.full((4, 4, 3), 200, dtype=np.uint8)
        out = apply_transparency(image, 0.2)
        assert out.shape == (4, 4, 4)
        assert int(out[0, 0, 3]) == 204
        assert int(apply_transparency(image, 1.0)[0, 0, 3]) == 0

    def test_opaque_ad_replaces_pixels(self):
        frame = np.zeros((100, 100, 3), dtype=np.uint8)
        ad = np.full((10, 20, 4), 255, dtype=np.uint8)
        out = compose(frame, make_command(ad, 5, 5))
        assert out[5:15, 5:25].min() == 255
        assert out[0:5].max() == 0
        assert frame.max() == 0

    def test_offscreen_part_is_clipped(self):
        frame = np.zeros((50, 50, 3), dtype=np.uint8)
        ad = np.full((30, 30, 4), 255, dtype=np.uint8)
        out = compose(frame, make_command(ad, 40, -10))
        assert out[0:20, 40:50].min() == 255
        assert out[20:, :].max() == 0


class TestDecisionLogger:
    def test_log_and_query(self, decision_logger):
        first = decision_logger.log_decision(DecisionRecord(
            timestamp=1.0, category="sports", asset_id="a", x=20, y=20))
        decision_logger.log_decision(DecisionRecord(
            timestamp=2.0, category="music", asset_id="b", placeholder=True,
            relocated=True, score=0.5))

        recent = decision_logger.get_recent(10)
        assert [r.asset_id for r in recent] == ["b", "a"]
        assert recent[0].placeholder and recent[0].relocated
        assert recent[1].decision_id == first

        stats = decision_logger.get_stats()
        assert stats == {"total": 2, "by_category": {"sports": 1, "music": 1}}
