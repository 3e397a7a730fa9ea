"""Shared test fixtures: config sections, catalogs, and a seeded pipeline."""

from __future__ import annotations

import random

import pytest

from ad_overlay.config import (
    AppConfig,
    ClassificationConfig,
    PlacementConfig,
    ScreenConfig,
    SelectionConfig,
)
from ad_overlay.pipeline import Pipeline
from ad_overlay.processing.catalog import StaticCatalog
from ad_overlay.recording.decision_logger import DecisionLogger
from ad_overlay.recording.models import ScreenDimensions


@pytest.fixture
def classification_config() -> ClassificationConfig:
    return ClassificationConfig()


@pytest.fixture
def selection_config() -> SelectionConfig:
    return SelectionConfig()


@pytest.fixture
def placement_config() -> PlacementConfig:
    return PlacementConfig(margin=20, collision_threshold=0.3)


@pytest.fixture
def screen() -> ScreenDimensions:
    return ScreenDimensions(1280, 720)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def sports_catalog() -> StaticCatalog:
    """Three sports ads plus one entertainment ad for default fallback."""
    return StaticCatalog({
        "sports": [
            {"id": "sports_a", "width": 300, "height": 150},
            {"id": "sports_b", "width": 300, "height": 150},
            {"id": "sports_c", "width": 300, "height": 150},
        ],
        "entertainment": [
            {"id": "ent_a", "width": 200, "height": 100},
        ],
    })


@pytest.fixture
def decision_logger(tmp_path) -> DecisionLogger:
    logger = DecisionLogger(str(tmp_path / "decisions.db"))
    yield logger
    logger.close()


@pytest.fixture
def pipeline(decision_logger) -> Pipeline:
    config = AppConfig(screen=ScreenConfig(width=1280, height=720))
    return Pipeline(config, decision_logger=decision_logger, rng=random.Random(7))
