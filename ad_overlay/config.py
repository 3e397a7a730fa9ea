"""YAML configuration loader with dataclass mapping."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from ad_overlay.recording.models import Corner, PresentationProfile


def _default_keywords() -> dict[str, list[str]]:
    return {
        "sports": [
            "ball", "player", "field", "stadium", "game", "match", "team",
            "soccer", "football", "basketball", "tennis", "baseball", "sport",
            "athlete", "competition", "race", "win", "lose", "score", "goal",
        ],
        "entertainment": [
            "movie", "film", "actor", "actress", "drama", "comedy", "show",
            "theater", "cinema", "series", "television", "tv", "stream",
            "episode", "scene", "performance", "stage", "audience", "applause",
        ],
        "cooking": [
            "food", "kitchen", "chef", "recipe", "meal", "dish", "cook",
            "bake", "ingredient", "spice", "taste", "flavor", "cuisine",
            "restaurant", "dinner", "lunch", "breakfast", "vegetable", "meat",
        ],
        "music": [
            "instrument", "concert", "musician", "band", "song", "singer",
            "vocalist", "melody", "rhythm", "beat", "lyrics", "guitar",
            "piano", "drum", "performance", "stage", "album", "record", "note",
        ],
    }


def _default_assets() -> dict[str, list[dict]]:
    return {
        "sports": [{"id": "ad_sports", "width": 300, "height": 150}],
        "entertainment": [{"id": "ad_entertainment", "width": 300, "height": 150}],
        "cooking": [{"id": "ad_cooking", "width": 300, "height": 150}],
        "music": [{"id": "ad_music", "width": 300, "height": 150}],
    }


def _default_profiles() -> dict[str, dict]:
    return {
        "sports": {"preferred_corner": "bottom_right",
                   "display_duration_ms": 15000, "transparency": 0.15},
        "entertainment": {"preferred_corner": "top_right",
                          "display_duration_ms": 20000, "transparency": 0.2},
        "cooking": {"preferred_corner": "bottom_left",
                    "display_duration_ms": 25000, "transparency": 0.25},
        "music": {"preferred_corner": "top_left",
                  "display_duration_ms": 18000, "transparency": 0.15},
    }


def _default_importance() -> dict[str, float]:
    return {
        "face": 3.0,
        "person": 2.5,
        "text": 2.0,
        "logo": 1.5,
        "product": 1.2,
    }


@dataclass
class ClassificationConfig:
    # Mapping order is the tie-break order
    keywords: dict[str, list[str]] = field(default_factory=_default_keywords)
    default_category: str = "entertainment"
    min_confidence: float = 0.0


@dataclass
class CatalogConfig:
    # "static" serves the assets table, "directory" reads bitmaps from asset_dir
    backend: str = "static"
    asset_dir: str = "data/ads"
    assets: dict[str, list[dict]] = field(default_factory=_default_assets)


@dataclass
class SelectionConfig:
    # Pipeline replaces this with classification.default_category
    default_category: str = "entertainment"
    history_size: int = 5
    placeholder_width: int = 300
    placeholder_height: int = 150
    profiles: dict[str, dict] = field(default_factory=_default_profiles)
    default_profile: dict = field(default_factory=lambda: {
        "preferred_corner": "bottom_right",
        "display_duration_ms": 15000,
        "transparency": 0.2,
    })
    seed: int | None = None


@dataclass
class PlacementConfig:
    margin: int = 20
    collision_threshold: float = 0.3   # fraction of the detection's own area
    default_importance: float = 1.0
    importance: dict[str, float] = field(default_factory=_default_importance)


@dataclass
class ScreenConfig:
    width: int = 1280
    height: int = 720


@dataclass
class RecordingConfig:
    db_path: str = "data/db/decisions.db"
    log_dir: str = "data/logs"


@dataclass
class WebConfig:
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class AppConfig:
    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    placement: PlacementConfig = field(default_factory=PlacementConfig)
    screen: ScreenConfig = field(default_factory=ScreenConfig)
    recording: RecordingConfig = field(default_factory=RecordingConfig)
    web: WebConfig = field(default_factory=WebConfig)


def build_profile(data: dict) -> PresentationProfile:
    """Turn a profile mapping from the config into a PresentationProfile."""
    return PresentationProfile(
        preferred_corner=Corner(data.get("preferred_corner", Corner.BOTTOM_RIGHT.value)),
        display_duration_ms=int(data.get("display_duration_ms", 15000)),
        transparency=float(data.get("transparency", 0.2)),
    )


def _apply_dict(dc: object, data: dict) -> None:
    """Apply dictionary values onto a dataclass instance, ignoring unknown keys."""
    for key, value in data.items():
        if hasattr(dc, key):
            setattr(dc, key, value)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load configuration from a YAML file, falling back to defaults."""
    config = AppConfig()

    if path is None:
        path = os.environ.get("AD_OVERLAY_CONFIG", "config/default.yaml")

    path = Path(path)
    if path.exists():
        with open(path, "r") as f:
            raw = yaml.safe_load(f) or {}

        section_map = {
            "classification": config.classification,
            "catalog": config.catalog,
            "selection": config.selection,
            "placement": config.placement,
            "screen": config.screen,
            "recording": config.recording,
            "web": config.web,
        }

        for section_name, dc_instance in section_map.items():
            if section_name in raw and isinstance(raw[section_name], dict):
                _apply_dict(dc_instance, raw[section_name])

    # Environment variable overrides
    env_width = os.environ.get("SCREEN_WIDTH")
    if env_width:
        config.screen.width = int(env_width)

    env_height = os.environ.get("SCREEN_HEIGHT")
    if env_height:
        config.screen.height = int(env_height)

    env_host = os.environ.get("WEB_HOST")
    if env_host:
        config.web.host = env_host

    env_port = os.environ.get("WEB_PORT")
    if env_port:
        config.web.port = int(env_port)

    return config
