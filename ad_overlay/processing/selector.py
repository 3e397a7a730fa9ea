"""Ad selection with anti-repetition over a bounded selection history."""

from __future__ import annotations

import logging
import random
import threading
from collections import deque

import numpy as np

from ad_overlay.config import SelectionConfig, build_profile
from ad_overlay.processing.catalog import AssetCatalog, AssetLoadError, CatalogError
from ad_overlay.recording.models import (
    AdDirective,
    AdvertisementAsset,
    PresentationProfile,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_COLOR = (128, 128, 128)


class SelectionHistory:
    """Fixed-capacity FIFO of recently selected asset ids, most recent last."""

    def __init__(self, capacity: int = 5):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._ids: deque[str] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._ids.maxlen

    def append(self, asset_id: str) -> None:
        self._ids.append(asset_id)

    def snapshot(self) -> list[str]:
        return list(self._ids)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)


def make_placeholder(width: int, height: int) -> np.ndarray:
    """Neutral opaque grey tile used when an asset bitmap is unavailable."""
    tile = np.zeros((height, width, 4), dtype=np.uint8)
    tile[:, :, :3] = PLACEHOLDER_COLOR
    tile[:, :, 3] = 255
    return tile


class AdSelector:
    """Picks an advertisement for a category, avoiding recent repeats."""

    def __init__(self, config: SelectionConfig, catalog: AssetCatalog,
                 history: SelectionHistory | None = None,
                 rng: random.Random | None = None):
        self._cfg = config
        self._catalog = catalog
        self._history = history if history is not None else SelectionHistory(config.history_size)
        self._rng = rng if rng is not None else random.Random(config.seed)
        self._lock = threading.Lock()

        self._profiles = {
            category: build_profile(data) for category, data in config.profiles.items()
        }
        self._default_profile = build_profile(config.default_profile)

    @property
    def history(self) -> list[str]:
        with self._lock:
            return self._history.snapshot()

    def profile_for(self, category: str) -> PresentationProfile:
        return self._profiles.get(category, self._default_profile)

    def select(self, category: str) -> AdDirective:
        """Choose an asset for ``category`` and pair it with its profile."""
        source = category
        candidates = self._catalog.lookup(source)
        if not candidates:
            logger.info("No ads for category %r, using default %r",
                        category, self._cfg.default_category)
            source = self._cfg.default_category
            candidates = self._catalog.lookup(source)
            if not candidates:
                raise CatalogError(
                    f"Catalog has no assets for default category {source!r}"
                )

        with self._lock:
            eligible = [c for c in candidates if c not in self._history]
            if eligible:
                asset_id = self._rng.choice(eligible)
            else:
                logger.info("All %d ads for %r shown recently, allowing repeats",
                            len(candidates), source)
                asset_id = self._rng.choice(candidates)
            self._history.append(asset_id)

        image, is_placeholder = self._load_image(asset_id)
        height, width = image.shape[:2]
        asset = AdvertisementAsset(id=asset_id, category=source,
                                   width=width, height=height)

        logger.debug("Selected %s (%dx%d) for %s", asset_id, width, height, category)
        return AdDirective(
            asset=asset,
            profile=self.profile_for(category),
            image=image,
            is_placeholder=is_placeholder,
        )

    def _load_image(self, asset_id: str) -> tuple[np.ndarray, bool]:
        try:
            return self._catalog.load(asset_id), False
        except AssetLoadError as e:
            logger.warning("Failed to load ad %s: %s; using placeholder", asset_id, e)
            return make_placeholder(self._cfg.placeholder_width,
                                    self._cfg.placeholder_height), True
