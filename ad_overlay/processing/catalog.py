"""Advertisement asset catalogs.

A catalog answers two questions for the selector:

- ``lookup(category)``: which asset ids may be shown for a category, in a
  stable order.
- ``load(asset_id)``: the asset's bitmap as an ``(H, W, 4)`` uint8 BGRA array.

Unknown categories return an empty list; bitmaps that cannot be produced raise
:class:`AssetLoadError`. Neither case is fatal for the pipeline: the selector
falls back to the default category and to a placeholder image respectively.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

import cv2
import numpy as np

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp", ".bmp")


class AssetLoadError(RuntimeError):
    """Raised when a catalog cannot produce pixel data for an asset."""


class CatalogError(RuntimeError):
    """Raised when the catalog has no candidates even for the default category."""


def to_bgra(image: np.ndarray) -> np.ndarray:
    """Normalize a grayscale, BGR or BGRA image to BGRA."""
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    return image


class AssetCatalog(ABC):
    """Abstract asset store consulted by the ad selector."""

    @abstractmethod
    def lookup(self, category: str) -> list[str]:
        """Return candidate asset ids for ``category`` (empty if unknown)."""
        ...

    @abstractmethod
    def load(self, asset_id: str) -> np.ndarray:
        """Return the asset bitmap, raising :class:`AssetLoadError` on failure."""
        ...


class StaticCatalog(AssetCatalog):
    """In-memory catalog built from the ``catalog.assets`` config table.

    Each entry is ``{"id": ..., "width": ..., "height": ...}`` and is rendered
    as a solid tile of that size. An ``"image"`` array can be given instead to
    serve real pixel data.
    """

    def __init__(self, assets: dict[str, list[dict]]):
        self._ids: dict[str, list[str]] = {}
        self._entries: dict[str, dict] = {}
        for category, entries in assets.items():
            self._ids[category] = []
            for entry in entries:
                asset_id = str(entry["id"])
                self._ids[category].append(asset_id)
                self._entries[asset_id] = entry

    def lookup(self, category: str) -> list[str]:
        return list(self._ids.get(category, []))

    def load(self, asset_id: str) -> np.ndarray:
        entry = self._entries.get(asset_id)
        if entry is None:
            raise AssetLoadError(f"Unknown asset: {asset_id}")

        image = entry.get("image")
        if image is not None:
            return to_bgra(np.asarray(image, dtype=np.uint8))

        width = int(entry.get("width", 0))
        height = int(entry.get("height", 0))
        if width <= 0 or height <= 0:
            raise AssetLoadError(f"Asset {asset_id} has no usable size")
        tile = np.zeros((height, width, 4), dtype=np.uint8)
        tile[:, :, :3] = entry.get("color", (64, 64, 64))
        tile[:, :, 3] = 255
        return tile


class DirectoryCatalog(AssetCatalog):
    """Catalog backed by a directory tree of ``<root>/<category>/<asset_id>.<ext>``.

    Categories and asset ids are listed in sorted order so lookups are stable
    across filesystems.
    """

    def __init__(self, root: str | Path):
        self._root = Path(root)
        self._paths: dict[str, Path] = {}
        self._ids: dict[str, list[str]] = {}
        self.refresh()

    def refresh(self) -> None:
        """Rescan the directory tree."""
        self._paths.clear()
        self._ids.clear()
        if not self._root.is_dir():
            logger.warning("Asset directory not found: %s", self._root)
            return

        for category_dir in sorted(p for p in self._root.iterdir() if p.is_dir()):
            ids = []
            for path in sorted(category_dir.iterdir()):
                if path.suffix.lower() not in IMAGE_EXTENSIONS:
                    continue
                asset_id = f"{category_dir.name}/{path.stem}"
                self._paths[asset_id] = path
                ids.append(asset_id)
            self._ids[category_dir.name] = ids

        logger.info("Asset catalog loaded: %d assets in %d categories",
                    len(self._paths), len(self._ids))

    def lookup(self, category: str) -> list[str]:
        return list(self._ids.get(category, []))

    def load(self, asset_id: str) -> np.ndarray:
        path = self._paths.get(asset_id)
        if path is None:
            raise AssetLoadError(f"Unknown asset: {asset_id}")

        image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if image is None:
            raise AssetLoadError(f"Could not decode {path}")
        return to_bgra(image)
