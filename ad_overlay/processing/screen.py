"""Process-wide screen geometry, updated on rotation/resize notifications."""

from __future__ import annotations

import logging
import threading

from ad_overlay.config import ScreenConfig
from ad_overlay.recording.models import ScreenDimensions

logger = logging.getLogger(__name__)


class ScreenGeometry:
    """Thread-safe holder for the current screen dimensions."""

    def __init__(self, config: ScreenConfig):
        self._dims = ScreenDimensions(config.width, config.height)
        self._lock = threading.Lock()

    @property
    def dimensions(self) -> ScreenDimensions:
        with self._lock:
            return self._dims

    def update(self, width: int, height: int) -> ScreenDimensions:
        """Replace the current dimensions. Raises ValueError for non-positive sizes."""
        dims = ScreenDimensions(int(width), int(height))
        with self._lock:
            changed = dims != self._dims
            self._dims = dims
        if changed:
            logger.info("Screen dimensions updated: %dx%d", dims.width, dims.height)
        return dims
