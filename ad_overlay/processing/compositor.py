"""Preview compositing: apply ad transparency and blend onto a BGR frame."""

from __future__ import annotations

import numpy as np

from ad_overlay.processing.catalog import to_bgra
from ad_overlay.recording.models import RenderCommand


def apply_transparency(image: np.ndarray, transparency: float) -> np.ndarray:
    """Return a BGRA copy whose alpha channel is set from ``transparency``.

    ``transparency`` 0.0 is fully opaque and 1.0 fully transparent. Every
    pixel gets the same alpha; existing alpha is replaced.
    """
    out = to_bgra(image)
    if out is image:
        out = image.copy()
    out[:, :, 3] = int(round((1.0 - transparency) * 255))
    return out


def compose(frame: np.ndarray, command: RenderCommand) -> np.ndarray:
    """Blend the command's ad onto a copy of ``frame`` at its placement.

    Parts of the ad that fall outside the frame are clipped.
    """
    result = frame.copy()
    image = command.directive.image
    if image is None:
        return result

    ad = apply_transparency(image, command.directive.profile.transparency)
    fh, fw = result.shape[:2]
    ah, aw = ad.shape[:2]
    x, y = command.placement.x, command.placement.y

    # Visible window in frame coordinates
    x1, y1 = max(x, 0), max(y, 0)
    x2, y2 = min(x + aw, fw), min(y + ah, fh)
    if x2 <= x1 or y2 <= y1:
        return result

    patch = ad[y1 - y:y2 - y, x1 - x:x2 - x]
    alpha = patch[:, :, 3:4].astype(np.float32) / 255.0
    region = result[y1:y2, x1:x2].astype(np.float32)
    blended = patch[:, :, :3].astype(np.float32) * alpha + region * (1.0 - alpha)
    result[y1:y2, x1:x2] = np.clip(blended, 0, 255).astype(np.uint8)
    return result
