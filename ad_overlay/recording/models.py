"""Shared data models for the ad decision pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import numpy as np


class DetectionKind(str, Enum):
    OBJECT = "object"
    SCENE = "scene"
    TEXT = "text"
    FACE = "face"


class Corner(str, Enum):
    TOP_LEFT = "top_left"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_RIGHT = "bottom_right"
    CENTER = "center"


@dataclass(frozen=True)
class Rect:
    """Axis-aligned integer rectangle, right/bottom edges exclusive."""
    x1: int
    y1: int
    x2: int
    y2: int

    def __post_init__(self):
        if self.x2 <= self.x1 or self.y2 <= self.y1:
            raise ValueError(
                f"Degenerate rect ({self.x1}, {self.y1}, {self.x2}, {self.y2})"
            )

    @classmethod
    def from_xywh(cls, x: int, y: int, w: int, h: int) -> Rect:
        return cls(x, y, x + w, y + h)

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    @property
    def area(self) -> int:
        return self.width * self.height

    def intersection_area(self, other: Rect) -> int:
        """Area shared with another rect, 0 when they do not overlap."""
        w = min(self.x2, other.x2) - max(self.x1, other.x1)
        h = min(self.y2, other.y2) - max(self.y1, other.y1)
        if w <= 0 or h <= 0:
            return 0
        return w * h


@dataclass(frozen=True)
class Detection:
    """One labeled region or scene tag from the external recognizer."""
    kind: DetectionKind
    label: str
    confidence: float                       # 0.0-1.0
    bounding_box: Optional[Rect] = None     # None for scene-level tags
    labels: tuple[str, ...] = ()            # extra labels for the same region

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence out of range: {self.confidence}")

    @property
    def all_labels(self) -> tuple[str, ...]:
        return (self.label,) + tuple(self.labels)

    @classmethod
    def from_dict(cls, data: dict) -> Detection:
        """Build from ``{"kind", "label", "confidence", "box": [x1, y1, x2, y2], "labels"}``."""
        box = data.get("box")
        return cls(
            kind=DetectionKind(data.get("kind", DetectionKind.OBJECT.value)),
            label=str(data["label"]),
            confidence=float(data.get("confidence", 1.0)),
            bounding_box=Rect(*(int(v) for v in box)) if box else None,
            labels=tuple(str(v) for v in data.get("labels", ())),
        )


@dataclass(frozen=True)
class ScreenDimensions:
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid screen size {self.width}x{self.height}")


@dataclass(frozen=True)
class PresentationProfile:
    """Per-category presentation parameters."""
    preferred_corner: Corner = Corner.BOTTOM_RIGHT
    display_duration_ms: int = 15000
    transparency: float = 0.2

    def __post_init__(self):
        if self.display_duration_ms < 0:
            raise ValueError("display_duration_ms must not be negative")
        if not 0.0 <= self.transparency <= 1.0:
            raise ValueError(f"Transparency out of range: {self.transparency}")


@dataclass(frozen=True)
class AdvertisementAsset:
    id: str
    category: str
    width: int
    height: int


@dataclass(frozen=True)
class AdDirective:
    """Selector output: the chosen asset paired with its presentation profile."""
    asset: AdvertisementAsset
    profile: PresentationProfile
    image: Optional[np.ndarray] = field(default=None, repr=False, compare=False)
    is_placeholder: bool = False


@dataclass(frozen=True)
class PlacementResult:
    x: int
    y: int
    score: float = 0.0       # collision score of the chosen position
    relocated: bool = False  # moved away from the preferred corner


@dataclass(frozen=True)
class RenderCommand:
    """A directive merged with its placement, ready for the renderer."""
    category: str
    directive: AdDirective
    placement: PlacementResult

    def to_dict(self) -> dict[str, Any]:
        asset = self.directive.asset
        profile = self.directive.profile
        return {
            "category": self.category,
            "asset_id": asset.id,
            "width": asset.width,
            "height": asset.height,
            "placeholder": self.directive.is_placeholder,
            "x": self.placement.x,
            "y": self.placement.y,
            "score": round(self.placement.score, 4),
            "relocated": self.placement.relocated,
            "preferred_corner": profile.preferred_corner.value,
            "display_duration_ms": profile.display_duration_ms,
            "transparency": profile.transparency,
        }


@dataclass
class DecisionRecord:
    """A logged render decision."""
    decision_id: Optional[int] = None
    timestamp: float = 0.0
    category: str = ""
    asset_id: str = ""
    placeholder: bool = False
    x: int = 0
    y: int = 0
    score: float = 0.0
    relocated: bool = False
    detection_count: int = 0
