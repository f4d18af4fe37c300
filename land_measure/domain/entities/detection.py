"""Detected object entity."""

from __future__ import annotations

from dataclasses import dataclass

from ..value_objects.geometry import BoundingBox, Point


@dataclass(frozen=True, slots=True)
class Detection:
    """A single object reported by a detector."""
    class_name: str
    confidence_score: float
    bounding_box: BoundingBox
    
    @property
    def label(self) -> str:
        """Lower-cased class name used for matching."""
        return self.class_name.lower()
    
    @property
    def corners(self) -> tuple[Point, Point, Point, Point]:
        return self.bounding_box.corners
    
    @property
    def caption(self) -> str:
        """Overlay caption, e.g. 'fence (87.5%)'."""
        return f"{self.class_name} ({self.confidence_score * 100:.1f}%)"
    
    @classmethod
    def from_xywh(
        cls,
        class_name: str,
        confidence_score: float,
        x: float,
        y: float,
        width: float,
        height: float
    ) -> Detection:
        """Create from a detector's [x, y, width, height] box."""
        return cls(
            class_name=class_name,
            confidence_score=float(confidence_score),
            bounding_box=BoundingBox(x, y, width, height)
        )
