"""Geometry value objects."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Point:
    """2D point in pixel coordinates."""
    x: float
    y: float
    
    def to_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned box as reported by a detector: origin plus size."""
    x: float
    y: float
    width: float
    height: float
    
    @property
    def min_x(self) -> float:
        return self.x
    
    @property
    def min_y(self) -> float:
        return self.y
    
    @property
    def max_x(self) -> float:
        return self.x + self.width
    
    @property
    def max_y(self) -> float:
        return self.y + self.height
    
    @property
    def corners(self) -> tuple[Point, Point, Point, Point]:
        """Top-left, top-right, bottom-left, bottom-right."""
        return (
            Point(self.min_x, self.min_y),
            Point(self.max_x, self.min_y),
            Point(self.min_x, self.max_y),
            Point(self.max_x, self.max_y),
        )


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """Geographic position in degrees, GeoJSON axis order."""
    longitude: float
    latitude: float
    
    def __post_init__(self) -> None:
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
    
    def to_tuple(self) -> tuple[float, float]:
        return (self.longitude, self.latitude)
