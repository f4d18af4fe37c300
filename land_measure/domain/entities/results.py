"""Measurement results."""

from __future__ import annotations

from dataclasses import dataclass

from ...config import SQUARE_METERS_PER_HECTARE
from ..value_objects.geometry import GeoPoint, Point
from .detection import Detection


def hectares_from_square_meters(square_meters: float) -> float:
    return square_meters / SQUARE_METERS_PER_HECTARE


@dataclass(frozen=True, slots=True)
class VisualizationAssets:
    """Rendered images, each a displayable data URI."""
    original: str
    detections: str
    boundary: str


@dataclass(frozen=True, slots=True)
class BoundaryResult:
    """Outcome of one image analysis.
    
    Created once per analysis and never modified; a new analysis produces
    a new result instead.
    """
    hull_points: tuple[Point, ...]
    area_pixels: float
    pixel_to_meter_scale: float
    detections: tuple[Detection, ...]
    visualization: VisualizationAssets
    image_size: tuple[int, int]
    
    def __post_init__(self) -> None:
        if self.area_pixels < 0:
            raise ValueError("area_pixels must be >= 0")
        if self.pixel_to_meter_scale <= 0:
            raise ValueError("pixel_to_meter_scale must be > 0")
    
    @property
    def area_square_meters(self) -> float:
        return self.area_pixels * self.pixel_to_meter_scale ** 2
    
    @property
    def area_hectares(self) -> float:
        return hectares_from_square_meters(self.area_square_meters)
    
    @property
    def used_fallback_boundary(self) -> bool:
        """True when no land object was found and the whole image was used."""
        return not self.detections
    
    def to_dict(self) -> dict:
        """Plain representation for JSON output (images omitted)."""
        return {
            "hull_points": [list(p.to_tuple()) for p in self.hull_points],
            "area_pixels": self.area_pixels,
            "area_square_meters": self.area_square_meters,
            "area_hectares": self.area_hectares,
            "pixel_to_meter_scale": self.pixel_to_meter_scale,
            "image_size": list(self.image_size),
            "detections": [
                {
                    "class": d.class_name,
                    "score": d.confidence_score,
                    "bbox": [
                        d.bounding_box.x,
                        d.bounding_box.y,
                        d.bounding_box.width,
                        d.bounding_box.height,
                    ],
                }
                for d in self.detections
            ],
        }


@dataclass(frozen=True, slots=True)
class ManualMeasurement:
    """Area of a polygon drawn on the map."""
    polygon: tuple[GeoPoint, ...]
    area_square_meters: float
    perimeter_meters: float = 0.0
    
    @property
    def area_hectares(self) -> float:
        return hectares_from_square_meters(self.area_square_meters)
    
    @property
    def vertex_count(self) -> int:
        """Distinct vertices (the closing point is not counted)."""
        return len(self.polygon) - 1
    
    def to_geojson(self) -> dict:
        """GeoJSON Feature with the closed ring and the computed area."""
        return {
            "type": "Feature",
            "geometry": {
                "type": "Polygon",
                "coordinates": [[list(p.to_tuple()) for p in self.polygon]],
            },
            "properties": {
                "area_hectares": self.area_hectares,
                "area_square_meters": self.area_square_meters,
                "perimeter_meters": self.perimeter_meters,
            },
        }
