"""pyproj adapter - implements GeodesicCalculator port on the WGS84 ellipsoid."""

from __future__ import annotations

import logging
from typing import Sequence

from pyproj import Geod
from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon

from ...application.ports.geodesy import GeodesicCalculator
from ...config import ELLIPSOID
from ...domain.value_objects.geometry import GeoPoint

logger = logging.getLogger(__name__)


class PyprojGeodesy(GeodesicCalculator):
    """Geodesic measurements with pyproj.Geod and shapely geometries."""
    
    def __init__(self, ellps: str = ELLIPSOID):
        self._geod = Geod(ellps=ellps)
    
    @staticmethod
    def to_polygon(ring: Sequence[GeoPoint]) -> Polygon:
        """Shapely polygon in (lon, lat) order."""
        return Polygon([p.to_tuple() for p in ring])
    
    def area_perimeter(self, ring: Sequence[GeoPoint]) -> tuple[float, float]:
        """Geodesic area (m²) and perimeter (m) of a ring."""
        if len(ring) < 3:
            return 0.0, 0.0
        area, perimeter = self._geod.geometry_area_perimeter(self.to_polygon(ring))
        # Sign follows winding order, clockwise rings come back negative
        return abs(area), perimeter
    
    def distance_meters(self, a: GeoPoint, b: GeoPoint) -> float:
        """Geodesic distance between two points."""
        _, _, distance = self._geod.inv(a.longitude, a.latitude, b.longitude, b.latitude)
        return distance
    
    def centroid(self, ring: Sequence[GeoPoint]) -> GeoPoint:
        """Planar centroid of the ring in degrees."""
        c = self.to_polygon(ring).centroid
        return GeoPoint(c.x, c.y)
    
    def bounding_box(self, ring: Sequence[GeoPoint]) -> tuple[float, float, float, float]:
        """(min_lon, min_lat, max_lon, max_lat)."""
        return tuple(self.to_polygon(ring).bounds)
    
    def contains(self, ring: Sequence[GeoPoint], point: GeoPoint) -> bool:
        """Point-in-polygon test."""
        return self.to_polygon(ring).contains(ShapelyPoint(point.longitude, point.latitude))
