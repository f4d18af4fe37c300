"""Manual polygon measurement from points picked on a map."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from ...domain.entities.results import ManualMeasurement
from ...domain.value_objects.geometry import GeoPoint
from ..ports.geodesy import GeodesicCalculator

logger = logging.getLogger(__name__)

MIN_POLYGON_POINTS = 3


def _as_geopoint(point: GeoPoint | Sequence[float]) -> GeoPoint:
    if isinstance(point, GeoPoint):
        return point
    lon, lat = point
    return GeoPoint(float(lon), float(lat))


def measure_polygon(
    points: Sequence[GeoPoint | Sequence[float]],
    calculator: GeodesicCalculator
) -> ManualMeasurement | None:
    """Close the ring and compute its geodesic area.
    
    Args:
        points: Vertices in (longitude, latitude) order, not closed
        calculator: Geodesic area implementation
    
    Returns:
        Measurement, or None when fewer than 3 points were given
    """
    if len(points) < MIN_POLYGON_POINTS:
        return None
    
    vertices = [_as_geopoint(p) for p in points]
    ring = tuple(vertices + [vertices[0]])
    area_m2, perimeter_m = calculator.area_perimeter(ring)
    
    measurement = ManualMeasurement(
        polygon=ring,
        area_square_meters=abs(area_m2),
        perimeter_meters=perimeter_m
    )
    logger.info(
        f"Measured {len(vertices)}-point polygon: "
        f"{measurement.area_hectares:.4f} ha"
    )
    return measurement


class MeasurementSession:
    """Click-to-add-vertex drawing session.
    
    Points are only accepted between ``start()`` and ``finish()`` or
    ``cancel()``; clicks outside drawing mode are ignored.
    """
    
    def __init__(self, calculator: GeodesicCalculator):
        self._calculator = calculator
        self._points: list[GeoPoint] = []
        self._drawing = False
        self._result: ManualMeasurement | None = None
        self._subscribers: list[Callable[[ManualMeasurement], None]] = []
    
    @property
    def is_drawing(self) -> bool:
        return self._drawing
    
    @property
    def points(self) -> tuple[GeoPoint, ...]:
        return tuple(self._points)
    
    @property
    def result(self) -> ManualMeasurement | None:
        """Last completed measurement."""
        return self._result
    
    @property
    def can_finish(self) -> bool:
        return self._drawing and len(self._points) >= MIN_POLYGON_POINTS
    
    def on_measure(self, callback: Callable[[ManualMeasurement], None]) -> None:
        """Register a callback for completed measurements."""
        self._subscribers.append(callback)
    
    def start(self) -> None:
        """Enter drawing mode with an empty polygon."""
        self._points = []
        self._result = None
        self._drawing = True
        logger.debug("Drawing started")
    
    def add_point(self, longitude: float, latitude: float) -> bool:
        """Add a vertex; returns False if not in drawing mode."""
        if not self._drawing:
            return False
        self._points.append(GeoPoint(longitude, latitude))
        return True
    
    def finish(self) -> ManualMeasurement | None:
        """Close the polygon and measure it.
        
        With fewer than 3 points this does nothing and returns None; the
        session stays in drawing mode.
        """
        if not self.can_finish:
            return None
        
        measurement = measure_polygon(self._points, self._calculator)
        self._result = measurement
        self._drawing = False
        
        for callback in self._subscribers:
            callback(measurement)
        return measurement
    
    def cancel(self) -> None:
        """Discard points and leave drawing mode."""
        self._points = []
        self._result = None
        self._drawing = False
        logger.debug("Drawing cancelled")
