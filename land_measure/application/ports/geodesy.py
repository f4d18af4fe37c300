"""Geodesy port - interface for areas on the ellipsoid."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ...domain.value_objects.geometry import GeoPoint


@runtime_checkable
class GeodesicCalculator(Protocol):
    """Port for geodesic measurements on geographic coordinates."""
    
    def area_perimeter(self, ring: Sequence[GeoPoint]) -> tuple[float, float]:
        """Area (m²) and perimeter (m) of a closed ring of (lon, lat) points.
        
        The area is always non-negative regardless of winding.
        """
        ...
