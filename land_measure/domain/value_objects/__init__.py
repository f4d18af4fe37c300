"""Value objects - immutable data with validation."""

from .geometry import Point, BoundingBox, GeoPoint
from .config import AnalysisConfig, Backend, DetectorType

__all__ = [
    'Point',
    'BoundingBox',
    'GeoPoint',
    'AnalysisConfig',
    'Backend',
    'DetectorType',
]
