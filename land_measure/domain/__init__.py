"""Domain layer - pure business logic, zero external dependencies."""

from .entities.detection import Detection
from .entities.image import Image
from .entities.results import BoundaryResult, ManualMeasurement, VisualizationAssets
from .value_objects.config import AnalysisConfig, Backend, DetectorType
from .value_objects.geometry import Point, BoundingBox, GeoPoint

__all__ = [
    # Entities
    'Detection',
    'Image',
    'BoundaryResult',
    'ManualMeasurement',
    'VisualizationAssets',
    # Value Objects
    'AnalysisConfig',
    'Backend',
    'DetectorType',
    'Point',
    'BoundingBox',
    'GeoPoint',
]
