"""Domain entities."""

from .detection import Detection
from .image import Image
from .results import (
    BoundaryResult,
    ManualMeasurement,
    VisualizationAssets,
    hectares_from_square_meters,
)

__all__ = [
    'Detection',
    'Image',
    'BoundaryResult',
    'ManualMeasurement',
    'VisualizationAssets',
    'hectares_from_square_meters',
]
