"""Application services - orchestrate use cases."""

from .boundary_pipeline import (
    BoundaryAnalyzer,
    BoundaryPipeline,
    CancellationToken,
    PipelineState,
    PipelineStatus,
)
from .manual_measurement import MeasurementSession, measure_polygon
from .location_tracking import LocationTracker, LocationWatch

__all__ = [
    'BoundaryAnalyzer',
    'BoundaryPipeline',
    'CancellationToken',
    'PipelineState',
    'PipelineStatus',
    'MeasurementSession',
    'measure_polygon',
    'LocationTracker',
    'LocationWatch',
]
