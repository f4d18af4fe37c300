"""Application layer - use cases and orchestration."""

from .services.boundary_pipeline import BoundaryAnalyzer, BoundaryPipeline
from .services.manual_measurement import MeasurementSession
from .services.location_tracking import LocationTracker

__all__ = ['BoundaryAnalyzer', 'BoundaryPipeline', 'MeasurementSession', 'LocationTracker']
