"""Land Measure - parcel area estimation from photos and map polygons."""

__version__ = "1.0.0"

from .config import Backend, DetectorType
from .domain.value_objects.config import AnalysisConfig
from .exceptions import (
    LandMeasureError,
    ConfigurationError,
    ModelLoadError,
    FileReadError,
    DetectionError,
    GeolocationError,
    GeolocationUnavailableError,
    GeolocationDeniedError,
    PipelineError,
    PipelineCancelledError,
)
from .utils.env import setup_logging

__all__ = [
    '__version__',
    'Backend',
    'DetectorType',
    'AnalysisConfig',
    'setup_logging',
    # Exceptions
    'LandMeasureError',
    'ConfigurationError',
    'ModelLoadError',
    'FileReadError',
    'DetectionError',
    'GeolocationError',
    'GeolocationUnavailableError',
    'GeolocationDeniedError',
    'PipelineError',
    'PipelineCancelledError',
]
