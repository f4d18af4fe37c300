"""Custom exceptions for Land Measure."""

from typing import Optional


class LandMeasureError(Exception):
    """Base exception for all application errors.
    
    Attributes:
        message: Human-readable error description
        error_code: Optional error code for programmatic handling
    """
    
    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
    
    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ConfigurationError(LandMeasureError):
    """Error in configuration or settings.
    
    Attributes:
        config_key: The configuration key that caused the error (if applicable)
    """
    
    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, error_code="CONFIG_ERROR")
        self.config_key = config_key


class ModelLoadError(LandMeasureError):
    """Error loading the object detection model.
    
    Attributes:
        model_id: The model that failed to load (if applicable)
    """
    
    def __init__(self, message: str, model_id: Optional[str] = None):
        super().__init__(message, error_code="MODEL_LOAD_ERROR")
        self.model_id = model_id


class FileReadError(LandMeasureError):
    """Error reading or decoding an uploaded image.
    
    Attributes:
        source: Description of the image source (path or "<bytes>")
    """
    
    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message, error_code="FILE_READ_ERROR")
        self.source = source
    
    def __str__(self) -> str:
        if self.source:
            return f"{super().__str__()} (source: {self.source})"
        return super().__str__()


class DetectionError(LandMeasureError):
    """Error raised by the object detector during inference."""
    
    def __init__(self, message: str, detector: Optional[str] = None):
        super().__init__(message, error_code="DETECTION_ERROR")
        self.detector = detector


class GeolocationError(LandMeasureError):
    """Base class for location source failures."""
    
    def __init__(self, message: str, error_code: str = "GEOLOCATION_ERROR"):
        super().__init__(message, error_code=error_code)


class GeolocationUnavailableError(GeolocationError):
    """Location source is missing or cannot deliver a position."""
    
    def __init__(self, message: str = "Geolocation is not supported by this source"):
        super().__init__(message, error_code="GEOLOCATION_UNAVAILABLE")


class GeolocationDeniedError(GeolocationError):
    """Access to the location source was refused."""
    
    def __init__(self, message: str = "Permission to read location was denied"):
        super().__init__(message, error_code="GEOLOCATION_DENIED")


class PipelineError(LandMeasureError):
    """Unexpected failure inside an analysis step.
    
    Attributes:
        stage: Name of the step that failed (if known)
    """
    
    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message, error_code="PIPELINE_ERROR")
        self.stage = stage


class PipelineCancelledError(LandMeasureError):
    """Analysis was superseded by a newer submission."""
    
    def __init__(self, message: str = "Analysis cancelled", stage: Optional[str] = None):
        super().__init__(message, error_code="CANCELLED")
        self.stage = stage
