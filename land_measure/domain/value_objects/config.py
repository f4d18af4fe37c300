"""Configuration value objects with validation."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from ...config import (
    Backend,
    DetectorType,
    LAND_OBJECT_CLASSES,
    DEFAULT_CONFIDENCE_THRESHOLD,
    FALLBACK_METERS_PER_PIXEL,
    MAX_IMAGE_DIMENSION,
    DEFAULT_JPEG_QUALITY,
)


class AnalysisConfig(BaseModel):
    """Image analysis configuration with validation."""
    
    model_config = {"frozen": True}
    
    # Detection filtering
    land_classes: tuple[str, ...] = LAND_OBJECT_CLASSES
    confidence_threshold: float = Field(default=DEFAULT_CONFIDENCE_THRESHOLD, ge=0.0, le=1.0)
    
    # Raster handling
    max_dimension: int = Field(default=MAX_IMAGE_DIMENSION, ge=32, le=8192)
    jpeg_quality: int = Field(default=DEFAULT_JPEG_QUALITY, ge=1, le=100)
    
    # Scale used when no known object can be measured
    fallback_scale: float = Field(default=FALLBACK_METERS_PER_PIXEL, gt=0.0)
    
    # Detector plugin name, see PluginRegistry.list_available_detectors()
    detector: str = DetectorType.SSDLITE.value
    device: Backend = Backend.AUTO
    
    @field_validator('land_classes')
    @classmethod
    def normalize_classes(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Store class names lower-cased so lookups are case-insensitive."""
        normalized = tuple(name.strip().lower() for name in v if name.strip())
        if not normalized:
            raise ValueError("land_classes must contain at least one class name")
        return normalized


__all__ = [
    'AnalysisConfig',
    'Backend',
    'DetectorType',
]
