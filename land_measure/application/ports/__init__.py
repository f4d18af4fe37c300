"""Ports - interfaces for external dependencies (Dependency Inversion)."""

from .object_detector import ObjectDetector
from .geodesy import GeodesicCalculator
from .geolocation import GeolocationSource, PositionSample
from .event_publisher import EventPublisher, PipelineEvent, SimpleEventPublisher

__all__ = [
    'ObjectDetector',
    'GeodesicCalculator',
    'GeolocationSource',
    'PositionSample',
    'EventPublisher',
    'PipelineEvent',
    'SimpleEventPublisher',
]
