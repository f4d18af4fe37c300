"""Object Detector port - interface for object detection."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ...domain.entities.detection import Detection
from ...domain.entities.image import Image


@runtime_checkable
class ObjectDetector(Protocol):
    """Port for object detection models.
    
    Implementations: torchvision SSDLite, Faster R-CNN, etc.
    """
    
    @property
    def name(self) -> str:
        """Detector name."""
        ...
    
    @property
    def is_available(self) -> bool:
        """Check if detector dependencies are installed."""
        ...
    
    def load(self) -> None:
        """Load model into memory."""
        ...
    
    def unload(self) -> None:
        """Unload model and free memory."""
        ...
    
    def detect(self, image: Image) -> list[Detection]:
        """Detect objects in image.
        
        Args:
            image: Decoded RGB raster
        
        Returns:
            Every detection the model reports, in model order, with boxes
            in the pixel coordinates of ``image``
        """
        ...
