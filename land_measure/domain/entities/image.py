"""Image entity - abstraction over raster data."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class ImageData(Protocol):
    """Protocol for image data - allows different backends."""
    
    @property
    def width(self) -> int: ...
    
    @property
    def height(self) -> int: ...
    
    @property
    def mode(self) -> str: ...
    
    def convert(self, mode: str) -> ImageData: ...
    
    def resize(self, size: tuple[int, int], resample=None) -> ImageData: ...


@dataclass(frozen=True, slots=True)
class Image:
    """Domain entity representing a decoded raster.
    
    Wraps underlying image data without exposing implementation details.
    """
    _data: ImageData
    source: str | None = None
    
    @property
    def width(self) -> int:
        return self._data.width
    
    @property
    def height(self) -> int:
        return self._data.height
    
    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)
    
    @property
    def mode(self) -> str:
        return self._data.mode
    
    @property
    def data(self) -> ImageData:
        """Underlying image object, for adapters that need it."""
        return self._data
    
    @classmethod
    def from_array(cls, data: object, source: str | None = None) -> Image:
        """Create from numpy array (HxWx3, RGB)."""
        from PIL import Image as PILImage
        return cls(_data=PILImage.fromarray(data), source=source)
    
    def to_array(self) -> object:
        """Convert to numpy array."""
        import numpy as np
        return np.array(self._data)
