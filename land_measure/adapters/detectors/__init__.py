"""Object detector adapters."""

from .torchvision_adapter import TorchvisionDetector

__all__ = ['TorchvisionDetector']
