"""Geodesic calculator adapters."""

from .pyproj_adapter import PyprojGeodesy

__all__ = ['PyprojGeodesy']
