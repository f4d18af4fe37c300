"""Geolocation source adapters."""

from .replay_source import ReplayGeolocationSource

__all__ = ['ReplayGeolocationSource']
