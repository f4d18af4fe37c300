"""Geolocation port - interface for position sources."""

from __future__ import annotations

from dataclasses import dataclass, field
import time
from typing import Callable, Hashable, Protocol, runtime_checkable

from ...exceptions import GeolocationError


@dataclass(frozen=True, slots=True)
class PositionSample:
    """A single position fix."""
    latitude: float
    longitude: float
    accuracy: float | None = None  # meters
    timestamp: float = field(default_factory=time.time)


SampleCallback = Callable[[PositionSample], None]
ErrorCallback = Callable[[GeolocationError], None]


@runtime_checkable
class GeolocationSource(Protocol):
    """Port for position sources with subscribe/unsubscribe semantics."""
    
    @property
    def is_supported(self) -> bool:
        """Whether the source can deliver positions at all."""
        ...
    
    def watch(self, on_sample: SampleCallback, on_error: ErrorCallback) -> Hashable:
        """Start delivering samples; returns a handle for clear_watch."""
        ...
    
    def clear_watch(self, handle: Hashable) -> None:
        """Stop delivering samples for handle."""
        ...
