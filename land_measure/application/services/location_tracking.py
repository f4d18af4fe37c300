"""Location tracking with an explicitly owned watch handle."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Hashable

from ...exceptions import GeolocationError, GeolocationUnavailableError
from ..ports.geolocation import GeolocationSource, PositionSample

logger = logging.getLogger(__name__)


class LocationWatch:
    """A live subscription to a location source.
    
    Released exactly once, by ``stop()``, by leaving the ``with`` block,
    or by the source reporting an error. Errors are recorded on the watch
    and never raised to the caller.
    """
    
    def __init__(
        self,
        source: GeolocationSource,
        on_location: Callable[[PositionSample], None] | None = None,
        on_error: Callable[[GeolocationError], None] | None = None
    ):
        self._source = source
        self._on_location = on_location
        self._on_error = on_error
        self._handle: Hashable | None = None
        self._lock = threading.Lock()
        self._last_sample: PositionSample | None = None
        self._error: GeolocationError | None = None
        self._samples_received = 0
    
    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._handle is not None
    
    @property
    def last_sample(self) -> PositionSample | None:
        with self._lock:
            return self._last_sample
    
    @property
    def accuracy(self) -> float | None:
        sample = self.last_sample
        return sample.accuracy if sample else None
    
    @property
    def error(self) -> GeolocationError | None:
        with self._lock:
            return self._error
    
    @property
    def samples_received(self) -> int:
        with self._lock:
            return self._samples_received
    
    def _start(self) -> None:
        if not self._source.is_supported:
            self._error = GeolocationUnavailableError()
            logger.warning(str(self._error))
            if self._on_error:
                self._on_error(self._error)
            return
        self._error = None
        try:
            handle = self._source.watch(self._handle_sample, self._handle_error)
        except GeolocationError as e:
            self._handle_error(e)
            return
        with self._lock:
            # The source may have failed synchronously inside watch()
            if self._error is None:
                self._handle = handle
                return
        self._source.clear_watch(handle)
    
    def _handle_sample(self, sample: PositionSample) -> None:
        with self._lock:
            self._last_sample = sample
            self._samples_received += 1
        if self._on_location:
            self._on_location(sample)
    
    def _handle_error(self, error: GeolocationError) -> None:
        logger.warning(f"Location watch stopped: {error}")
        with self._lock:
            self._error = error
            handle, self._handle = self._handle, None
        if handle is not None:
            self._source.clear_watch(handle)
        if self._on_error:
            self._on_error(error)
    
    def stop(self) -> None:
        """Release the subscription; safe to call more than once."""
        with self._lock:
            handle, self._handle = self._handle, None
        if handle is not None:
            self._source.clear_watch(handle)
            logger.debug("Location watch released")
    
    def __enter__(self) -> LocationWatch:
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
        return False  # Don't suppress exceptions


class LocationTracker:
    """Starts location watches against a single source."""
    
    def __init__(self, source: GeolocationSource):
        self._source = source
    
    def start(
        self,
        on_location: Callable[[PositionSample], None] | None = None,
        on_error: Callable[[GeolocationError], None] | None = None
    ) -> LocationWatch:
        """Begin watching; check ``watch.error`` for start-up failures."""
        watch = LocationWatch(self._source, on_location, on_error)
        watch._start()
        return watch
