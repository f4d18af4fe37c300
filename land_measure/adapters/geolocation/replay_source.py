"""Replay adapter - implements GeolocationSource port from recorded fixes."""

from __future__ import annotations

import csv
import itertools
import logging
import threading
from pathlib import Path
from typing import Sequence

from ...application.ports.geolocation import (
    ErrorCallback,
    GeolocationSource,
    PositionSample,
    SampleCallback,
)
from ...exceptions import GeolocationError, GeolocationUnavailableError

logger = logging.getLogger(__name__)


class ReplayGeolocationSource(GeolocationSource):
    """Delivers a fixed list of samples on a background thread.
    
    Each ``watch()`` gets its own thread. Samples are spaced by
    ``interval`` seconds; once exhausted, ``error`` (if any) is reported.
    """
    
    def __init__(
        self,
        samples: Sequence[PositionSample],
        interval: float = 0.0,
        error: GeolocationError | None = None,
        supported: bool = True
    ):
        self._samples = list(samples)
        self._interval = interval
        self._error = error
        self._supported = supported
        self._ids = itertools.count(1)
        self._watches: dict[int, tuple[threading.Thread, threading.Event]] = {}
        self._lock = threading.Lock()
    
    @property
    def is_supported(self) -> bool:
        return self._supported
    
    @property
    def sample_count(self) -> int:
        return len(self._samples)
    
    @property
    def active_watches(self) -> int:
        with self._lock:
            return len(self._watches)
    
    def watch(self, on_sample: SampleCallback, on_error: ErrorCallback) -> int:
        if not self._supported:
            raise GeolocationUnavailableError()
        
        handle = next(self._ids)
        stop = threading.Event()
        thread = threading.Thread(
            target=self._replay,
            args=(stop, on_sample, on_error),
            name=f"replay-watch-{handle}",
            daemon=True
        )
        with self._lock:
            self._watches[handle] = (thread, stop)
        thread.start()
        return handle
    
    def _replay(self, stop: threading.Event, on_sample: SampleCallback, on_error: ErrorCallback) -> None:
        for sample in self._samples:
            if stop.is_set():
                return
            on_sample(sample)
            if self._interval and stop.wait(self._interval):
                return
        if self._error is not None and not stop.is_set():
            on_error(self._error)
    
    def clear_watch(self, handle: int) -> None:
        with self._lock:
            entry = self._watches.pop(handle, None)
        if entry is None:
            return
        thread, stop = entry
        stop.set()
        if thread is not threading.current_thread():
            thread.join(timeout=1.0)
    
    def wait(self, handle: int, timeout: float | None = None) -> None:
        """Block until the replay for handle has delivered everything."""
        with self._lock:
            entry = self._watches.get(handle)
        if entry is not None:
            entry[0].join(timeout)
    
    @classmethod
    def from_csv(cls, path: Path | str, **kwargs) -> ReplayGeolocationSource:
        """Load samples from a CSV with latitude, longitude[, accuracy] columns."""
        path = Path(path)
        samples: list[PositionSample] = []
        with open(path, newline='', encoding='utf-8') as f:
            for row in csv.DictReader(f):
                accuracy = row.get('accuracy')
                samples.append(PositionSample(
                    latitude=float(row['latitude']),
                    longitude=float(row['longitude']),
                    accuracy=float(accuracy) if accuracy else None
                ))
        logger.debug(f"Loaded {len(samples)} samples from {path.name}")
        return cls(samples, **kwargs)
