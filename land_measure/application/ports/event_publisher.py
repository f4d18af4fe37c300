"""Event Publisher port - interface for publishing events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class PipelineEvent:
    """Event during analysis."""
    stage: str
    message: str
    progress: float | None = None  # 0.0 to 1.0
    run_id: int | None = None


@runtime_checkable
class EventPublisher(Protocol):
    """Port for publishing pipeline events."""
    
    def publish(self, event: PipelineEvent) -> None:
        """Publish an event."""
        ...
    
    def subscribe(self, callback: Callable[[PipelineEvent], None]) -> None:
        """Subscribe to events."""
        ...


class SimpleEventPublisher:
    """Simple synchronous event publisher."""
    
    def __init__(self):
        self._subscribers: list[Callable[[PipelineEvent], None]] = []
    
    def publish(self, event: PipelineEvent) -> None:
        for callback in self._subscribers:
            callback(event)
    
    def subscribe(self, callback: Callable[[PipelineEvent], None]) -> None:
        self._subscribers.append(callback)
