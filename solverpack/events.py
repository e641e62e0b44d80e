"""Live event contract between the supervisor and its caller."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

LOG_OUTPUT_EVENT = "log-output"
PROCESS_PID_EVENT = "process-pid"
EVENT_KINDS = frozenset({LOG_OUTPUT_EVENT, PROCESS_PID_EVENT})


@dataclass(frozen=True, slots=True)
class Event:
    """One fire-and-forget notification for the UI layer."""

    kind: str
    payload: Any
    stream: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in EVENT_KINDS:
            raise ValueError(f"Unsupported event kind: {self.kind}")


class EventSink(Protocol):
    """Capability that receives live events.

    Implementations must tolerate concurrent ``publish`` calls from the two
    stream readers.
    """

    def publish(self, event: Event) -> None:
        """Deliver one event."""


class NullEventSink:
    """Sink that drops every event."""

    def publish(self, event: Event) -> None:
        return None


class CallbackEventSink:
    """Adapt a plain callable into an event sink."""

    def __init__(self, callback: Callable[[Event], Any]) -> None:
        self._callback = callback
        self._lock = threading.Lock()

    def publish(self, event: Event) -> None:
        with self._lock:
            self._callback(event)


class RecordingEventSink:
    """Thread-safe sink that keeps every event in arrival order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._events: list[Event] = []

    def publish(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> tuple[Event, ...]:
        with self._lock:
            return tuple(self._events)

    def lines(self, stream: str | None = None) -> list[str]:
        return [
            str(event.payload)
            for event in self.events
            if event.kind == LOG_OUTPUT_EVENT and (stream is None or event.stream == stream)
        ]

    def pids(self) -> list[int]:
        return [int(event.payload) for event in self.events if event.kind == PROCESS_PID_EVENT]


def publish_quietly(sink: EventSink | None, event: Event) -> bool:
    """Publish without letting a sink failure reach the caller."""
    if sink is None:
        return False
    try:
        sink.publish(event)
    except Exception:  # noqa: BLE001 - delivery is fire-and-forget
        logger.debug("event sink rejected %s event", event.kind, exc_info=True)
        return False
    return True
