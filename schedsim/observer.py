from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)


class EventKind(Enum):
    ARRIVAL = "arrival"
    DISPATCH = "dispatch"
    TIMEOUT = "timeout"
    TERMINATE = "terminate"


@dataclass(frozen=True)
class TraceEvent:
    kind: EventKind
    time: int
    pid: int
    waiting: Optional[int] = None


class SimulationObserver(Protocol):
    def on_event(self, event: TraceEvent) -> None:
        ...


class LoggingObserver:
    """
    Forwards every simulation event to a logger at DEBUG level.
    """

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self.log = log or logger

    def on_event(self, event: TraceEvent) -> None:
        if event.waiting is None:
            self.log.debug("%-9s t=%2d p=%2d", event.kind.value, event.time, event.pid)
        else:
            self.log.debug(
                "%-9s t=%2d p=%2d w=%2d", event.kind.value, event.time, event.pid, event.waiting
            )


class RecordingObserver:
    """Keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        self.events: List[TraceEvent] = []

    def on_event(self, event: TraceEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> List[TraceEvent]:
        return [e for e in self.events if e.kind is kind]
