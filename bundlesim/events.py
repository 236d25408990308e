"""
Event model for the break-even bundling simulator.

There are exactly three kinds of event. Their enum value doubles as the
tie-break rank, so the whole ordering reduces to comparing
``(time, rank, seq)`` tuples:

    - earlier time first
    - at equal time: Grant < Arrival < End
    - among same-kind same-time events: insertion order

Processing a Grant before a same-time Arrival keeps that arrival out of the
granted bundle; processing End last lets the final tail charge see the final
state.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from itertools import count
from typing import Iterator, List
import heapq

from bundlesim.errors import SimulationError


class EventType(IntEnum):
    """Kinds of event. The value is the rank used at equal timestamps."""
    GRANT = 0
    ARRIVAL = 1
    END = 2


@dataclass(frozen=True, order=True)
class Event:
    """
    A simulation event with an integer occurrence time.

    Events compare on ``(time, event_type, seq)``; ``seq`` is filled in by
    the queue that owns the event.
    """
    time: int
    event_type: EventType
    seq: int = field(default=0)

    def __repr__(self) -> str:
        kind = getattr(self.event_type, "name", self.event_type)
        return f"Event({kind}, t={self.time})"


class EventQueue:
    """Binary min-heap of events for a single simulation run."""

    def __init__(self) -> None:
        self._heap: List[Event] = []
        self._counter: Iterator[int] = count()

    def push(self, time: int, event_type: EventType) -> Event:
        """Create and schedule an event, returning it."""
        event = Event(time=int(time), event_type=event_type, seq=next(self._counter))
        heapq.heappush(self._heap, event)
        return event

    def pop(self) -> Event:
        if not self._heap:
            raise SimulationError("Event queue drained before the End event")
        return heapq.heappop(self._heap)

    def clear(self) -> None:
        self._heap.clear()
        self._counter = count()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
