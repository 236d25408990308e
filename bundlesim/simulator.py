"""
Online break-even bundling simulator.

This module implements a discrete-event simulation of the online policy.
Requests are revealed one at a time from an inter-arrival time (IAT)
sequence; after every arrival the policy decides, using only what it has
seen so far, when to grant (flush) the buffered bundle.

Cost Model:
    - Energy: each grant after the first costs min(gap since last grant, T),
      plus one final tail T when the run ends
    - Latency: alpha times the summed waits of all requests
    - Default cost: the naive "stay on between arrivals" baseline,
      min(gap between arrivals, T) per gap plus the final tail

Break-even Decision:
    A grant is placed where the marginal energy saved by waiting equals the
    marginal weighted delay incurred, assuming no further arrivals. When the
    resource is already idle (or has never been used) the fresh break-even
    t1 applies; inside the tail window of the previous grant the
    window-aware t2 is tried first. Break-even times are truncated toward
    zero before being scheduled.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence
import logging
import math

from bundlesim.errors import (
    UnrecognizedEventError,
    validate_iat,
    validate_tail_time,
    validate_weight,
)
from bundlesim.events import Event, EventQueue, EventType
from bundlesim.report import Report
from bundlesim.tracelog import NullTraceSink, TraceSink


logger = logging.getLogger(__name__)


@dataclass
class SimulationState:
    """
    Mutable state of one simulation run.

    Only the simulator's event handlers write to it; ``initialize`` replaces
    it wholesale so runs never share state.

    Attributes:
        clock: Time of the event being processed
        last_arrival: Time of the most recent arrival
        last_grant: Time of the most recent grant (0 means no grant yet)
        buffer_count: Arrivals buffered since the last grant
        accumulated_delay: Incremental wait integral of the buffered arrivals,
            closed into the exact wait sum at grant time
        current_index: Cursor into the IAT sequence
        energy, latency, default_cost, grant_count: Report accumulators
        events_processed: Popped events per kind
        running: False once the End event has been handled
        buffered: Arrival times in the current bundle (trace only)
    """
    clock: int = 0
    last_arrival: int = 0
    last_grant: int = 0
    buffer_count: int = 0
    accumulated_delay: int = 0
    current_index: int = 0

    energy: float = 0.0
    latency: float = 0.0
    default_cost: float = 0.0
    grant_count: int = 0

    events_processed: Counter = field(default_factory=Counter)
    running: bool = True
    buffered: List[int] = field(default_factory=list)


class Simulator:
    """
    Discrete-event simulator for the online break-even policy.

    The event queue is seeded with the first arrival; each arrival schedules
    the next one and possibly a grant, and the grant that empties the buffer
    after the last arrival schedules the End event.

    Attributes:
        tail_time: Radio tail time T
        iat: Inter-arrival times (positive integers)
        alpha: Weight of delay relative to energy
        trace: Side-channel sink for per-event records
    """

    def __init__(
        self,
        tail_time: int,
        iat: Sequence[int],
        alpha: Optional[float] = None,
        trace: Optional[TraceSink] = None
    ) -> None:
        """
        Initialize the simulator.

        Args:
            tail_time: Radio tail time T (> 0)
            iat: Non-empty sequence of positive inter-arrival times
            alpha: Optional weight; may also be given through set_weight
            trace: Optional trace sink (defaults to a no-op sink)

        Raises:
            InvalidInputError: If any argument is outside its domain
        """
        self.tail_time = validate_tail_time(tail_time)
        self.iat = validate_iat(iat)
        self.alpha: Optional[float] = None if alpha is None else validate_weight(alpha)
        self.trace: TraceSink = trace if trace is not None else NullTraceSink()

        self._queue = EventQueue()
        self._state: Optional[SimulationState] = None
        self._handlers: Dict[EventType, Callable[[Event], None]] = {
            EventType.ARRIVAL: self._on_arrival,
            EventType.GRANT: self._on_grant,
            EventType.END: self._on_end,
        }

    @property
    def state(self) -> Optional[SimulationState]:
        return self._state

    def set_weight(self, alpha: float) -> None:
        self.alpha = validate_weight(alpha)

    def initialize(self) -> None:
        """Reset all run state and seed the queue with the first arrival."""
        validate_weight(self.alpha)
        self._state = SimulationState()
        self._queue.clear()
        self._queue.push(self.iat[0], EventType.ARRIVAL)
        self.trace.begin_run(self.alpha)

    def run(self) -> Report:
        """
        Drain the event queue until the End event has been handled.

        Initializes the run first if ``initialize`` has not been called.

        Returns:
            Report of the finished run
        """
        validate_weight(self.alpha)
        if self._state is None:
            self.initialize()

        state = self._state
        while state.running:
            event = self._queue.pop()
            state.clock = event.time
            self._dispatch(event)

        logger.info(
            "Online run finished: alpha=%s arrivals=%d grants=%d cost=%.4f",
            self.alpha, len(self.iat), state.grant_count, state.energy + state.latency
        )
        return self.get_report()

    def get_report(self) -> Report:
        state = self._state if self._state is not None else SimulationState()
        return Report(
            energy=state.energy,
            latency=state.latency,
            total_cost=state.energy + state.latency,
            default_cost=state.default_cost,
            grant_count=state.grant_count,
        )

    def _dispatch(self, event: Event) -> None:
        handler = self._handlers.get(event.event_type)
        if handler is None:
            raise UnrecognizedEventError(f"Event type not recognized: {event!r}")
        self._state.events_processed[event.event_type] += 1
        handler(event)

    # -------------------------------------------------------------------------
    # Event handlers
    # -------------------------------------------------------------------------

    def _on_arrival(self, event: Event) -> None:
        state = self._state
        clock = state.clock
        gap = self.iat[state.current_index]

        if state.events_processed[EventType.ARRIVAL] > 1:
            state.default_cost += min(clock - state.last_arrival, self.tail_time)

        state.last_arrival = clock
        state.buffered.append(clock)

        # Uses the count before this arrival joins the buffer.
        state.accumulated_delay += state.buffer_count * gap
        state.buffer_count += 1
        state.current_index += 1
        self.trace.on_arrival(clock, gap)

        exhausted = state.current_index == len(self.iat)
        next_iat = math.inf if exhausted else self.iat[state.current_index]

        grant_at = self._grant_time(next_iat)
        if grant_at is None and exhausted:
            # Nothing left to wait for: flush the final bundle now.
            grant_at = clock
        if grant_at is not None:
            self._queue.push(grant_at, EventType.GRANT)

        logger.debug(
            "t=%d arrival #%d buffered=%d next_iat=%s grant_at=%s",
            clock, state.current_index, state.buffer_count, next_iat, grant_at
        )

        if not exhausted:
            self._queue.push(clock + next_iat, EventType.ARRIVAL)

    def _on_grant(self, event: Event) -> None:
        state = self._state
        clock = state.clock
        since_last_grant = clock - state.last_grant

        if state.last_grant > 0:
            state.energy += min(since_last_grant, self.tail_time)

        state.latency += self.alpha * (
            state.accumulated_delay + state.buffer_count * (clock - state.last_arrival)
        )
        self.trace.on_grant(clock, since_last_grant, [clock - t for t in state.buffered])

        state.last_grant = clock
        state.grant_count += 1
        state.accumulated_delay = 0
        state.buffer_count = 0
        state.buffered.clear()

        logger.debug("t=%d grant #%d", clock, state.grant_count)

        if state.current_index == len(self.iat):
            self._queue.push(clock, EventType.END)

    def _on_end(self, event: Event) -> None:
        state = self._state
        state.running = False
        # Tail after the last grant.
        state.energy += self.tail_time
        state.default_cost += self.tail_time
        state.buffered.clear()
        self.trace.on_end(state.clock)

    # -------------------------------------------------------------------------
    # Grant timing
    # -------------------------------------------------------------------------

    def _fresh_break_even(self) -> float:
        """Ticks from now at which waiting stops paying off, from an idle radio."""
        state = self._state
        divisor = self.alpha * state.buffer_count
        if divisor == 0:
            return math.inf
        return (self.tail_time - self.alpha * state.accumulated_delay) / divisor

    def _grant_time(self, next_iat: float) -> Optional[int]:
        """
        Absolute time of the next grant, or None to defer the decision.

        Args:
            next_iat: Gap to the next arrival (inf after the last one)
        """
        state = self._state
        clock = state.clock
        alpha = self.alpha
        tail_time = self.tail_time

        if alpha >= 1:
            return clock

        t1 = self._fresh_break_even()

        if state.last_grant == 0 or clock - state.last_grant >= tail_time:
            if 0 < t1 < next_iat:
                return clock + int(t1)
            if t1 <= 0:
                return clock
            return None

        divisor = alpha * state.buffer_count - 1
        if divisor == 0:
            return None
        t2 = (clock - state.last_grant - alpha * state.accumulated_delay) / divisor

        if int(t2) == 0:
            return clock
        if t2 > 0 and clock + t2 - state.last_grant < tail_time and t2 < next_iat:
            return clock + int(t2)
        if t1 > 0 and clock + t1 - state.last_grant >= tail_time and t1 < next_iat:
            return clock + int(t1)
        return None


def run_online(
    tail_time: int,
    iat: Sequence[int],
    alpha: float,
    trace: Optional[TraceSink] = None
) -> Report:
    """
    Convenience function to run the online policy once.

    Args:
        tail_time: Radio tail time T
        iat: Inter-arrival times
        alpha: Delay weight
        trace: Optional trace sink

    Returns:
        Report of the run
    """
    sim = Simulator(tail_time=tail_time, iat=iat, alpha=alpha, trace=trace)
    sim.initialize()
    return sim.run()
