"""
Break-even Bundling Simulator

A discrete-event simulator comparing an online break-even request
bundling policy against the offline optimum for a resource with an
idle-teardown (tail) cost.

Key Components:
    - config: Cost model and workload defaults
    - events: Event kinds, ordering and the event queue
    - simulator: Online break-even policy (event-driven)
    - offline: Offline optimum (dynamic programming)
    - report: Cost report shared by both
    - workload: Synthetic inter-arrival time generation
    - tracelog: Per-event trace side channel
    - plotter: Visualization utilities

Usage:
    # Run a weight sweep
    python -m bundlesim.main

    # Generate plots
    python -m bundlesim.plotter

    # Run tests
    pytest bundlesim/tests/
"""

from bundlesim.config import (
    DEFAULT_TAIL_TIME,
    DEFAULT_ALPHAS,
    DEFAULT_SEED,
)

from bundlesim.errors import (
    InvalidInputError,
    UnrecognizedEventError,
    SimulationError,
)

from bundlesim.events import (
    EventType,
    Event,
    EventQueue,
)

from bundlesim.report import (
    Report,
    competitive_ratio,
)

from bundlesim.simulator import (
    Simulator,
    SimulationState,
    run_online,
)

from bundlesim.offline import (
    Optimizer,
    run_offline,
)

from bundlesim.tracelog import (
    TraceSink,
    NullTraceSink,
    FileTraceSink,
)

from bundlesim.workload import (
    IATGenerator,
    generate_iat,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "DEFAULT_TAIL_TIME",
    "DEFAULT_ALPHAS",
    "DEFAULT_SEED",
    # Errors
    "InvalidInputError",
    "UnrecognizedEventError",
    "SimulationError",
    # Events
    "EventType",
    "Event",
    "EventQueue",
    # Report
    "Report",
    "competitive_ratio",
    # Simulator
    "Simulator",
    "SimulationState",
    "run_online",
    # Offline
    "Optimizer",
    "run_offline",
    # Trace
    "TraceSink",
    "NullTraceSink",
    "FileTraceSink",
    # Workload
    "IATGenerator",
    "generate_iat",
]
