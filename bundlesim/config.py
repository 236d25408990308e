"""
Configuration module for the break-even bundling simulator.

This module stores the default cost-model parameters and the parameters of
the synthetic inter-arrival time (IAT) generators. All times are integer
simulation ticks; the weight ``alpha`` is the price of one tick of delay
relative to one tick of tail energy.

Cost Model:
    - Energy: a grant keeps the resource active for at most T ticks
    - Delay: every buffered request pays alpha per tick it waits
    - The online and offline algorithms share this objective exactly
"""

from typing import Tuple


# =============================================================================
# Cost Model Defaults
# =============================================================================

DEFAULT_TAIL_TIME: int = 200
"""Tail time T: ticks the resource stays active after its last use."""

DEFAULT_ALPHAS: Tuple[float, ...] = (
    0.0001, 0.001, 0.01, 0.1, 1.0, 10.0, 100.0, 1000.0, 10000.0, 100000.0,
)
"""Weights swept by the experiment driver (delay vs. energy)."""


# =============================================================================
# Workload Defaults
# =============================================================================

DEFAULT_SEED: int = 111
"""Seed for the IAT generators."""

DEFAULT_TRACE_LENGTH: int = 100
"""Number of arrivals for the non-bursty distributions."""

MIN_IAT: int = 1
"""Smallest gap a generator may emit (the simulator rejects non-positive gaps)."""

NORMAL_MEAN: float = 200.0
NORMAL_STD: float = 80.0

LOG_NORMAL_MEAN: float = 200.0
LOG_NORMAL_STD: float = 80.0

CONSTANT_INTERVAL: int = 100

# Bursty pattern: long gap, burst of unit gaps, short gap, repeat.
MAX_BURST_SIZE: int = 14
MEAN_SHORT_GAP: float = 40.0
MEAN_LONG_GAP: float = 400.0
BURSTY_SEQUENCE_LENGTH: int = 500


# =============================================================================
# Output Defaults
# =============================================================================

DEFAULT_SUMMARY_FILE: str = "log.txt"
"""Tab-separated sweep summary written by the driver."""

ARRIVAL_LOG_NAME: str = "log_arrival.txt"
DELAY_LOG_NAME: str = "log_delay.txt"
GRANT_LOG_NAME: str = "log_grant.txt"
