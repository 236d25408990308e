"""
Inter-arrival time (IAT) generation for the bundling simulator.

This module produces the integer IAT sequences that feed both the online
simulator and the offline optimizer. Four patterns are available:

    - constant: every gap equal
    - normal: |N(mean, std)|
    - log-normal: parameterized by the mean and std of the gap itself
    - bursty: long gap, burst of back-to-back requests, short gap, repeat

Draws are truncated to integers and clamped to MIN_IAT, since the simulator
only accepts positive gaps.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
import logging
import math
import random

from bundlesim.config import (
    BURSTY_SEQUENCE_LENGTH,
    CONSTANT_INTERVAL,
    DEFAULT_SEED,
    DEFAULT_TAIL_TIME,
    DEFAULT_TRACE_LENGTH,
    LOG_NORMAL_MEAN,
    LOG_NORMAL_STD,
    MAX_BURST_SIZE,
    MEAN_LONG_GAP,
    MEAN_SHORT_GAP,
    MIN_IAT,
    NORMAL_MEAN,
    NORMAL_STD,
)


logger = logging.getLogger(__name__)

DISTRIBUTIONS: Tuple[str, ...] = ("constant", "normal", "log-normal", "bursty")


def summarize_iat(iat: List[int], tail_time: int) -> Tuple[int, int, int]:
    """
    Count gaps at the floor, gaps within the tail time and gaps beyond it.

    Returns:
        (at MIN_IAT, <= tail_time, > tail_time)
    """
    at_floor = sum(1 for gap in iat if gap <= MIN_IAT)
    within = sum(1 for gap in iat if gap <= tail_time)
    return at_floor, within, len(iat) - within


@dataclass
class IATGenerator:
    """
    Seeded generator of synthetic IAT sequences.

    Attributes:
        seed: Random seed for reproducibility
        tail_time: Tail time used when summarizing generated sequences

    Example:
        >>> gen = IATGenerator(seed=7)
        >>> gen.constant(3, 100)
        [100, 100, 100]
    """
    seed: Optional[int] = DEFAULT_SEED
    tail_time: int = DEFAULT_TAIL_TIME
    _rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        """Initialize the random number generator with seed if provided."""
        if self.seed is not None:
            self._rng.seed(self.seed)

    def _clamp(self, value: float) -> int:
        return max(MIN_IAT, int(value))

    def _exponential(self, mean: float) -> int:
        # Inverse transform; 1 - u keeps log() away from 0.
        return self._clamp(-mean * math.log(1.0 - self._rng.random()))

    def _log_summary(self, kind: str, iat: List[int]) -> None:
        at_floor, within, beyond = summarize_iat(iat, self.tail_time)
        logger.info(
            "%s IAT: n=%d at_floor=%d within_tail=%d beyond_tail=%d",
            kind, len(iat), at_floor, within, beyond
        )

    def constant(
        self,
        length: int = DEFAULT_TRACE_LENGTH,
        interval: int = CONSTANT_INTERVAL
    ) -> List[int]:
        """Return ``length`` copies of ``interval``."""
        if length < 1:
            raise ValueError(f"Length must be >= 1, got {length}")
        return [self._clamp(interval)] * length

    def normal(
        self,
        length: int = DEFAULT_TRACE_LENGTH,
        mean: float = NORMAL_MEAN,
        std: float = NORMAL_STD
    ) -> List[int]:
        """Sample gaps as the absolute value of a Gaussian draw."""
        if length < 1:
            raise ValueError(f"Length must be >= 1, got {length}")
        iat = [self._clamp(abs(self._rng.gauss(mean, std))) for _ in range(length)]
        self._log_summary("normal", iat)
        return iat

    def log_normal(
        self,
        length: int = DEFAULT_TRACE_LENGTH,
        mean: float = LOG_NORMAL_MEAN,
        std: float = LOG_NORMAL_STD
    ) -> List[int]:
        """
        Sample log-normal gaps whose own mean and std are ``mean`` and ``std``.

        The underlying normal parameters are
        mu = ln(m^2 / sqrt(v + m^2)) and sigma = sqrt(ln(1 + v / m^2)).
        """
        if length < 1:
            raise ValueError(f"Length must be >= 1, got {length}")
        if mean <= 0:
            raise ValueError(f"Mean must be > 0, got {mean}")

        variance = std * std
        mean_sq = mean * mean
        mu = math.log(mean_sq / math.sqrt(variance + mean_sq))
        sigma = math.sqrt(math.log(1.0 + variance / mean_sq))

        iat = [
            self._clamp(math.exp(mu + self._rng.gauss(0.0, 1.0) * sigma))
            for _ in range(length)
        ]
        self._log_summary("log-normal", iat)
        return iat

    def bursty(
        self,
        sequence_length: int = BURSTY_SEQUENCE_LENGTH,
        max_burst: int = MAX_BURST_SIZE,
        mean_short_gap: float = MEAN_SHORT_GAP,
        mean_long_gap: float = MEAN_LONG_GAP
    ) -> List[int]:
        """
        Generate a bursty sequence.

        Each cycle is an exponential long gap, a burst of uniformly
        1..max_burst requests one tick apart, then an exponential short gap.
        Cycles repeat until more than ``sequence_length`` gaps exist.
        """
        iat: List[int] = []
        count = 0
        while count <= sequence_length:
            iat.append(self._exponential(mean_long_gap))
            burst_size = self._rng.randint(1, max_burst)
            iat.extend([1] * burst_size)
            iat.append(self._exponential(mean_short_gap))
            count += burst_size + 2
        self._log_summary("bursty", iat)
        return iat


def generate_iat(
    kind: str,
    length: int = DEFAULT_TRACE_LENGTH,
    tail_time: int = DEFAULT_TAIL_TIME,
    seed: Optional[int] = DEFAULT_SEED,
    **params: float
) -> List[int]:
    """
    Factory function to generate an IAT sequence by distribution name.

    Args:
        kind: "constant", "normal", "log-normal" or "bursty"
        length: Number of gaps (the bursty pattern sets its own length)
        tail_time: Tail time used for the logged summary
        seed: Random seed
        **params: Distribution parameters passed through

    Raises:
        ValueError: If kind is unknown
    """
    gen = IATGenerator(seed=seed, tail_time=tail_time)
    generators: Dict[str, Callable[[], List[int]]] = {
        "constant": lambda: gen.constant(length, **params),
        "normal": lambda: gen.normal(length, **params),
        "log-normal": lambda: gen.log_normal(length, **params),
        "bursty": lambda: gen.bursty(**params),
    }

    if kind.lower() not in generators:
        raise ValueError(
            f"Unknown IAT distribution: {kind}. "
            f"Available: {list(generators.keys())}"
        )

    return generators[kind.lower()]()
