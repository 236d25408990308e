"""
Exceptions raised by the simulation core.

Both algorithms are deterministic functions of their inputs, so a failure is
either a rejected input or a broken internal invariant. Neither is retried.
"""

import math
from numbers import Integral, Real
from typing import Sequence


class InvalidInputError(ValueError):
    """An IAT sequence, tail time or weight outside the accepted domain."""


class UnrecognizedEventError(RuntimeError):
    """An event whose kind is not Arrival, Grant or End reached the dispatcher."""


class SimulationError(RuntimeError):
    """The event loop reached a state the run invariants rule out."""


def _is_int(value: object) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def validate_tail_time(tail_time: object) -> int:
    """Return ``tail_time`` as an int, or raise InvalidInputError."""
    if not _is_int(tail_time):
        raise InvalidInputError(f"Tail time must be an integer, got {tail_time!r}")
    if tail_time <= 0:
        raise InvalidInputError(f"Tail time must be > 0, got {tail_time}")
    return int(tail_time)


def validate_iat(iat: Sequence[int]) -> tuple:
    """
    Return the inter-arrival times as an immutable tuple of ints.

    Raises:
        InvalidInputError: If the sequence is empty or holds a value that is
            not a positive integer.
    """
    values = tuple(iat)
    if not values:
        raise InvalidInputError("IAT sequence must contain at least one arrival")
    for idx, gap in enumerate(values):
        if not _is_int(gap):
            raise InvalidInputError(f"IAT[{idx}] must be an integer, got {gap!r}")
        if gap <= 0:
            raise InvalidInputError(f"IAT[{idx}] must be > 0, got {gap}")
    return tuple(int(gap) for gap in values)


def validate_weight(alpha: object) -> float:
    """Return ``alpha`` as a float, or raise InvalidInputError."""
    if alpha is None:
        raise InvalidInputError("Weight (alpha) has not been set")
    if isinstance(alpha, bool) or not isinstance(alpha, Real):
        raise InvalidInputError(f"Weight must be a real number, got {alpha!r}")
    if not math.isfinite(alpha):
        raise InvalidInputError(f"Weight must be finite, got {alpha}")
    if alpha < 0:
        raise InvalidInputError(f"Weight must be >= 0, got {alpha}")
    return float(alpha)
