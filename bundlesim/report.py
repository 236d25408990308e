"""
Performance report shared by the online simulator and the offline optimizer.

Only ``total_cost`` and ``grant_count`` carry the same meaning for both
producers. The simulator builds ``total_cost`` as ``energy + latency``; the
optimizer computes ``total_cost`` directly and reports ``total_cost - latency``
as its energy, with a zero default cost.
"""

from dataclasses import dataclass

from bundlesim.errors import InvalidInputError


@dataclass(frozen=True)
class Report:
    """
    Cost components of one bundling run.

    Attributes:
        energy: Tail energy spent (including the final tail)
        latency: Weighted delay cost, alpha times the summed waits
        total_cost: Objective value
        default_cost: Cost of keeping the resource on between arrivals
            (capped at T), the naive baseline; 0 for the optimizer
        grant_count: Number of bundles granted
    """
    energy: float = 0.0
    latency: float = 0.0
    total_cost: float = 0.0
    default_cost: float = 0.0
    grant_count: int = 0

    def __str__(self) -> str:
        return (
            f"Grant Count is: {self.grant_count}\n"
            f"Energy cost is: {self.energy}\n"
            f"Latency cost is: {self.latency}\n"
            f"Total cost is: {self.total_cost}\n"
            f"Default Cost is: {self.default_cost}"
        )


def competitive_ratio(online: Report, offline: Report) -> float:
    """
    Online total cost divided by the offline optimum for the same trace.

    Raises:
        InvalidInputError: If the offline cost is not positive
    """
    if offline.total_cost <= 0:
        raise InvalidInputError(
            f"Offline total cost must be > 0, got {offline.total_cost}"
        )
    return online.total_cost / offline.total_cost
