"""
Offline-optimal bundling via dynamic programming.

Given the whole arrival sequence up front, the optimizer partitions the
arrivals into contiguous bundles, each granted at the time of its last
arrival, minimizing

    sum over bundles after the first of min(gap between grants, T)
    + alpha * sum over requests of (grant time - arrival time)
    + T for the tail after the final grant.

The recurrence over prefixes runs in O(n^2). Bundle delays come from integer
prefix sums; the sum is exact, so each delay is the same float the naive
per-bundle loop produces. Ties between partitions of equal cost keep the
first candidate examined: the single bundle covering the whole prefix, then
final bundles of increasing length.
"""

from itertools import accumulate
from typing import List, Optional, Sequence, Tuple
import logging

from bundlesim.errors import validate_iat, validate_tail_time, validate_weight
from bundlesim.report import Report


logger = logging.getLogger(__name__)


class Optimizer:
    """
    Offline optimum for one IAT sequence and tail time.

    Attributes:
        tail_time: Radio tail time T
        iat: Inter-arrival times
        alpha: Weight of delay relative to energy
        arrival: Absolute arrival times with a synthetic arrival[0] = 0
        bundles: 1-based inclusive (start, end) arrival indices of each
            bundle of the last run
    """

    def __init__(
        self,
        tail_time: int,
        iat: Sequence[int],
        alpha: Optional[float] = None
    ) -> None:
        self.tail_time = validate_tail_time(tail_time)
        self.iat = validate_iat(iat)
        self.alpha: Optional[float] = None if alpha is None else validate_weight(alpha)

        self.arrival: List[int] = [0] + list(accumulate(self.iat))
        self._prefix: List[int] = list(accumulate(self.arrival))

        self.bundles: List[Tuple[int, int]] = []
        self._latency: float = 0.0
        self._total_cost: float = 0.0

    def set_weight(self, alpha: float) -> None:
        self.alpha = validate_weight(alpha)

    @property
    def grant_times(self) -> List[int]:
        return [self.arrival[end] for _, end in self.bundles]

    def delay(self, start: int, end: int) -> float:
        """
        Weighted delay of bundling arrivals ``start..end`` and granting at
        ``arrival[end]``.
        """
        waiting = (end - start + 1) * self.arrival[end] - (
            self._prefix[end] - self._prefix[start - 1]
        )
        return self.alpha * waiting

    def run(self) -> Report:
        """
        Solve the DP for the current weight.

        Returns:
            Report with the optimal total cost, its delay component and the
            number of bundles
        """
        alpha = validate_weight(self.alpha)
        arrival = self.arrival
        tail_time = self.tail_time
        n = len(self.iat)

        cost = [0.0] * (n + 1)
        delay = [0.0] * (n + 1)
        # parent[i]: prefix length served before the final bundle of prefix i.
        parent = [0] * (n + 1)

        for i in range(2, n + 1):
            cost[i] = self.delay(1, i)
            delay[i] = cost[i]
            parent[i] = 0

            for j in range(1, i):
                head = i - j
                bundle_delay = self.delay(head + 1, i)
                candidate = cost[head] + min(arrival[i] - arrival[head], tail_time)
                candidate += bundle_delay

                if candidate < cost[i]:
                    cost[i] = candidate
                    delay[i] = bundle_delay + delay[head]
                    parent[i] = head

        self._total_cost = cost[n] + tail_time
        self._latency = delay[n]
        self.bundles = self._backtrack(parent, n)

        logger.info(
            "Offline run finished: alpha=%s arrivals=%d grants=%d cost=%.4f",
            alpha, n, len(self.bundles), self._total_cost
        )
        return self.get_report()

    @staticmethod
    def _backtrack(parent: Sequence[int], n: int) -> List[Tuple[int, int]]:
        bundles: List[Tuple[int, int]] = []
        end = n
        while end > 0:
            start = parent[end] + 1
            bundles.append((start, end))
            end = parent[end]
        bundles.reverse()
        return bundles

    def get_report(self) -> Report:
        return Report(
            energy=self._total_cost - self._latency,
            latency=self._latency,
            total_cost=self._total_cost,
            default_cost=0.0,
            grant_count=len(self.bundles),
        )


def run_offline(tail_time: int, iat: Sequence[int], alpha: float) -> Report:
    """Convenience function to compute the offline optimum once."""
    return Optimizer(tail_time=tail_time, iat=iat, alpha=alpha).run()
