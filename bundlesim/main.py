"""
Main entry point for the break-even bundling simulator.

This script sweeps the delay weight alpha over a single IAT trace, runs the
online break-even policy and the offline optimum at every weight, and
reports the competitive ratio (online cost / offline cost).

Experiment Design:
    - Generate one IAT trace (the arrivals do not depend on alpha)
    - For each alpha: fresh Simulator and Optimizer, one run each
    - Print a summary table and write tab-separated rows to a file

Expected Results:
    - Tiny alpha: one large bundle, ratio dominated by delay accounting
    - alpha >= 1: every request granted on arrival
    - In between: the break-even policy stays within a small factor of optimal
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union
import csv
import logging

from bundlesim.config import (
    DEFAULT_ALPHAS,
    DEFAULT_SEED,
    DEFAULT_SUMMARY_FILE,
    DEFAULT_TAIL_TIME,
    DEFAULT_TRACE_LENGTH,
)
from bundlesim.offline import Optimizer
from bundlesim.report import Report, competitive_ratio
from bundlesim.simulator import Simulator
from bundlesim.tracelog import FileTraceSink, TraceSink
from bundlesim.workload import DISTRIBUTIONS, generate_iat


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    """Online and offline reports for one weight."""
    alpha: float
    online: Report
    offline: Report

    @property
    def competitive_ratio(self) -> float:
        return competitive_ratio(self.online, self.offline)

    def summary_row(self) -> tuple:
        return (
            self.alpha,
            self.competitive_ratio,
            self.offline.total_cost,
            self.online.latency,
            self.online.energy,
            self.online.total_cost,
            self.online.grant_count,
            self.online.default_cost,
        )


SUMMARY_COLUMNS = (
    "alpha", "cr", "opt_total", "online_latency", "online_energy",
    "online_total", "online_grants", "default_cost",
)


def run_weight(
    tail_time: int,
    iat: Sequence[int],
    alpha: float,
    trace: Optional[TraceSink] = None
) -> SweepResult:
    """
    Run the online policy and the offline optimum for one weight.

    Both are built from scratch so no state carries over between weights.
    """
    sim = Simulator(tail_time=tail_time, iat=iat, trace=trace)
    sim.set_weight(alpha)
    sim.initialize()
    online = sim.run()

    opt = Optimizer(tail_time=tail_time, iat=iat)
    opt.set_weight(alpha)
    offline = opt.run()

    return SweepResult(alpha=alpha, online=online, offline=offline)


def _run_single_weight(args: tuple) -> SweepResult:
    """Worker function for parallel sweep execution."""
    tail_time, iat, alpha = args
    return run_weight(tail_time, iat, alpha)


def run_sweep(
    tail_time: int,
    iat: Sequence[int],
    alphas: Sequence[float] = DEFAULT_ALPHAS,
    parallel: bool = False,
    max_workers: Optional[int] = None,
    trace: Optional[TraceSink] = None
) -> List[SweepResult]:
    """
    Evaluate the online policy against the optimum for every weight.

    Uses multiprocessing when ``parallel`` is set. A trace sink is a single
    file-backed object, so tracing always runs sequentially.

    Args:
        tail_time: Radio tail time T
        iat: IAT trace shared by every weight
        alphas: Weights to evaluate
        parallel: Whether to use parallel execution
        max_workers: Max parallel workers (default: CPU count)
        trace: Optional trace sink for the online runs

    Returns:
        One SweepResult per weight, in the order of ``alphas``
    """
    iat = list(iat)
    experiments = [(tail_time, iat, alpha) for alpha in alphas]

    if parallel and trace is None and len(experiments) > 1:
        from concurrent.futures import ProcessPoolExecutor
        import os

        n_workers = max_workers or min(os.cpu_count() or 4, len(experiments))
        with ProcessPoolExecutor(max_workers=n_workers) as executor:
            return list(executor.map(_run_single_weight, experiments))

    return [run_weight(tail_time, iat, alpha, trace=trace) for alpha in alphas]


def write_summary(results: Sequence[SweepResult], path: Union[str, Path]) -> Path:
    """Write one tab-separated row per weight, header first."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, delimiter="\t")
        writer.writerow(SUMMARY_COLUMNS)
        for result in results:
            writer.writerow(result.summary_row())
    return path


def print_header(title: str) -> None:
    """Print a formatted section header."""
    width = 70
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width)


def print_table(results: Sequence[SweepResult]) -> None:
    """Print the competitive ratio and cost components per weight."""
    header = (
        f"{'alpha':>10} | {'CR':>7} | {'opt':>10} | {'online':>10} | "
        f"{'energy':>9} | {'latency':>10} | {'grants':>6} | {'opt#':>5}"
    )
    print(header)
    print("-" * len(header))

    for r in results:
        print(
            f"{r.alpha:>10g} | {r.competitive_ratio:>7.3f} | {r.offline.total_cost:>10.2f} | "
            f"{r.online.total_cost:>10.2f} | {r.online.energy:>9.1f} | "
            f"{r.online.latency:>10.2f} | {r.online.grant_count:>6d} | "
            f"{r.offline.grant_count:>5d}"
        )


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point with CLI argument parsing."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Break-even bundling: online policy vs offline optimum over a weight sweep"
    )
    parser.add_argument(
        "--tail-time", "-T", type=int, default=DEFAULT_TAIL_TIME,
        help=f"Radio tail time in ticks (default: {DEFAULT_TAIL_TIME})"
    )
    parser.add_argument(
        "--distribution", "-d", choices=DISTRIBUTIONS, default="normal",
        help="IAT distribution (default: normal)"
    )
    parser.add_argument(
        "--length", "-n", type=int, default=DEFAULT_TRACE_LENGTH,
        help=f"Number of arrivals (default: {DEFAULT_TRACE_LENGTH}, ignored for bursty)"
    )
    parser.add_argument(
        "--seed", "-s", type=int, default=DEFAULT_SEED,
        help=f"Random seed (default: {DEFAULT_SEED})"
    )
    parser.add_argument(
        "--alphas", type=float, nargs="+", default=list(DEFAULT_ALPHAS),
        help="Weights to sweep"
    )
    parser.add_argument(
        "--output", "-o", default=DEFAULT_SUMMARY_FILE,
        help=f"Summary file (default: {DEFAULT_SUMMARY_FILE})"
    )
    parser.add_argument(
        "--log-dir", default=None,
        help="Write arrival/delay/grant trace logs into this directory"
    )
    parser.add_argument(
        "--log-grants", action="store_true",
        help="Also write inter-grant times (requires --log-dir)"
    )
    parser.add_argument(
        "--no-parallel", action="store_true",
        help="Disable parallel execution"
    )
    parser.add_argument(
        "--workers", "-w", type=int, default=None,
        help="Number of parallel workers (default: CPU count)"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging of every simulation event"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    iat = generate_iat(
        args.distribution,
        length=args.length,
        tail_time=args.tail_time,
        seed=args.seed,
    )

    print_header("Break-even Bundling Simulator")
    print(f"\nDistribution: {args.distribution}, arrivals={len(iat)}, seed={args.seed}")
    print(f"Tail time: {args.tail_time}")
    print(f"Weights: {args.alphas}")

    trace: Optional[FileTraceSink] = None
    if args.log_dir:
        trace = FileTraceSink(args.log_dir, iat, record_grants=args.log_grants)

    try:
        results = run_sweep(
            tail_time=args.tail_time,
            iat=iat,
            alphas=args.alphas,
            parallel=not args.no_parallel,
            max_workers=args.workers,
            trace=trace,
        )
    finally:
        if trace is not None:
            trace.close()

    print_header("Competitive Ratio by Weight")
    print_table(results)

    summary_path = write_summary(results, args.output)

    print("\n" + "=" * 70)
    print(f" Summary written to {summary_path}")
    print(" Run 'python -m bundlesim.plotter' to generate visualizations in results/")
    print("=" * 70 + "\n")


if __name__ == "__main__":
    main()
