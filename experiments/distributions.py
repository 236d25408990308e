"""
Arrival Distribution Sweep Experiment for break-even bundling.

This experiment checks how the online policy's competitive ratio depends on
the shape of the arrival process, not just on the delay weight.

Systems Insight:
    The break-even rule assumes no further arrivals when it picks a grant
    time. That assumption is cheap when gaps are regular and costly when a
    long idle period is followed by a burst:
    - Constant gaps: the policy settles into a fixed bundling rhythm
    - Normal / log-normal gaps: occasional long gaps reset the tail window
    - Bursty gaps: bundles straddle bursts and the ratio grows

Experiment Design:
    For each distribution, generate one trace and sweep the default weights.
    Report the competitive ratio per (distribution, alpha) and the worst
    ratio per distribution.
"""

import sys
from pathlib import Path
from typing import Dict, List, Sequence

import matplotlib.pyplot as plt
import numpy as np

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from bundlesim.config import DEFAULT_ALPHAS, DEFAULT_SEED, DEFAULT_TAIL_TIME, DEFAULT_TRACE_LENGTH
from bundlesim.main import SweepResult, run_sweep
from bundlesim.workload import DISTRIBUTIONS, generate_iat


# =============================================================================
# Configuration
# =============================================================================

DISTRIBUTION_COLORS = {
    "constant": "#009E73",
    "normal": "#0072B2",
    "log-normal": "#CC79A7",
    "bursty": "#E69F00",
}


# =============================================================================
# Experiment Runner
# =============================================================================

def run_distribution_sweep(
    tail_time: int = DEFAULT_TAIL_TIME,
    alphas: Sequence[float] = DEFAULT_ALPHAS,
    length: int = DEFAULT_TRACE_LENGTH,
    seed: int = DEFAULT_SEED,
    distributions: Sequence[str] = DISTRIBUTIONS,
    verbose: bool = True
) -> Dict[str, List[SweepResult]]:
    """
    Sweep the weights once per arrival distribution.

    Returns:
        Dict mapping distribution name to its sweep results
    """
    results: Dict[str, List[SweepResult]] = {}

    for kind in distributions:
        iat = generate_iat(kind, length=length, tail_time=tail_time, seed=seed)
        results[kind] = run_sweep(tail_time, iat, alphas)

        if verbose:
            worst = max(r.competitive_ratio for r in results[kind])
            print(f"  {kind:<10} n={len(iat):<5d} worst CR={worst:.3f}")

    return results


# =============================================================================
# Analysis
# =============================================================================

def worst_ratio(results: Dict[str, List[SweepResult]]) -> Dict[str, float]:
    """Largest competitive ratio seen for each distribution."""
    return {
        kind: max(r.competitive_ratio for r in sweep)
        for kind, sweep in results.items()
    }


def print_summary_table(results: Dict[str, List[SweepResult]]) -> None:
    """Print competitive ratios, one row per distribution."""
    alphas = [r.alpha for r in next(iter(results.values()))]

    print("\n" + "=" * 80)
    print(" Competitive Ratio by Weight")
    print("=" * 80)

    header = f"{'Distribution':<12} | " + " | ".join(f"{a:>7g}" for a in alphas)
    print(header)
    print("-" * len(header))

    for kind, sweep in results.items():
        row = f"{kind:<12} | " + " | ".join(f"{r.competitive_ratio:>7.3f}" for r in sweep)
        print(row)


# =============================================================================
# Visualization
# =============================================================================

def plot_ratio_by_distribution(
    results: Dict[str, List[SweepResult]],
    output_path: str = "results/distribution_ratio.png"
) -> None:
    """Plot competitive ratio vs alpha, one curve per distribution."""
    fig, ax = plt.subplots(figsize=(12, 7))

    for kind, sweep in results.items():
        alphas = np.array([r.alpha for r in sweep])
        ratios = np.array([r.competitive_ratio for r in sweep])
        ax.plot(
            alphas, ratios,
            color=DISTRIBUTION_COLORS.get(kind, "gray"),
            linewidth=2.5,
            marker='o',
            markersize=7,
            label=kind
        )

    ax.set_xscale('log')
    ax.set_xlabel('Delay Weight (alpha)', fontsize=12, fontweight='bold')
    ax.set_ylabel('Competitive Ratio', fontsize=12, fontweight='bold')
    ax.set_title(
        'Break-even Bundling Across Arrival Distributions',
        fontsize=14,
        fontweight='bold',
        pad=15
    )
    ax.axhline(y=1.0, color='black', linestyle=':', linewidth=1)
    ax.legend(loc='upper left', fontsize=10, framealpha=0.9)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=300, bbox_inches='tight')
    print(f"Saved: {output_path}")
    plt.close()


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> None:
    """Run the arrival distribution sweep experiment."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Arrival Distribution Sweep: competitive ratio per IAT pattern"
    )
    parser.add_argument(
        "--output-dir", "-o", type=str, default="results",
        help="Directory to save plots (default: results)"
    )
    parser.add_argument(
        "--tail-time", "-T", type=int, default=DEFAULT_TAIL_TIME,
        help=f"Tail time (default: {DEFAULT_TAIL_TIME})"
    )
    parser.add_argument(
        "--length", "-n", type=int, default=DEFAULT_TRACE_LENGTH,
        help=f"Arrivals per trace (default: {DEFAULT_TRACE_LENGTH})"
    )
    parser.add_argument(
        "--seed", "-s", type=int, default=DEFAULT_SEED,
        help=f"Random seed (default: {DEFAULT_SEED})"
    )

    args = parser.parse_args()

    print("=" * 60)
    print(" Arrival Distribution Sweep Experiment")
    print("=" * 60)
    print(f"\nDistributions: {list(DISTRIBUTIONS)}")
    print(f"Tail time: {args.tail_time}, seed: {args.seed}")
    print()

    print("Running distribution sweep...")
    results = run_distribution_sweep(
        tail_time=args.tail_time,
        length=args.length,
        seed=args.seed,
    )

    print_summary_table(results)

    print("\nGenerating visualizations...")
    plot_ratio_by_distribution(
        results,
        str(Path(args.output_dir) / "distribution_ratio.png")
    )

    print("\n" + "=" * 60)
    print(" Experiment Complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
