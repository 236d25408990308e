"""
Visualization module for the break-even bundling simulator.

This module plots the results of a weight sweep. The key figure shows the
competitive ratio of the online policy against alpha; the others break the
online cost into its components and compare bundle counts with the optimum.

Expected Visualization Story:
    - The ratio stays bounded across many orders of magnitude of alpha
    - Energy dominates at small alpha, delay at large alpha
    - The online policy grants more often than the optimum as alpha grows
"""

import matplotlib.pyplot as plt
import numpy as np
from typing import List, Optional, Sequence
from pathlib import Path

from bundlesim.config import DEFAULT_ALPHAS, DEFAULT_SEED, DEFAULT_TAIL_TIME, DEFAULT_TRACE_LENGTH
from bundlesim.main import SweepResult, run_sweep
from bundlesim.workload import DISTRIBUTIONS, generate_iat


# Style configuration for publication-quality plots
plt.rcParams.update({
    'font.family': 'serif',
    'font.size': 11,
    'axes.titlesize': 14,
    'axes.labelsize': 12,
    'xtick.labelsize': 10,
    'ytick.labelsize': 10,
    'legend.fontsize': 10,
    'figure.titlesize': 16,
    'figure.dpi': 150,
    'savefig.dpi': 300,
    'savefig.bbox': 'tight',
})

# Color palette (colorblind-friendly)
COLORS = {
    'online': '#0072B2',    # Blue
    'offline': '#E69F00',   # Orange
    'default': '#CC79A7',   # Pink
    'latency': '#009E73',   # Green
    'grid': '#CCCCCC',      # Light gray
}


def _alphas(results: Sequence[SweepResult]) -> np.ndarray:
    return np.array([r.alpha for r in results], dtype=float)


def _save(fig: plt.Figure, output_path: str, show: bool) -> None:
    fig.tight_layout()
    fig.savefig(output_path)
    print(f"Saved: {output_path}")
    if show:
        plt.show()
    plt.close(fig)


def plot_competitive_ratio(
    results: Sequence[SweepResult],
    output_path: str = "competitive_ratio.png",
    show: bool = False
) -> None:
    """
    Plot online / offline total cost against the weight.

    Args:
        results: Sweep results, one per weight
        output_path: Where to save the figure
        show: Whether to display interactively
    """
    fig, ax = plt.subplots(figsize=(10, 6))

    alphas = _alphas(results)
    ratios = np.array([r.competitive_ratio for r in results])

    ax.plot(
        alphas, ratios,
        color=COLORS['online'],
        marker='o',
        markersize=8,
        linewidth=2.5,
        label='Break-even (online)'
    )
    ax.axhline(y=1.0, color=COLORS['offline'], linestyle='--', linewidth=1.5, label='Offline optimum')

    ax.set_xscale('log')
    ax.set_xlabel('Delay Weight (alpha)', fontweight='bold')
    ax.set_ylabel('Competitive Ratio', fontweight='bold')
    ax.set_title('Break-even Bundling vs Offline Optimum', fontweight='bold', pad=15)
    ax.legend(loc='upper left', framealpha=0.9)
    ax.grid(True, alpha=0.3, color=COLORS['grid'])
    ax.set_ylim(bottom=0.9, top=max(2.0, float(ratios.max()) * 1.1))

    worst = int(np.argmax(ratios))
    ax.annotate(
        f'worst: {ratios[worst]:.2f}',
        xy=(alphas[worst], ratios[worst]),
        xytext=(0, 12),
        textcoords='offset points',
        ha='center',
        fontsize=9,
    )

    _save(fig, output_path, show)


def plot_cost_breakdown(
    results: Sequence[SweepResult],
    output_path: str = "cost_breakdown.png",
    show: bool = False
) -> None:
    """Plot online energy, latency and the default cost against the weight."""
    fig, ax = plt.subplots(figsize=(10, 6))

    alphas = _alphas(results)
    series = [
        ('Energy (online)', [r.online.energy for r in results], COLORS['online'], 'o'),
        ('Weighted delay (online)', [r.online.latency for r in results], COLORS['latency'], 's'),
        ('Always-on default', [r.online.default_cost for r in results], COLORS['default'], '^'),
        ('Offline total', [r.offline.total_cost for r in results], COLORS['offline'], 'D'),
    ]
    for label, values, color, marker in series:
        ax.plot(alphas, values, color=color, marker=marker, linewidth=2, label=label)

    ax.set_xscale('log')
    ax.set_yscale('symlog')
    ax.set_xlabel('Delay Weight (alpha)', fontweight='bold')
    ax.set_ylabel('Cost', fontweight='bold')
    ax.set_title('Online Cost Components', fontweight='bold', pad=15)
    ax.legend(loc='upper left', framealpha=0.9)
    ax.grid(True, alpha=0.3, color=COLORS['grid'])

    _save(fig, output_path, show)


def plot_grant_counts(
    results: Sequence[SweepResult],
    output_path: str = "grant_counts.png",
    show: bool = False
) -> None:
    """Bar chart of bundle counts, online next to offline, per weight."""
    fig, ax = plt.subplots(figsize=(12, 5))

    x = np.arange(len(results))
    width = 0.35
    online = [r.online.grant_count for r in results]
    offline = [r.offline.grant_count for r in results]

    ax.bar(x - width / 2, online, width, label='Online', color=COLORS['online'], alpha=0.8)
    ax.bar(x + width / 2, offline, width, label='Offline', color=COLORS['offline'], alpha=0.8)

    ax.set_xticks(x)
    ax.set_xticklabels([f'{r.alpha:g}' for r in results])
    ax.set_xlabel('Delay Weight (alpha)', fontweight='bold')
    ax.set_ylabel('Grants', fontweight='bold')
    ax.set_title('Bundles Granted per Weight', fontweight='bold', pad=15)
    ax.legend(loc='upper left', framealpha=0.9)
    ax.grid(True, alpha=0.3, axis='y', color=COLORS['grid'])

    _save(fig, output_path, show)


def generate_all_plots(
    results: Optional[List[SweepResult]] = None,
    output_dir: str = "results",
    distribution: str = "normal",
    tail_time: int = DEFAULT_TAIL_TIME,
    length: int = DEFAULT_TRACE_LENGTH,
    seed: int = DEFAULT_SEED,
    show: bool = False
) -> None:
    """
    Generate all visualization plots.

    Args:
        results: Pre-computed sweep (if None, runs one)
        output_dir: Directory to save plots
        distribution: IAT distribution for a fresh sweep
        tail_time: Tail time for a fresh sweep
        length: Trace length for a fresh sweep
        seed: Seed for a fresh sweep
        show: Whether to display plots interactively
    """
    if results is None:
        print("Running sweep for plotting...")
        iat = generate_iat(distribution, length=length, tail_time=tail_time, seed=seed)
        results = run_sweep(tail_time, iat, DEFAULT_ALPHAS)

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    print("\nGenerating plots...")

    plot_competitive_ratio(results, str(output_path / "competitive_ratio.png"), show)
    plot_cost_breakdown(results, str(output_path / "cost_breakdown.png"), show)
    plot_grant_counts(results, str(output_path / "grant_counts.png"), show)

    print("\nAll plots generated successfully!")


def main() -> None:
    """Main entry point for plotting with CLI arguments."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Generate visualization plots for a break-even bundling sweep"
    )
    parser.add_argument(
        "--output-dir", "-o", type=str, default="results",
        help="Directory to save plots (default: results)"
    )
    parser.add_argument(
        "--distribution", "-d", choices=DISTRIBUTIONS, default="normal",
        help="IAT distribution (default: normal)"
    )
    parser.add_argument(
        "--tail-time", "-T", type=int, default=DEFAULT_TAIL_TIME,
        help=f"Tail time (default: {DEFAULT_TAIL_TIME})"
    )
    parser.add_argument(
        "--seed", "-s", type=int, default=DEFAULT_SEED,
        help=f"Random seed (default: {DEFAULT_SEED})"
    )
    parser.add_argument(
        "--show", action="store_true",
        help="Display plots interactively"
    )

    args = parser.parse_args()

    generate_all_plots(
        output_dir=args.output_dir,
        distribution=args.distribution,
        tail_time=args.tail_time,
        seed=args.seed,
        show=args.show,
    )


if __name__ == "__main__":
    main()
