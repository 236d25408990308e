"""
Test suite for the components around the simulation core.

This module tests:
    1. IAT generation (constant, normal, log-normal, bursty)
    2. File trace logs
    3. Sweep driver and CLI
    4. Plot generation
"""

import statistics

import matplotlib
matplotlib.use("Agg")

import pytest

# Import modules to test
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from bundlesim.config import (
    ARRIVAL_LOG_NAME,
    BURSTY_SEQUENCE_LENGTH,
    DELAY_LOG_NAME,
    GRANT_LOG_NAME,
    MAX_BURST_SIZE,
    MIN_IAT,
)

from bundlesim.workload import (
    DISTRIBUTIONS,
    IATGenerator,
    generate_iat,
    summarize_iat,
)

from bundlesim.tracelog import FileTraceSink, NullTraceSink
from bundlesim.simulator import Simulator, run_online
from bundlesim.offline import run_offline
from bundlesim.main import SUMMARY_COLUMNS, main, run_sweep, run_weight, write_summary
from bundlesim.plotter import generate_all_plots


T = 200


# =============================================================================
# Tests for workload.py: IAT Generation
# =============================================================================

class TestIATGenerator:
    """Tests for the synthetic IAT generators."""

    def test_constant(self) -> None:
        gen = IATGenerator(seed=1)
        assert gen.constant(4, 75) == [75, 75, 75, 75]

    def test_constant_clamps(self) -> None:
        assert IATGenerator().constant(2, 0) == [MIN_IAT, MIN_IAT]

    def test_invalid_length(self) -> None:
        gen = IATGenerator()
        with pytest.raises(ValueError, match="must be >= 1"):
            gen.constant(0)
        with pytest.raises(ValueError, match="must be >= 1"):
            gen.normal(0)
        with pytest.raises(ValueError, match="must be >= 1"):
            gen.log_normal(-3)

    def test_reproducibility(self) -> None:
        """Verify same seed produces same trace."""
        for kind in DISTRIBUTIONS:
            assert generate_iat(kind, length=50, seed=42) == generate_iat(kind, length=50, seed=42)

    def test_different_seeds_different_results(self) -> None:
        assert IATGenerator(seed=42).normal(50) != IATGenerator(seed=123).normal(50)

    def test_all_gaps_positive_integers(self) -> None:
        """Verify every generator meets the simulator's input contract."""
        gen = IATGenerator(seed=7)
        traces = [
            gen.normal(500, mean=20, std=80),
            gen.log_normal(500),
            gen.bursty(),
        ]
        for iat in traces:
            assert all(isinstance(gap, int) for gap in iat)
            assert min(iat) >= MIN_IAT

    def test_normal_lengths(self) -> None:
        gen = IATGenerator(seed=3)
        assert len(gen.normal(37)) == 37
        assert len(gen.log_normal(41)) == 41

    def test_log_normal_mean(self) -> None:
        """Verify the sample mean is close to the requested gap mean."""
        iat = IATGenerator(seed=11).log_normal(20000, mean=200.0, std=80.0)
        assert abs(statistics.mean(iat) - 200.0) < 200.0 * 0.05

    def test_log_normal_invalid_mean(self) -> None:
        with pytest.raises(ValueError, match="Mean must be > 0"):
            IATGenerator().log_normal(10, mean=0.0)

    def test_bursty_shape(self) -> None:
        """Verify the last cycle overshoots the sequence length by at most one cycle."""
        iat = IATGenerator(seed=5).bursty()
        assert BURSTY_SEQUENCE_LENGTH < len(iat) <= BURSTY_SEQUENCE_LENGTH + MAX_BURST_SIZE + 2
        assert iat.count(1) >= 1

    def test_bursty_single_cycle(self) -> None:
        iat = IATGenerator(seed=2).bursty(sequence_length=0, max_burst=1)
        assert len(iat) == 3
        assert iat[1] == 1

    def test_unknown_distribution(self) -> None:
        with pytest.raises(ValueError, match="Unknown IAT distribution"):
            generate_iat("poisson")

    def test_factory_passes_parameters(self) -> None:
        assert generate_iat("constant", length=3, interval=9) == [9, 9, 9]

    def test_summarize(self) -> None:
        assert summarize_iat([1, 50, 200, 201, 900], 200) == (1, 3, 2)


# =============================================================================
# Tests for tracelog.py
# =============================================================================

class TestFileTraceSink:
    """Tests for the file-backed trace logs."""

    def test_logs_written(self, tmp_path: Path) -> None:
        iat = [100, 100, 100]
        with FileTraceSink(tmp_path, iat, record_grants=True) as sink:
            sim = Simulator(T, iat, trace=sink)
            sim.set_weight(0.01)
            sim.initialize()
            sim.run()

        assert (tmp_path / ARRIVAL_LOG_NAME).read_text() == "100\n100\n100\n"

        delay_log = (tmp_path / DELAY_LOG_NAME).read_text()
        assert "Alpha = 0.01" in delay_log
        assert "6766\t6666\t6566\t" in delay_log

        grant_log = (tmp_path / GRANT_LOG_NAME).read_text()
        assert "6866\t" in grant_log

    def test_one_section_per_run(self, tmp_path: Path) -> None:
        iat = [100, 100, 100]
        sink = FileTraceSink(tmp_path, iat)
        run_sweep(T, iat, [0.01, 1.0], trace=sink)
        sink.close()

        delay_log = (tmp_path / DELAY_LOG_NAME).read_text()
        assert delay_log.count("Alpha = ") == 2
        assert not (tmp_path / GRANT_LOG_NAME).exists()

    def test_trace_does_not_change_results(self, tmp_path: Path) -> None:
        iat = IATGenerator(seed=4).bursty(100)
        with FileTraceSink(tmp_path, iat, record_grants=True) as sink:
            traced = run_online(T, iat, 0.03, trace=sink)
        assert traced == run_online(T, iat, 0.03, trace=NullTraceSink())


# =============================================================================
# Tests for main.py: Sweep Driver
# =============================================================================

class TestSweep:
    """Tests for the weight sweep driver."""

    def test_run_weight(self) -> None:
        result = run_weight(T, [100, 100, 100], 0.01)
        assert result.online == run_online(T, [100, 100, 100], 0.01)
        assert result.offline == run_offline(T, [100, 100, 100], 0.01)
        assert result.competitive_ratio == pytest.approx(399.98 / 203.0)

    def test_results_in_alpha_order(self) -> None:
        alphas = [10.0, 0.001, 0.5]
        results = run_sweep(T, [100, 100, 100], alphas)
        assert [r.alpha for r in results] == alphas

    def test_parallel_matches_sequential(self) -> None:
        iat = IATGenerator(seed=13).normal(40)
        alphas = [0.001, 0.1, 1.0]
        sequential = run_sweep(T, iat, alphas, parallel=False)
        parallel = run_sweep(T, iat, alphas, parallel=True, max_workers=2)
        assert parallel == sequential

    def test_write_summary(self, tmp_path: Path) -> None:
        results = run_sweep(T, [100, 100, 100], [0.01, 1.0])
        path = write_summary(results, tmp_path / "out" / "summary.tsv")

        lines = path.read_text().splitlines()
        assert lines[0].split("\t") == list(SUMMARY_COLUMNS)
        assert len(lines) == 3
        first = lines[1].split("\t")
        assert float(first[0]) == 0.01
        assert int(first[6]) == 1

    def test_cli(self, tmp_path: Path, capsys) -> None:
        output = tmp_path / "log.txt"
        main([
            "--distribution", "constant",
            "--length", "5",
            "--alphas", "0.01", "1",
            "--output", str(output),
            "--log-dir", str(tmp_path / "logs"),
            "--no-parallel",
        ])

        captured = capsys.readouterr()
        assert "Competitive Ratio by Weight" in captured.out
        assert len(output.read_text().splitlines()) == 3
        assert (tmp_path / "logs" / ARRIVAL_LOG_NAME).exists()


# =============================================================================
# Tests for plotter.py
# =============================================================================

class TestPlotter:
    """Smoke tests for figure generation."""

    def test_generate_all_plots(self, tmp_path: Path) -> None:
        results = run_sweep(T, IATGenerator(seed=1).normal(30), [0.001, 0.1, 1.0, 10.0])
        generate_all_plots(results=results, output_dir=str(tmp_path))

        for name in ["competitive_ratio.png", "cost_breakdown.png", "grant_counts.png"]:
            assert (tmp_path / name).stat().st_size > 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
