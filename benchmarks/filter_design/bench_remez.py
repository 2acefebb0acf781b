"""Benchmarks for Parks-McClellan filter design.

This module compares torchremez against the scipy.signal.remez baseline.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

import numpy as np
import torch

# scipy imports - handle optional dependency
try:
    from scipy import signal as scipy_signal

    SCIPY_AVAILABLE = True
except ImportError:
    SCIPY_AVAILABLE = False

from torchremez.filter_design import (
    FilterSpecification,
    batched_remez,
    remez,
    remez_design,
)

_UNITS = ((1e-6, 1e9, "ns"), (1e-3, 1e6, "us"), (1.0, 1e3, "ms"))


@dataclass
class Timing:
    """Wall-clock statistics of repeated calls, in seconds."""

    mean: float
    std: float
    best: float

    def __str__(self) -> str:
        return f"{format_time(self.mean)} +/- {format_time(self.std)}"


def time_calls(
    func: Callable[..., Any], warmup: int, iterations: int
) -> Timing:
    """Time ``iterations`` calls of ``func`` after ``warmup`` untimed ones."""
    for _ in range(warmup):
        func()

    samples = np.empty(iterations)
    for i in range(iterations):
        start = time.perf_counter()
        func()
        samples[i] = time.perf_counter() - start

    return Timing(
        mean=float(samples.mean()),
        std=float(samples.std()),
        best=float(samples.min()),
    )


def format_time(seconds: float) -> str:
    for limit, scale, unit in _UNITS:
        if seconds < limit:
            return f"{seconds * scale:.3f}{unit}"
    return f"{seconds:.3f}s"


def print_comparison(
    name: str, timing: Timing, baseline: Optional[Timing] = None
) -> None:
    """Print a torchremez timing, and the scipy ratio when available."""
    print(f"\n{name}")
    print("-" * len(name))
    print(f"  torchremez: {timing}  (best {format_time(timing.best)})")
    if baseline is None:
        return

    print(f"  scipy:      {baseline}  (best {format_time(baseline.best)})")
    ratio = timing.mean / baseline.mean
    print(f"  torchremez / scipy: {ratio:.2f}")


class BenchRemez:
    """Benchmarks for Parks-McClellan design."""

    def __init__(self, warmup: int = 3, iterations: int = 10):
        self.warmup = warmup
        self.iterations = iterations

    def _time(self, func: Callable[..., Any]) -> Timing:
        return time_calls(func, self.warmup, self.iterations)

    def _compare(
        self,
        name: str,
        num_taps: int,
        bands: Sequence[float],
        desired: Sequence[float],
    ) -> None:
        timing = self._time(lambda: remez(num_taps, bands, desired))

        baseline = None
        if SCIPY_AVAILABLE:
            baseline = self._time(
                lambda: scipy_signal.remez(num_taps, bands, desired, fs=1.0)
            )

        print_comparison(f"{name} (num_taps={num_taps})", timing, baseline)

    def bench_remez(self, num_taps: int = 51) -> None:
        """Benchmark a lowpass design against scipy.signal.remez.

        Parameters
        ----------
        num_taps : int, optional
            Number of filter taps. Default is 51.
        """
        self._compare("lowpass", num_taps, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0])

    def bench_bandpass(self, num_taps: int = 65) -> None:
        """Benchmark a three-band bandpass design."""
        self._compare(
            "bandpass",
            num_taps,
            [0.0, 0.1, 0.2, 0.35, 0.4, 0.5],
            [0.0, 1.0, 0.0],
        )

    def bench_batched(self, batch_size: int = 8, num_taps: int = 31) -> None:
        """Benchmark batched_remez over varying transition bands."""
        edges = torch.zeros(batch_size, 4, dtype=torch.float64)
        edges[:, 1] = torch.linspace(0.1, 0.3, batch_size)
        edges[:, 2] = edges[:, 1] + 0.05
        edges[:, 3] = 0.5

        timing = self._time(lambda: batched_remez(num_taps, edges, [1.0, 0.0]))

        print_comparison(
            f"batched_remez (batch={batch_size}, num_taps={num_taps})",
            timing,
        )

    def report_iterations(self) -> None:
        """Print the exchange iterations needed per filter length."""
        print("\n--- Exchange Iterations ---")
        for num_taps in [11, 31, 51, 101, 201]:
            spec = FilterSpecification.create(
                num_taps, [0.0, 0.2, 0.3, 0.5], [1.0, 0.0]
            )
            result = remez_design(spec)
            print(
                f"  num_taps={num_taps:4d}: {result.iterations:2d} iterations, "
                f"deviation={abs(result.deviation):.3e}"
            )

    def run_all(self) -> None:
        """Run all Remez benchmarks."""
        print("=" * 60)
        print("REMEZ BENCHMARKS")
        print("=" * 60)

        self.bench_remez()
        self.bench_bandpass()
        self.bench_batched()
        self.report_iterations()

    def run_scaling(self) -> None:
        """Run scaling benchmarks with varying filter length."""
        print("=" * 60)
        print("SCALING BENCHMARKS")
        print("=" * 60)

        print("\n--- Remez Taps Scaling ---")
        for num_taps in [11, 31, 51, 101, 201]:
            self.bench_remez(num_taps=num_taps)


if __name__ == "__main__":
    bench = BenchRemez(warmup=5, iterations=20)
    bench.run_all()
    print("\n")
    bench.run_scaling()
