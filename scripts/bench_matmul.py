#!/usr/bin/env python3
"""Time the naive loop matmul against ``torch.matmul``.

Reports the multiply-add count of each problem size next to the measured
latency, and checks that both implementations agree.

Usage::

    python scripts/bench_matmul.py
    python scripts/bench_matmul.py --sizes 4 8 16 32 --runs 5
"""

from __future__ import annotations

import argparse
import statistics
import sys
import time
from pathlib import Path

import torch
from loguru import logger
from rich.console import Console
from rich.table import Table
from tqdm import tqdm

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from sgd_digits.matmul import matmul, matmul_cost  # noqa: E402


def _median_ms(fn, runs: int) -> float:  # noqa: ANN001
    times = []
    for _ in range(runs):
        t_start = time.perf_counter()
        fn()
        times.append(time.perf_counter() - t_start)
    return statistics.median(times) * 1000


def benchmark(sizes: list[int], runs: int, seed: int) -> list[dict[str, object]]:
    generator = torch.Generator().manual_seed(seed)
    results: list[dict[str, object]] = []
    for n in tqdm(sizes, desc="matmul"):
        a = torch.randn(n, n, generator=generator, dtype=torch.float64)
        b = torch.randn(n, n, generator=generator, dtype=torch.float64)

        naive = matmul(a, b)
        if not torch.allclose(naive, a @ b):
            max_diff = (naive - a @ b).abs().max().item()
            logger.error(f"n={n}: naive result differs from torch.matmul by {max_diff:.3e}")

        results.append(
            {
                "n": n,
                "multiply_adds": matmul_cost(a, b),
                "naive_ms": _median_ms(lambda: matmul(a, b), runs),
                "torch_ms": _median_ms(lambda: torch.matmul(a, b), runs),
            }
        )
    return results


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark naive matmul")
    parser.add_argument("--sizes", type=int, nargs="+", default=[4, 8, 16, 24])
    parser.add_argument("--runs", type=int, default=3)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    results = benchmark(args.sizes, args.runs, args.seed)

    table = Table(title="Naive vs torch.matmul", header_style="bold magenta")
    table.add_column("n", justify="right", style="cyan")
    table.add_column("Multiply-adds", justify="right")
    table.add_column("Naive (ms)", justify="right", style="yellow")
    table.add_column("torch (ms)", justify="right", style="green")
    table.add_column("Slowdown", justify="right")
    for row in results:
        naive_ms = float(row["naive_ms"])  # type: ignore[arg-type]
        torch_ms = float(row["torch_ms"])  # type: ignore[arg-type]
        table.add_row(
            str(row["n"]),
            f"{row['multiply_adds']:,}",
            f"{naive_ms:.3f}",
            f"{torch_ms:.4f}",
            f"{naive_ms / torch_ms:,.0f}x" if torch_ms > 0 else "-",
        )
    Console().print(table)


if __name__ == "__main__":
    main()
