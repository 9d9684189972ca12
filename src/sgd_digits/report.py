"""Rich console tables summarising baseline and training runs."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table

from sgd_digits.baseline import BaselineReport
from sgd_digits.trainer import TrainingResult


def loss_table(result: TrainingResult, every: int = 1) -> Table:
    """Per-epoch loss, one row every ``every`` epochs plus the final loss."""
    table = Table(
        title="Training Loss",
        header_style="bold magenta",
        box=box.SQUARE,
        show_lines=False,
    )
    table.add_column("Epoch", justify="right", style="cyan")
    table.add_column("Loss", justify="right", style="green")

    for epoch, loss in enumerate(result.losses):
        if epoch % max(every, 1) == 0:
            table.add_row(str(epoch), f"{loss:.6g}")
    table.add_row("final", f"{result.final_loss:.6g}", style="bold")
    return table


def baseline_table(report: BaselineReport) -> Table:
    table = Table(
        title="Pixel-Similarity Baseline",
        header_style="bold magenta",
        box=box.SQUARE,
        show_lines=True,
    )
    table.add_column("Class", style="cyan")
    table.add_column("Accuracy", justify="right", style="yellow")

    table.add_row(report.class_a, f"{report.accuracy_a * 100:.1f}%")
    table.add_row(report.class_b, f"{report.accuracy_b * 100:.1f}%")
    table.add_row("overall", f"{report.overall * 100:.1f}%")
    return table


def print_table(table: Table, console: Console | None = None) -> None:
    (console or Console()).print(table)
