"""Exception and warning types raised by sgd_digits."""

from __future__ import annotations

import torch


class ShapeMismatch(ValueError):
    """Operand shapes are incompatible for an elementwise or matrix operation."""


class DimensionMismatch(ShapeMismatch):
    """Inner dimensions of a matrix product differ."""


class EmptyInputError(ValueError):
    """A reduction was requested over zero elements."""


class DivergenceWarning(RuntimeWarning):
    """Loss increased for several consecutive optimization steps."""


class TrainerStateError(RuntimeError):
    """A trainer transition was requested from the wrong state."""


class TrainingAborted(RuntimeError):
    """A training run stopped because a step raised.

    The original exception is chained as ``__cause__``.  ``params`` holds the
    Parameter Vector after the last step that completed, and ``losses`` the
    per-epoch losses recorded up to that point.
    """

    def __init__(
        self, epoch: int, params: torch.Tensor, losses: list[float]
    ) -> None:
        super().__init__(
            f"Training aborted at epoch {epoch} after {len(losses)} completed steps"
        )
        self.epoch = epoch
        self.params = params
        self.losses = losses
