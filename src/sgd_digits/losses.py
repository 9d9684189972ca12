"""Loss functions for SGD training."""

from __future__ import annotations

import torch

from sgd_digits.config import LossForm
from sgd_digits.errors import ShapeMismatch
from sgd_digits.tensor_ops import absolute, square, subtract
from sgd_digits.types import LossFn


def _residuals(outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
    if outputs.shape != targets.shape:
        msg = (
            f"Loss operands differ in shape: outputs {tuple(outputs.shape)}, "
            f"targets {tuple(targets.shape)}"
        )
        raise ShapeMismatch(msg)
    return subtract(outputs, targets)


def mse_loss(outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
    """Mean squared error, ``mean((outputs - targets)^2)``."""
    return square(_residuals(outputs, targets)).mean()


def mae_loss(outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
    """Mean absolute error, ``mean(|outputs - targets|)``."""
    return absolute(_residuals(outputs, targets)).mean()


def build_loss_fn(name: LossForm | str) -> LossFn:
    """Factory for loss functions.

    Parameters
    ----------
    name:
        Loss form: ``"mse"`` or ``"mae"``.

    Returns
    -------
    LossFn
        A pure ``(outputs, targets) -> scalar`` function.
    """
    if name == LossForm.MSE:
        return mse_loss
    if name == LossForm.MAE:
        return mae_loss
    msg = f"Unknown loss function: {name!r}. Use 'mse' or 'mae'."
    raise ValueError(msg)
