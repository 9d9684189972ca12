"""Capability protocols shared by the trainer, models and losses."""

from collections.abc import Callable
from typing import Protocol

import torch

# Loss of the composed ``loss(predict(params, inputs), targets)`` as a
# function of the Parameter Vector alone.
Objective = Callable[[torch.Tensor], torch.Tensor]

# Either a constant step size or a schedule indexed by step number.
LearningRate = float | Callable[[int], float]


class PredictFn(Protocol):
    """Model output for a Parameter Vector; differentiable in ``params``."""

    def __call__(self, params: torch.Tensor, inputs: torch.Tensor) -> torch.Tensor: ...


class LossFn(Protocol):
    """Scalar loss of model outputs against targets."""

    def __call__(self, outputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor: ...


class GradientFn(Protocol):
    """Gradient of ``objective`` at ``params``, one partial per parameter."""

    def __call__(self, objective: Objective, params: torch.Tensor) -> torch.Tensor: ...
