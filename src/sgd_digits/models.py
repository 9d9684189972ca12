"""Prediction functions the SGD trainer can fit.

A model here is just a callable ``(params, inputs) -> outputs`` plus the
length of the Parameter Vector it expects.  Models hold no parameters of
their own; the trainer owns the Parameter Vector.
"""

from __future__ import annotations

from collections.abc import Callable

import torch

from sgd_digits.config import ModelForm
from sgd_digits.errors import ShapeMismatch

MatmulFn = Callable[[torch.Tensor, torch.Tensor], torch.Tensor]


def _check_param_count(params: torch.Tensor, expected: int, name: str) -> None:
    if params.ndim != 1 or params.shape[0] != expected:
        msg = f"{name} expects a Parameter Vector of length {expected}, got shape {tuple(params.shape)}"
        raise ShapeMismatch(msg)


class QuadraticModel:
    """``params[0] * t^2 + params[1] * t + params[2]`` evaluated at every ``t``."""

    num_params = 3

    def __call__(self, params: torch.Tensor, inputs: torch.Tensor) -> torch.Tensor:
        _check_param_count(params, self.num_params, "QuadraticModel")
        a, b, c = params
        return a * inputs**2 + b * inputs + c

    def init_params(
        self, generator: torch.Generator | None = None, dtype: torch.dtype | None = None
    ) -> torch.Tensor:
        return torch.randn(self.num_params, generator=generator, dtype=dtype)


class LinearPerPixelModel:
    """One weight per pixel plus a bias, applied to each image of a stack.

    Inputs are ``(rows, cols, samples)``; outputs have shape ``(samples,)``.
    The Parameter Vector is laid out as ``rows * cols`` row-major weights
    followed by the bias.  Pass ``matmul_fn=sgd_digits.matmul.matmul`` to run
    the product through the naive loop implementation.
    """

    def __init__(self, rows: int, cols: int, matmul_fn: MatmulFn = torch.matmul) -> None:
        self.rows = rows
        self.cols = cols
        self.matmul_fn = matmul_fn

    @property
    def num_params(self) -> int:
        return self.rows * self.cols + 1

    def __call__(self, params: torch.Tensor, inputs: torch.Tensor) -> torch.Tensor:
        _check_param_count(params, self.num_params, "LinearPerPixelModel")
        if inputs.ndim != 3 or tuple(inputs.shape[:2]) != (self.rows, self.cols):
            msg = (
                f"LinearPerPixelModel expects ({self.rows}, {self.cols}, samples) inputs, "
                f"got shape {tuple(inputs.shape)}"
            )
            raise ShapeMismatch(msg)
        # (rows, cols, samples) -> (samples, rows * cols)
        flat = inputs.permute(2, 0, 1).reshape(inputs.shape[2], -1).to(params.dtype)
        weights, bias = params[:-1], params[-1]
        return self.matmul_fn(flat, weights.unsqueeze(1)).squeeze(1) + bias

    def init_params(
        self, generator: torch.Generator | None = None, dtype: torch.dtype | None = None
    ) -> torch.Tensor:
        return torch.randn(self.num_params, generator=generator, dtype=dtype)


def build_model(
    form: ModelForm | str, image_shape: tuple[int, int] | None = None
) -> QuadraticModel | LinearPerPixelModel:
    """Factory for prediction functions.

    Parameters
    ----------
    form:
        ``"quadratic"`` or ``"linear-per-pixel"``.
    image_shape:
        ``(rows, cols)`` of the images; required for ``"linear-per-pixel"``.
    """
    if form == ModelForm.QUADRATIC:
        return QuadraticModel()
    if form == ModelForm.LINEAR_PER_PIXEL:
        if image_shape is None:
            msg = "linear-per-pixel models need image_shape=(rows, cols)"
            raise ValueError(msg)
        return LinearPerPixelModel(*image_shape)
    msg = f"Unknown model form: {form!r}. Use 'quadratic' or 'linear-per-pixel'."
    raise ValueError(msg)
