"""Elementwise operations and reductions shared by the baseline and the trainer.

Image stacks use the ``(rows, cols, samples)`` layout: the sample axis is
last.  All functions are pure and never modify their inputs.
"""

from __future__ import annotations

from collections.abc import Sequence

import torch

from sgd_digits.errors import EmptyInputError, ShapeMismatch

# Per-sample images are 2-D; a stack adds the sample axis at the end.
_IMAGE_AXES = (0, 1)

ArrayLike = torch.Tensor | Sequence[float] | Sequence[Sequence[float]]


def _as_tensor(a: ArrayLike) -> torch.Tensor:
    return a if isinstance(a, torch.Tensor) else torch.as_tensor(a)


def _require_same_shape(a: torch.Tensor, b: torch.Tensor, op: str) -> None:
    if a.shape != b.shape:
        msg = f"{op}: shapes {tuple(a.shape)} and {tuple(b.shape)} differ"
        raise ShapeMismatch(msg)


def _signed(a: torch.Tensor) -> torch.Tensor:
    # uint8 pixels would wrap around on subtraction.
    if a.is_floating_point() or a.is_complex() or a.dtype.is_signed:
        return a
    return a.to(torch.int64)


def subtract(a: ArrayLike, b: ArrayLike) -> torch.Tensor:
    """Elementwise ``a - b``; shapes must match exactly.

    Unsigned and boolean inputs are widened to ``int64`` first.
    """
    a, b = _signed(_as_tensor(a)), _signed(_as_tensor(b))
    _require_same_shape(a, b, "subtract")
    return a - b


def absolute(a: ArrayLike) -> torch.Tensor:
    return _as_tensor(a).abs()


def square(a: ArrayLike) -> torch.Tensor:
    a = _as_tensor(a)
    return a * a


def elementwise_abs_diff(a: ArrayLike, b: ArrayLike) -> torch.Tensor:
    """Return ``|a_i - b_i|`` for two arrays of identical shape."""
    return absolute(subtract(a, b))


def mean_over_axes(a: ArrayLike, axes: int | Sequence[int]) -> torch.Tensor:
    """Average ``a`` over ``axes`` and drop them from the result.

    Raises:
        EmptyInputError: If any reduced axis has length zero.
    """
    a = _as_tensor(a)
    dims = (axes,) if isinstance(axes, int) else tuple(axes)
    if not dims:
        msg = "mean_over_axes requires at least one axis"
        raise ValueError(msg)
    for dim in dims:
        if a.shape[dim] == 0:
            msg = f"Cannot average over axis {dim} of shape {tuple(a.shape)}: it is empty"
            raise EmptyInputError(msg)
    if not a.is_floating_point():
        a = a.to(torch.get_default_dtype())
    return a.mean(dim=dims)


def _broadcast_image(a: torch.Tensor, b: torch.Tensor) -> tuple[torch.Tensor, torch.Tensor]:
    """Pair an image with a stack, or two operands of equal shape.

    A single 2-D image broadcasts across the sample axis of a 3-D stack.  No
    other broadcasting is performed.
    """
    if a.shape == b.shape and a.ndim in (2, 3):
        return a, b
    if a.ndim == 3 and b.ndim == 2 and a.shape[:2] == b.shape:
        return a, b.unsqueeze(-1).expand_as(a)
    if a.ndim == 2 and b.ndim == 3 and b.shape[:2] == a.shape:
        return a.unsqueeze(-1).expand_as(b), b
    msg = (
        f"Cannot compare images of shape {tuple(a.shape)} and {tuple(b.shape)}; "
        "expected (rows, cols) or (rows, cols, samples)"
    )
    raise ShapeMismatch(msg)


def mean_absolute_distance(a: ArrayLike, b: ArrayLike) -> torch.Tensor:
    """Mean ``|a - b|`` over the row and column axes.

    Returns one value per sample: shape ``(samples,)`` when either operand is
    a stack, a 0-d tensor when both are single images.
    """
    a, b = _broadcast_image(_as_tensor(a), _as_tensor(b))
    return mean_over_axes(elementwise_abs_diff(a, b), _IMAGE_AXES)


def root_mean_squared_distance(a: ArrayLike, b: ArrayLike) -> torch.Tensor:
    """``sqrt(mean((a - b)^2))`` over every axis, as a 0-d tensor."""
    a, b = _as_tensor(a), _as_tensor(b)
    diff = square(subtract(a, b))
    if diff.ndim == 0:
        # Scalars have no axis to average over.
        return (diff if diff.is_floating_point() else diff.to(torch.get_default_dtype())).sqrt()
    return mean_over_axes(diff, tuple(range(diff.ndim))).sqrt()
