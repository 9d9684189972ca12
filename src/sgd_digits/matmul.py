"""Dense matrix multiplication using plain Python loops.

Intentionally slow: this is the baseline whose cost, ``ar * ac * bc`` scalar
multiply-adds, is itself something to measure.  Works under autograd, so it
can be used inside a prediction function.
"""

from __future__ import annotations

import torch

from sgd_digits.errors import DimensionMismatch, ShapeMismatch


def _check_operands(a: torch.Tensor, b: torch.Tensor) -> None:
    if a.ndim != 2 or b.ndim != 2:
        msg = f"matmul expects 2-D operands, got shapes {tuple(a.shape)} and {tuple(b.shape)}"
        raise ShapeMismatch(msg)
    if a.shape[1] != b.shape[0]:
        msg = f"Dimension mismatch: A.shape[1]={a.shape[1]} != B.shape[0]={b.shape[0]}"
        raise DimensionMismatch(msg)


def matmul(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """Compute ``C = A @ B`` with three nested loops.

    ``C[i, j]`` is accumulated from zero as ``A[i, 0]*B[0, j] + A[i, 1]*B[1, j]
    + ...`` in increasing ``k``, with ``i`` outermost and ``j`` in the middle,
    so rounding is reproducible for a fixed input.  The running sum is kept
    in the result dtype, so integer products are exact.

    Args:
        a: Tensor of shape ``(M, K)``.
        b: Tensor of shape ``(K, N)``.

    Returns:
        Tensor of shape ``(M, N)`` with dtype ``torch.result_type(a, b)``.

    Raises:
        ShapeMismatch: If either operand is not 2-D.
        DimensionMismatch: If ``a.shape[1] != b.shape[0]``.
    """
    a, b = torch.as_tensor(a), torch.as_tensor(b)
    _check_operands(a, b)
    rows, shared = a.shape
    cols = b.shape[1]

    c = torch.zeros((rows, cols), dtype=torch.result_type(a, b), device=a.device)
    for i in range(rows):
        for j in range(cols):
            acc = torch.zeros((), dtype=c.dtype, device=c.device)
            for k in range(shared):
                acc = acc + a[i, k] * b[k, j]
            c[i, j] = acc
    return c


def matmul_cost(a: torch.Tensor, b: torch.Tensor) -> int:
    """Number of scalar multiply-adds :func:`matmul` performs for ``a @ b``."""
    a, b = torch.as_tensor(a), torch.as_tensor(b)
    _check_operands(a, b)
    return int(a.shape[0] * a.shape[1] * b.shape[1])
