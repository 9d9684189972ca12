"""Ways of differentiating an objective with respect to the Parameter Vector.

The trainer only depends on the :class:`~sgd_digits.types.GradientFn`
signature ``(objective, params) -> gradient``; anything matching it works,
including a hand-written closed-form derivative.
"""

from __future__ import annotations

import torch

from sgd_digits.types import Objective


def autograd_gradient(objective: Objective, params: torch.Tensor) -> torch.Tensor:
    """Gradient from PyTorch autograd.

    Differentiates a fresh leaf copy of ``params``, so no ``.grad`` is ever
    accumulated on the caller's tensor between calls.
    """
    leaf = params.detach().clone().requires_grad_(True)
    loss = objective(leaf)
    (grad,) = torch.autograd.grad(loss, leaf)
    return grad.detach()


class FiniteDifferenceGradient:
    """Central-difference approximation, one pair of evaluations per parameter.

    ``grad[i] ~= (f(p + h_i*e_i) - f(p - h_i*e_i)) / (2 * h_i)``.

    With ``epsilon=None`` the step follows the precision of ``params``:
    ``h_i = cbrt(finfo(dtype).eps) * max(1, |p_i|)``, which balances
    truncation against rounding for float32 as well as float64.  A given
    ``epsilon`` is used as a fixed absolute step.
    """

    def __init__(self, epsilon: float | None = None) -> None:
        if epsilon is not None and epsilon <= 0:
            msg = f"epsilon must be positive, got {epsilon}"
            raise ValueError(msg)
        self.epsilon = epsilon

    def step_sizes(self, params: torch.Tensor) -> torch.Tensor:
        """Per-parameter step ``h_i`` used for ``params``."""
        base = params.detach()
        if not base.is_floating_point():
            base = base.to(torch.get_default_dtype())
        if self.epsilon is not None:
            return torch.full_like(base, self.epsilon)
        scale = torch.finfo(base.dtype).eps ** (1 / 3)
        return scale * base.abs().clamp(min=1.0)

    def __call__(self, objective: Objective, params: torch.Tensor) -> torch.Tensor:
        base = params.detach()
        if not base.is_floating_point():
            base = base.to(torch.get_default_dtype())
        steps = self.step_sizes(base)
        grad = torch.zeros_like(base)
        with torch.no_grad():
            for i in range(base.shape[0]):
                plus = base.clone()
                minus = base.clone()
                plus[i] += steps[i]
                minus[i] -= steps[i]
                # The step actually taken after rounding in the params dtype.
                width = plus[i] - minus[i]
                grad[i] = (objective(plus) - objective(minus)) / width
        return grad
