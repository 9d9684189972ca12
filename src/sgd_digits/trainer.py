"""Generic stochastic gradient descent over a Parameter Vector.

The trainer is written against three capabilities: a prediction function,
a loss function, and a gradient function.  It owns exactly one Parameter
Vector and cycles through

    Initialized -> Predicted -> Evaluated -> Differentiated -> Stepped -> Predicted ...

Runs always take the requested number of epochs.  Stopping early on
convergence is the caller's responsibility.
"""

from __future__ import annotations

import warnings
from enum import Enum

import torch
from loguru import logger
from pydantic import BaseModel, ConfigDict

from sgd_digits.errors import (
    DivergenceWarning,
    ShapeMismatch,
    TrainerStateError,
    TrainingAborted,
)
from sgd_digits.gradients import autograd_gradient
from sgd_digits.types import GradientFn, LearningRate, LossFn, Objective, PredictFn


class TrainerState(str, Enum):
    INITIALIZED = "initialized"
    PREDICTED = "predicted"
    EVALUATED = "evaluated"
    DIFFERENTIATED = "differentiated"
    STEPPED = "stepped"


class StepRecord(BaseModel, frozen=True):
    """Outcome of one optimization step.

    ``loss`` is measured at the parameters the step started from.
    """

    step: int
    loss: float
    learning_rate: float


class TrainingResult(BaseModel):
    """Final Parameter Vector and loss history of a completed run."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    params: torch.Tensor
    losses: list[float]
    final_loss: float
    epochs_completed: int


class SGDTrainer:
    """Plain gradient descent, ``params <- params - lr * grad``.

    Parameters
    ----------
    params:
        Initial Parameter Vector (1-D).  Copied; the caller's tensor is never
        modified.
    predict_fn:
        ``(params, inputs) -> outputs``, differentiable in ``params``.
    loss_fn:
        ``(outputs, targets) -> scalar``.
    learning_rate:
        Constant step size or a schedule ``step_index -> step size``.
    gradient_fn:
        ``(objective, params) -> gradient``.  Defaults to autograd.
    divergence_patience:
        Emit :class:`DivergenceWarning` once the loss has risen this many
        steps in a row.  ``0`` disables the check.
    """

    def __init__(
        self,
        params: torch.Tensor,
        predict_fn: PredictFn,
        loss_fn: LossFn,
        learning_rate: LearningRate,
        gradient_fn: GradientFn = autograd_gradient,
        divergence_patience: int = 5,
    ) -> None:
        params = torch.as_tensor(params)
        if params.ndim != 1:
            msg = f"Parameter Vector must be 1-D, got shape {tuple(params.shape)}"
            raise ShapeMismatch(msg)
        if not params.is_floating_point():
            params = params.to(torch.get_default_dtype())
        self._params = params.detach().clone()
        self.predict_fn = predict_fn
        self.loss_fn = loss_fn
        self.learning_rate = learning_rate
        self.gradient_fn = gradient_fn
        self.divergence_patience = divergence_patience

        self.state = TrainerState.INITIALIZED
        self.step_count = 0
        self._gradient: torch.Tensor | None = None
        self._last_loss: float | None = None
        self._rising_steps = 0
        self._divergence_reported = False

    @property
    def params(self) -> torch.Tensor:
        """A copy of the current Parameter Vector."""
        return self._params.clone()

    @property
    def gradient(self) -> torch.Tensor | None:
        """Gradient awaiting the next :meth:`step`, or ``None`` once used."""
        return None if self._gradient is None else self._gradient.clone()

    def current_learning_rate(self) -> float:
        if callable(self.learning_rate):
            return float(self.learning_rate(self.step_count))
        return float(self.learning_rate)

    def objective(self, inputs: torch.Tensor, targets: torch.Tensor) -> Objective:
        """``loss_fn(predict_fn(p, inputs), targets)`` as a function of ``p``."""

        def _objective(p: torch.Tensor) -> torch.Tensor:
            return self.loss_fn(self.predict_fn(p, inputs), targets)

        return _objective

    # -- transitions ---------------------------------------------------------

    def predict(self, inputs: torch.Tensor) -> torch.Tensor:
        with torch.no_grad():
            outputs = self.predict_fn(self._params, inputs)
        self.state = TrainerState.PREDICTED
        return outputs

    def evaluate(self, outputs: torch.Tensor, targets: torch.Tensor) -> float:
        if self.state is not TrainerState.PREDICTED:
            msg = f"evaluate() requires state 'predicted', trainer is '{self.state.value}'"
            raise TrainerStateError(msg)
        with torch.no_grad():
            loss = float(self.loss_fn(outputs, targets))
        self.state = TrainerState.EVALUATED
        return loss

    def differentiate(self, inputs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
        """Compute a fresh gradient at the current parameters.

        Replaces any previous gradient; nothing is accumulated.
        """
        grad = self.gradient_fn(self.objective(inputs, targets), self._params)
        grad = torch.as_tensor(grad, dtype=self._params.dtype)
        if grad.shape != self._params.shape:
            msg = (
                f"Gradient shape {tuple(grad.shape)} does not match Parameter "
                f"Vector shape {tuple(self._params.shape)}"
            )
            raise ShapeMismatch(msg)
        self._gradient = grad
        self.state = TrainerState.DIFFERENTIATED
        return grad.clone()

    def step(self) -> torch.Tensor:
        """Apply ``params - lr * grad`` to the whole vector at once.

        The update is built in a new tensor and swapped in with one
        assignment; the used gradient is then discarded.
        """
        if self.state is not TrainerState.DIFFERENTIATED or self._gradient is None:
            msg = f"step() requires state 'differentiated', trainer is '{self.state.value}'"
            raise TrainerStateError(msg)
        lr = self.current_learning_rate()
        updated = self._params - lr * self._gradient
        self._params = updated
        self.zero_gradient()
        self.step_count += 1
        self.state = TrainerState.STEPPED
        return self.params

    def zero_gradient(self) -> None:
        self._gradient = None

    # -- loops ---------------------------------------------------------------

    def train_step(self, inputs: torch.Tensor, targets: torch.Tensor) -> StepRecord:
        """Run predict, evaluate, differentiate and step once.

        The divergence check runs before the update, so a warning escalated
        to an error leaves the parameters at the start of this step.
        """
        lr = self.current_learning_rate()
        outputs = self.predict(inputs)
        loss = self.evaluate(outputs, targets)
        self._track_divergence(loss)
        self.differentiate(inputs, targets)
        self.step()
        record = StepRecord(step=self.step_count - 1, loss=loss, learning_rate=lr)
        logger.debug(f"step {record.step}: loss={loss:.6g} lr={lr:.3g}")
        return record

    def _track_divergence(self, loss: float) -> None:
        if self._last_loss is not None and loss > self._last_loss:
            self._rising_steps += 1
        else:
            self._rising_steps = 0
        self._last_loss = loss
        if (
            self.divergence_patience
            and self._rising_steps >= self.divergence_patience
            and not self._divergence_reported
        ):
            self._divergence_reported = True
            msg = (
                f"Loss increased for {self._rising_steps} consecutive steps "
                f"(now {loss:.6g}); consider a smaller learning rate"
            )
            logger.warning(msg)
            warnings.warn(msg, DivergenceWarning, stacklevel=3)

    def fit(
        self, inputs: torch.Tensor, targets: torch.Tensor, epochs: int
    ) -> TrainingResult:
        """Take exactly ``epochs`` full-batch steps.

        Raises:
            TrainingAborted: If any step raises.  The Parameter Vector is left
                at the last completed step and the original error is chained.
        """
        if epochs < 0:
            msg = f"epochs must be non-negative, got {epochs}"
            raise ValueError(msg)
        logger.info(
            f"Training {self._params.shape[0]} parameters for {epochs} epochs"
        )
        losses: list[float] = []
        for epoch in range(epochs):
            try:
                record = self.train_step(inputs, targets)
            except Exception as exc:
                logger.error(f"Epoch {epoch} failed: {exc!r}")
                raise TrainingAborted(epoch, self.params, list(losses)) from exc
            losses.append(record.loss)

        try:
            final_loss = self.evaluate(self.predict(inputs), targets)
        except Exception as exc:
            raise TrainingAborted(epochs, self.params, list(losses)) from exc
        initial_loss = losses[0] if losses else final_loss
        logger.info(f"Training finished: loss {initial_loss:.6g} -> {final_loss:.6g}")
        return TrainingResult(
            params=self.params,
            losses=losses,
            final_loss=final_loss,
            epochs_completed=epochs,
        )
