"""Pydantic frozen configuration models for sgd_digits."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, model_validator


class ModelForm(str, Enum):
    """Shape of the prediction function being fitted."""

    QUADRATIC = "quadratic"
    LINEAR_PER_PIXEL = "linear-per-pixel"


class LossForm(str, Enum):
    """Loss used to score predictions against targets."""

    MSE = "mse"
    MAE = "mae"


class TrainerConfig(BaseModel, frozen=True):
    """Configuration for a single SGD training run.

    All fields are validated at construction time. Frozen: no mutation after creation.
    No early stopping is configured here: the run always takes ``epochs`` steps.
    """

    learning_rate: float = Field(default=1e-5, gt=0)
    epochs: int = Field(default=50, ge=0)
    model_form: ModelForm = ModelForm.QUADRATIC
    loss_form: LossForm = LossForm.MSE
    divergence_patience: int = Field(default=5, ge=0)
    param_init: Literal["zeros", "randn"] = "randn"


class QuadraticDataConfig(BaseModel, frozen=True):
    """Synthetic ``y = a*t^2 + b*t + c`` samples on integer ``t``."""

    coefficients: tuple[float, float, float] = (2.0, -3.0, 1.0)
    t_start: int = 0
    t_stop: int = 19
    noise_std: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def _range_not_empty(self) -> "QuadraticDataConfig":
        if self.t_stop < self.t_start:
            msg = f"t_stop ({self.t_stop}) must not be below t_start ({self.t_start})"
            raise ValueError(msg)
        return self


class GlyphDataConfig(BaseModel, frozen=True):
    """Synthetic two-class digit-like image stacks."""

    class_a: str = "3"
    class_b: str = "7"
    size: int = Field(default=28, ge=8)
    train_samples: int = Field(default=64, ge=1)
    valid_samples: int = Field(default=32, ge=1)
    noise_std: float = Field(default=0.1, ge=0)
    max_shift: int = Field(default=1, ge=0)

    @model_validator(mode="after")
    def _distinct_classes(self) -> "GlyphDataConfig":
        if self.class_a == self.class_b:
            msg = f"class_a and class_b must differ, both are {self.class_a!r}"
            raise ValueError(msg)
        return self
