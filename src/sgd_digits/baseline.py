"""Pixel-similarity baseline for two-class digit images.

Each class is summarised by its pixel-wise mean image; an input is assigned
to whichever mean it is closer to under mean absolute distance.  The
comparison is a strict ``<``, so an image exactly halfway between the two
means is labelled ``class_b``.
"""

from __future__ import annotations

from collections.abc import Hashable, Sequence

import torch
from loguru import logger
from pydantic import BaseModel

from sgd_digits.errors import EmptyInputError, ShapeMismatch
from sgd_digits.tensor_ops import mean_absolute_distance, mean_over_axes

_SAMPLE_AXIS = 2


def compute_class_mean(samples: torch.Tensor) -> torch.Tensor:
    """Pixel-wise mean of a ``(rows, cols, samples)`` stack.

    Raises:
        ShapeMismatch: If ``samples`` is not 3-D.
        EmptyInputError: If the stack holds zero samples.
    """
    samples = torch.as_tensor(samples)
    if samples.ndim != 3:
        msg = f"Expected a (rows, cols, samples) stack, got shape {tuple(samples.shape)}"
        raise ShapeMismatch(msg)
    return mean_over_axes(samples, _SAMPLE_AXIS)


def is_class_a(
    images: torch.Tensor, mean_class_a: torch.Tensor, mean_class_b: torch.Tensor
) -> torch.Tensor:
    """Boolean tensor, ``True`` where an image is strictly closer to ``mean_class_a``.

    0-d for a single ``(rows, cols)`` image, shape ``(samples,)`` for a stack.
    """
    return mean_absolute_distance(images, mean_class_a) < mean_absolute_distance(
        images, mean_class_b
    )


def classify(
    image: torch.Tensor,
    mean_class_a: torch.Tensor,
    mean_class_b: torch.Tensor,
    class_a: Hashable = "a",
    class_b: Hashable = "b",
) -> Hashable | list[Hashable]:
    """Label ``image`` with the class whose mean it is nearer to.

    Ties resolve to ``class_b``.  A 3-D stack yields one label per sample.
    """
    closer_to_a = is_class_a(image, mean_class_a, mean_class_b)
    if closer_to_a.ndim == 0:
        return class_a if bool(closer_to_a) else class_b
    return [class_a if flag else class_b for flag in closer_to_a.tolist()]


def accuracy(predictions: Sequence[Hashable], ground_truth_label: Hashable) -> float:
    """Fraction of ``predictions`` equal to ``ground_truth_label``."""
    if len(predictions) == 0:
        msg = "Cannot compute accuracy of zero predictions"
        raise EmptyInputError(msg)
    hits = sum(1 for p in predictions if p == ground_truth_label)
    return hits / len(predictions)


def other_class_accuracy(predicted_as_class_a: torch.Tensor) -> float:
    """Accuracy on ``class_b`` samples: ``1 - mean(predicted_as_class_a)``."""
    flags = torch.as_tensor(predicted_as_class_a)
    if flags.numel() == 0:
        msg = "Cannot compute accuracy of zero predictions"
        raise EmptyInputError(msg)
    return 1.0 - flags.float().mean().item()


class BaselineReport(BaseModel, frozen=True):
    """Validation accuracy of the pixel-similarity baseline."""

    class_a: str
    class_b: str
    accuracy_a: float
    accuracy_b: float

    @property
    def overall(self) -> float:
        """Unweighted mean of the two per-class accuracies."""
        return (self.accuracy_a + self.accuracy_b) / 2


def evaluate_baseline(
    valid_a: torch.Tensor,
    valid_b: torch.Tensor,
    mean_class_a: torch.Tensor,
    mean_class_b: torch.Tensor,
    class_a: str = "a",
    class_b: str = "b",
) -> BaselineReport:
    """Score both validation stacks against the two class means."""
    accuracy_a = is_class_a(valid_a, mean_class_a, mean_class_b).float().mean().item()
    accuracy_b = other_class_accuracy(is_class_a(valid_b, mean_class_a, mean_class_b))
    report = BaselineReport(
        class_a=class_a,
        class_b=class_b,
        accuracy_a=accuracy_a,
        accuracy_b=accuracy_b,
    )
    logger.info(
        f"Baseline accuracy: {class_a}={accuracy_a:.4f}, {class_b}={accuracy_b:.4f}, "
        f"overall={report.overall:.4f}"
    )
    return report
