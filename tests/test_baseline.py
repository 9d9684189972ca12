"""Tests for the pixel-similarity baseline classifier."""

import pytest
import torch

from sgd_digits.baseline import (
    BaselineReport,
    accuracy,
    classify,
    compute_class_mean,
    evaluate_baseline,
    is_class_a,
    other_class_accuracy,
)
from sgd_digits.errors import EmptyInputError, ShapeMismatch


@pytest.fixture()
def means(glyph_stacks: dict[str, torch.Tensor]) -> tuple[torch.Tensor, torch.Tensor]:
    return (
        compute_class_mean(glyph_stacks["train_3"]),
        compute_class_mean(glyph_stacks["train_7"]),
    )


class TestComputeClassMean:
    def test_shape_matches_per_sample_shape(
        self, glyph_stacks: dict[str, torch.Tensor]
    ) -> None:
        mean3 = compute_class_mean(glyph_stacks["train_3"])
        assert mean3.shape == glyph_stacks["train_3"].shape[:2]

    def test_elementwise_average(self) -> None:
        stack = torch.stack([torch.zeros(2, 2), torch.ones(2, 2)], dim=-1)
        assert torch.allclose(compute_class_mean(stack), torch.full((2, 2), 0.5))

    def test_empty_stack_raises(self) -> None:
        with pytest.raises(EmptyInputError):
            compute_class_mean(torch.zeros(4, 4, 0))

    def test_requires_3d_stack(self) -> None:
        with pytest.raises(ShapeMismatch):
            compute_class_mean(torch.zeros(4, 4))


class TestClassify:
    def test_class_mean_classifies_as_itself(
        self, means: tuple[torch.Tensor, torch.Tensor]
    ) -> None:
        mean3, mean7 = means
        assert classify(mean3, mean3, mean7, class_a="3", class_b="7") == "3"
        assert classify(mean7, mean3, mean7, class_a="3", class_b="7") == "7"

    def test_tie_goes_to_class_b(self) -> None:
        mean_a = torch.zeros(2, 2)
        mean_b = torch.ones(2, 2)
        halfway = torch.full((2, 2), 0.5)
        assert classify(halfway, mean_a, mean_b) == "b"
        assert classify(halfway, mean_a, mean_b, class_a=3, class_b=7) == 7

    def test_stack_returns_one_label_per_sample(self) -> None:
        mean_a = torch.zeros(2, 2)
        mean_b = torch.ones(2, 2)
        stack = torch.stack(
            [torch.full((2, 2), 0.1), torch.full((2, 2), 0.9)], dim=-1
        )
        assert classify(stack, mean_a, mean_b) == ["a", "b"]

    def test_is_class_a_is_boolean_per_sample(
        self, glyph_stacks: dict[str, torch.Tensor], means: tuple[torch.Tensor, torch.Tensor]
    ) -> None:
        flags = is_class_a(glyph_stacks["valid_3"], *means)
        assert flags.dtype == torch.bool
        assert flags.shape == (10,)

    def test_mismatched_mean_shape_raises(self) -> None:
        with pytest.raises(ShapeMismatch):
            classify(torch.zeros(4, 4), torch.zeros(4, 4), torch.zeros(3, 3))


class TestAccuracy:
    def test_fraction_of_matching_labels(self) -> None:
        assert accuracy(["3", "3", "7", "3"], "3") == pytest.approx(0.75)

    def test_empty_predictions_raise(self) -> None:
        with pytest.raises(EmptyInputError):
            accuracy([], "3")

    def test_other_class_accuracy(self) -> None:
        flags = torch.tensor([True, False, False, False])
        assert other_class_accuracy(flags) == pytest.approx(0.75)

    def test_other_class_accuracy_empty_raises(self) -> None:
        with pytest.raises(EmptyInputError):
            other_class_accuracy(torch.zeros(0, dtype=torch.bool))

    def test_report_overall_is_mean(self) -> None:
        report = BaselineReport(class_a="3", class_b="7", accuracy_a=1.0, accuracy_b=0.5)
        assert report.overall == pytest.approx(0.75)


class TestEvaluateBaseline:
    def test_separates_synthetic_digits(
        self, glyph_stacks: dict[str, torch.Tensor], means: tuple[torch.Tensor, torch.Tensor]
    ) -> None:
        report = evaluate_baseline(
            glyph_stacks["valid_3"], glyph_stacks["valid_7"], *means, class_a="3", class_b="7"
        )
        assert report.accuracy_a >= 0.9
        assert report.accuracy_b >= 0.9

    def test_agrees_with_classify_and_accuracy(
        self, glyph_stacks: dict[str, torch.Tensor], means: tuple[torch.Tensor, torch.Tensor]
    ) -> None:
        mean3, mean7 = means
        labels = classify(glyph_stacks["valid_3"], mean3, mean7, class_a="3", class_b="7")
        report = evaluate_baseline(
            glyph_stacks["valid_3"], glyph_stacks["valid_7"], mean3, mean7, "3", "7"
        )
        assert report.accuracy_a == pytest.approx(accuracy(labels, "3"))
