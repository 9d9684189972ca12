"""Tests for the elementwise and reduction helpers."""

import pytest
import torch

from sgd_digits.errors import EmptyInputError, ShapeMismatch
from sgd_digits.tensor_ops import (
    absolute,
    elementwise_abs_diff,
    mean_absolute_distance,
    mean_over_axes,
    root_mean_squared_distance,
    square,
    subtract,
)


class TestElementwise:
    def test_subtract(self) -> None:
        out = subtract(torch.tensor([3.0, 1.0]), torch.tensor([1.0, 4.0]))
        assert torch.equal(out, torch.tensor([2.0, -3.0]))

    def test_subtract_rejects_broadcasting(self) -> None:
        with pytest.raises(ShapeMismatch):
            subtract(torch.ones(2, 3), torch.ones(3))

    def test_subtract_unsigned_does_not_wrap(self) -> None:
        out = subtract(
            torch.tensor([3, 200], dtype=torch.uint8), torch.tensor([7, 10], dtype=torch.uint8)
        )
        assert out.tolist() == [-4, 190]

    def test_mean_absolute_distance_on_uint8_images(self) -> None:
        a = torch.tensor([[0, 255], [10, 20]], dtype=torch.uint8)
        b = torch.tensor([[255, 0], [20, 10]], dtype=torch.uint8)
        out = mean_absolute_distance(a, b)
        assert out.item() == pytest.approx((255 + 255 + 10 + 10) / 4)

    def test_absolute_and_square(self) -> None:
        x = torch.tensor([-2.0, 0.5])
        assert torch.equal(absolute(x), torch.tensor([2.0, 0.5]))
        assert torch.equal(square(x), torch.tensor([4.0, 0.25]))

    def test_abs_diff(self) -> None:
        out = elementwise_abs_diff([[1.0, 5.0]], [[4.0, 2.0]])
        assert torch.equal(out, torch.tensor([[3.0, 3.0]]))

    def test_abs_diff_shape_mismatch(self) -> None:
        with pytest.raises(ShapeMismatch):
            elementwise_abs_diff(torch.zeros(2, 2), torch.zeros(2, 3))

    def test_inputs_not_modified(self) -> None:
        a = torch.tensor([1.0, 2.0])
        b = torch.tensor([3.0, 5.0])
        elementwise_abs_diff(a, b)
        assert torch.equal(a, torch.tensor([1.0, 2.0]))
        assert torch.equal(b, torch.tensor([3.0, 5.0]))


class TestMeanOverAxes:
    def test_single_axis_is_removed(self) -> None:
        a = torch.arange(6, dtype=torch.float32).reshape(2, 3)
        out = mean_over_axes(a, 1)
        assert out.shape == (2,)
        assert torch.allclose(out, torch.tensor([1.0, 4.0]))

    def test_multiple_axes(self) -> None:
        a = torch.ones(2, 3, 4)
        out = mean_over_axes(a, (0, 1))
        assert out.shape == (4,)

    def test_integer_input_is_averaged_as_float(self) -> None:
        out = mean_over_axes(torch.tensor([1, 2]), 0)
        assert out.item() == pytest.approx(1.5)

    def test_empty_axis_raises(self) -> None:
        with pytest.raises(EmptyInputError):
            mean_over_axes(torch.zeros(3, 0), 1)

    def test_empty_axis_list_raises(self) -> None:
        with pytest.raises(ValueError):
            mean_over_axes(torch.zeros(3), ())


class TestDistances:
    def test_self_distance_is_zero(self) -> None:
        a = torch.rand(5, 5, generator=torch.Generator().manual_seed(1))
        assert mean_absolute_distance(a, a).item() == 0.0
        assert root_mean_squared_distance(a, a).item() == 0.0

    def test_distances_zero_iff_equal(self) -> None:
        a = torch.zeros(3, 3)
        b = a.clone()
        b[1, 2] = 0.5
        assert mean_absolute_distance(a, b).item() > 0
        assert root_mean_squared_distance(a, b).item() > 0

    def test_known_values(self) -> None:
        a = torch.tensor([[0.0, 0.0], [0.0, 0.0]])
        b = torch.tensor([[1.0, 1.0], [0.0, 0.0]])
        assert mean_absolute_distance(a, b).item() == pytest.approx(0.5)
        assert root_mean_squared_distance(a, b).item() == pytest.approx(0.5**0.5)

    def test_stack_against_image_gives_one_value_per_sample(self) -> None:
        image = torch.zeros(4, 4)
        stack = torch.stack([torch.zeros(4, 4), torch.ones(4, 4)], dim=-1)
        out = mean_absolute_distance(stack, image)
        assert out.shape == (2,)
        assert torch.allclose(out, torch.tensor([0.0, 1.0]))
        # Symmetric in argument order.
        assert torch.allclose(mean_absolute_distance(image, stack), out)

    def test_stack_against_stack(self) -> None:
        a = torch.zeros(2, 2, 3)
        b = torch.full((2, 2, 3), 0.25)
        assert torch.allclose(mean_absolute_distance(a, b), torch.full((3,), 0.25))

    def test_incompatible_image_shapes_raise(self) -> None:
        with pytest.raises(ShapeMismatch):
            mean_absolute_distance(torch.zeros(4, 4, 2), torch.zeros(3, 4))
        with pytest.raises(ShapeMismatch):
            mean_absolute_distance(torch.zeros(4), torch.zeros(4))

    def test_rmsd_requires_identical_shapes(self) -> None:
        with pytest.raises(ShapeMismatch):
            root_mean_squared_distance(torch.zeros(2, 2), torch.zeros(2, 2, 1))

    def test_rmsd_is_scalar_over_all_axes(self) -> None:
        out = root_mean_squared_distance(torch.zeros(2, 2, 2), torch.full((2, 2, 2), 3.0))
        assert out.ndim == 0
        assert out.item() == pytest.approx(3.0)
