"""Shared pytest fixtures for sgd_digits tests."""

import pytest
import torch

from sgd_digits.data.synthetic import make_glyph_stack, quadratic_samples


@pytest.fixture()
def generator() -> torch.Generator:
    return torch.Generator().manual_seed(0)


@pytest.fixture()
def glyph_stacks(generator: torch.Generator) -> dict[str, torch.Tensor]:
    """Disjoint train/valid stacks of synthetic 3s and 7s, 28x28.

    Layout is (rows, cols, samples): train has 20 per class, valid has 10.
    """
    return {
        "train_3": make_glyph_stack("3", 20, generator=generator),
        "train_7": make_glyph_stack("7", 20, generator=generator),
        "valid_3": make_glyph_stack("3", 10, generator=generator),
        "valid_7": make_glyph_stack("7", 10, generator=generator),
    }


@pytest.fixture()
def quadratic_data() -> tuple[torch.Tensor, torch.Tensor]:
    """t = 0..19 and y = 2t^2 - 3t + 1, float64, no noise."""
    return quadratic_samples((2.0, -3.0, 1.0), t_start=0, t_stop=19)
