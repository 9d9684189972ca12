"""Synthetic data sources for the baseline and the trainer."""

from sgd_digits.data.synthetic import (
    available_glyphs,
    make_glyph_stack,
    quadratic_samples,
    render_glyph,
)

__all__ = [
    "available_glyphs",
    "make_glyph_stack",
    "quadratic_samples",
    "render_glyph",
]
