"""Synthetic stand-ins for the external data source.

Real digit images come from outside this package; these generators produce
arrays with the same layout so the baseline and the trainer can be run and
tested end to end.
"""

from __future__ import annotations

import torch

# Stroke segments per glyph on a unit square, as (row0, col0, row1, col1).
_GLYPH_STROKES: dict[str, list[tuple[float, float, float, float]]] = {
    "0": [
        (0.2, 0.3, 0.2, 0.7),
        (0.8, 0.3, 0.8, 0.7),
        (0.2, 0.3, 0.8, 0.3),
        (0.2, 0.7, 0.8, 0.7),
    ],
    "1": [(0.2, 0.5, 0.8, 0.5), (0.2, 0.5, 0.3, 0.4)],
    "3": [
        (0.2, 0.3, 0.2, 0.7),
        (0.5, 0.35, 0.5, 0.7),
        (0.8, 0.3, 0.8, 0.7),
        (0.2, 0.7, 0.8, 0.7),
    ],
    "7": [(0.2, 0.25, 0.2, 0.75), (0.2, 0.75, 0.8, 0.4)],
}


def available_glyphs() -> list[str]:
    return sorted(_GLYPH_STROKES)


def render_glyph(name: str, size: int = 28, thickness: float = 1.5) -> torch.Tensor:
    """Draw a clean ``(size, size)`` template for ``name`` with values in ``[0, 1]``."""
    if name not in _GLYPH_STROKES:
        msg = f"Unknown glyph {name!r}. Available: {available_glyphs()}"
        raise ValueError(msg)
    coords = torch.arange(size, dtype=torch.float32)
    rows = coords.view(-1, 1).expand(size, size)
    cols = coords.view(1, -1).expand(size, size)
    image = torch.zeros(size, size)
    scale = size - 1
    for r0, c0, r1, c1 in _GLYPH_STROKES[name]:
        p0 = torch.tensor([r0 * scale, c0 * scale])
        p1 = torch.tensor([r1 * scale, c1 * scale])
        seg = p1 - p0
        # Distance from every pixel centre to the segment.
        t = ((rows - p0[0]) * seg[0] + (cols - p0[1]) * seg[1]) / seg.dot(seg)
        t = t.clamp(0.0, 1.0)
        dist = torch.hypot(rows - (p0[0] + t * seg[0]), cols - (p0[1] + t * seg[1]))
        image = torch.maximum(image, (dist <= thickness).float())
    return image


def make_glyph_stack(
    name: str,
    num_samples: int,
    size: int = 28,
    noise_std: float = 0.1,
    max_shift: int = 1,
    generator: torch.Generator | None = None,
) -> torch.Tensor:
    """Noisy, jittered copies of a glyph stacked as ``(size, size, num_samples)``.

    Each sample is the template rolled by up to ``max_shift`` pixels in each
    direction plus Gaussian noise, clipped back into ``[0, 1]``.
    """
    template = render_glyph(name, size)
    samples = []
    for _ in range(num_samples):
        shift = torch.randint(-max_shift, max_shift + 1, (2,), generator=generator)
        image = torch.roll(template, shifts=(int(shift[0]), int(shift[1])), dims=(0, 1))
        noise = torch.randn(size, size, generator=generator) * noise_std
        samples.append((image + noise).clamp(0.0, 1.0))
    if not samples:
        return torch.zeros(size, size, 0)
    return torch.stack(samples, dim=-1)


def quadratic_samples(
    coefficients: tuple[float, float, float],
    t_start: int = 0,
    t_stop: int = 19,
    noise_std: float = 0.0,
    generator: torch.Generator | None = None,
    dtype: torch.dtype = torch.float64,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Integer ``t`` in ``[t_start, t_stop]`` and ``y = a*t^2 + b*t + c`` (+ noise)."""
    a, b, c = coefficients
    t = torch.arange(t_start, t_stop + 1, dtype=dtype)
    y = a * t**2 + b * t + c
    if noise_std > 0:
        y = y + torch.randn(t.shape, generator=generator, dtype=dtype) * noise_std
    return t, y
