from __future__ import annotations

from typing import Sequence

import numpy as np

from luvatrix_map.paint import LinearGradient
from luvatrix_map.style import Color, Gradient


def resolve_color_stops(colors: Sequence[Color], stops: Sequence[float] | None) -> tuple[float, ...]:
    """Use explicit stops when they match the color count, else spread uniformly."""
    if stops is not None and len(stops) == len(colors):
        return tuple(float(s) for s in stops)
    if not colors:
        return ()
    interval = 1.0 / len(colors)
    return tuple(i * interval for i in range(len(colors)))


def build_gradient_shader(gradient: Gradient, offsets: np.ndarray) -> LinearGradient:
    start = (float(offsets[0, 0]), float(offsets[0, 1]))
    end = (float(offsets[-1, 0]), float(offsets[-1, 1]))
    return LinearGradient(
        start=start,
        end=end,
        colors=tuple(gradient.colors),
        stops=resolve_color_stops(gradient.colors, gradient.stops),
    )
