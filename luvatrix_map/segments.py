"""Stroke geometry for solid, dotted and dashed polylines.

Every function appends to a `Path` in device space; none of them draw. A
polyline that yields no geometry simply leaves the path untouched.
"""

from __future__ import annotations

import math

import numpy as np

from luvatrix_map.offsets import segment_lengths
from luvatrix_map.paint import Path
from luvatrix_map.style import DashStrategy, Dashed


DOT_SPACING_FACTOR = 1.5


def add_polyline(path: Path, offsets: np.ndarray) -> None:
    if offsets.shape[0] == 0:
        return
    path.add_polygon(offsets.tolist(), closed=False)


def add_dotted_line(path: Path, offsets: np.ndarray, radius: float, spacing: float) -> None:
    """Place circles every `spacing` px along the whole line, then one on the last point.

    The distance left over at the end of a segment is carried into the next one
    so dots stay evenly spaced around corners.
    """
    if offsets.shape[0] == 0:
        return
    if spacing > 0:
        lengths = segment_lengths(offsets)
        start_distance = 0.0
        for i, total in enumerate(lengths.tolist()):
            p0 = offsets[i]
            p1 = offsets[i + 1]
            distance = start_distance
            while distance < total:
                f1 = distance / total
                path.add_oval(p0 * (1.0 - f1) + p1 * f1, radius)
                distance += spacing
            start_distance = distance - total
    path.add_oval(offsets[-1], radius)


def add_dashed_line(
    path: Path,
    offsets: np.ndarray,
    pattern: Dashed,
    stroke_width: float,
    strategy: DashStrategy,
) -> None:
    if strategy == DashStrategy.UNIFORM:
        _add_uniform_dashes(path, offsets, pattern.dash_width, pattern.dash_gap, stroke_width)
    else:
        _add_rect_dashes(path, offsets, pattern.dash_width, pattern.dash_gap, stroke_width)


def _add_uniform_dashes(
    path: Path,
    offsets: np.ndarray,
    dash_length: float,
    dash_gap: float,
    stroke_width: float,
) -> None:
    """Line dashes spread evenly over each segment, inset by half the stroke width.

    `dash_length` is in device pixels; `dash_gap` is in stroke-width units.
    """
    half = stroke_width / 2.0
    gap = dash_gap * stroke_width
    if dash_length <= 0 or dash_length + gap <= 0:
        return
    lengths = segment_lengths(offsets)
    dashed = lengths > stroke_width
    for i, total in enumerate(lengths.tolist()):
        if not dashed[i]:
            continue
        count = math.floor(total / (dash_length + gap))
        if count == 0:
            continue
        p0 = offsets[i]
        unit = (offsets[i + 1] - p0) / total
        if i > 0 and dashed[i - 1]:
            prev_unit = (p0 - offsets[i - 1]) / lengths[i - 1]
            # Join piece across the corner, under the first dash of this segment.
            path.add_polygon([p0 - prev_unit * half, p0, p0 + unit * half], closed=False)
        step = total / count
        for k in range(count):
            start = half + k * step
            end = min(start + dash_length, total - half)
            if end <= start:
                continue
            path.add_polygon([p0 + unit * start, p0 + unit * end], closed=False)


def _add_rect_dashes(
    path: Path,
    offsets: np.ndarray,
    dash_width: float,
    dash_gap: float,
    stroke_width: float,
) -> None:
    """Filled rectangles `dash_width` stroke-widths long, stepping by width plus gap.

    A trailing dash that would run past the segment end is dropped.
    """
    half = stroke_width / 2.0
    width = dash_width * stroke_width
    step = width + dash_gap * stroke_width
    if width <= 0 or step <= 0:
        return
    lengths = segment_lengths(offsets)
    for i, total in enumerate(lengths.tolist()):
        if total <= stroke_width:
            continue
        p0 = offsets[i]
        parallel = (offsets[i + 1] - p0) / total
        perpendicular = np.array([-parallel[1], parallel[0]])
        distance = 0.0
        while distance + width <= total:
            start = p0 + parallel * distance
            path.add_polygon(
                [
                    start - perpendicular * half,
                    start - perpendicular * half + parallel * width,
                    start + perpendicular * half + parallel * width,
                    start + perpendicular * half,
                ],
                closed=True,
            )
            distance += step
