from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from luvatrix_map.geo import GroundOffset, LatLng, Projector
from luvatrix_map.style import Polyline


LOGGER = logging.getLogger(__name__)

METER_WIDTH_BEARING_DEG = 180.0


def project_points(points: Sequence[LatLng], projector: Projector) -> np.ndarray:
    """Project geographic points into an (n, 2) array of device coordinates."""
    if not points:
        return np.zeros((0, 2), dtype=np.float64)
    return np.asarray([projector.project(p) for p in points], dtype=np.float64).reshape(-1, 2)


def effective_stroke_width(
    polyline: Polyline,
    offsets: np.ndarray,
    projector: Projector,
    ground_offset: GroundOffset,
    *,
    min_width: float,
) -> float:
    width = polyline.stroke_width
    if polyline.use_stroke_width_in_meter:
        # Bearing is fixed; widths are approximate away from north/south lines.
        moved = ground_offset.offset(polyline.points[0], polyline.stroke_width, METER_WIDTH_BEARING_DEG)
        mx, my = projector.project(moved)
        width = float(np.hypot(offsets[0, 0] - mx, offsets[0, 1] - my))
    if not np.isfinite(width) or width < min_width:
        LOGGER.debug("clamping stroke width %s to %s", width, min_width)
        return float(min_width)
    return float(width)


def segment_lengths(offsets: np.ndarray) -> np.ndarray:
    if offsets.shape[0] < 2:
        return np.zeros((0,), dtype=np.float64)
    deltas = np.diff(offsets, axis=0)
    return np.hypot(deltas[:, 0], deltas[:, 1])
