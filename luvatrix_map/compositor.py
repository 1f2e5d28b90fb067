from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterable

import numpy as np

from luvatrix_map.config import DEFAULT_LAYER_OPTIONS, LayerOptions
from luvatrix_map.geo import GeodesicOffset, GroundOffset, Projector
from luvatrix_map.gradient import build_gradient_shader
from luvatrix_map.offsets import effective_stroke_width, project_points
from luvatrix_map.paint import DrawSubmission, Paint, PaintingStyle, Path
from luvatrix_map.segments import DOT_SPACING_FACTOR, add_dashed_line, add_dotted_line, add_polyline
from luvatrix_map.style import DashStrategy, Dashed, Dotted, Gradient, Polyline
from luvatrix_map.surface import Canvas


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlushedGroup:
    fingerprint: str
    members: tuple[int, ...]
    submissions: tuple[DrawSubmission, ...]


@dataclass(frozen=True)
class CompositeResult:
    groups: tuple[FlushedGroup, ...]
    skipped: tuple[int, ...]

    @property
    def draw_call_count(self) -> int:
        return sum(len(g.submissions) for g in self.groups)


@dataclass
class StyleBatch:
    """Path buffers and paints for a run of polylines sharing one style fingerprint."""

    fingerprint: str
    members: list[int] = field(default_factory=list)
    path: Path = field(default_factory=Path)
    halo_path: Path = field(default_factory=Path)
    cutout_path: Path = field(default_factory=Path)
    paint: Paint | None = None
    halo_paint: Paint | None = None
    cutout_paint: Paint | None = None

    def submissions(self) -> tuple[DrawSubmission, ...]:
        # Halo goes underneath, the cutout clears the stroke footprint, then the stroke.
        out: list[DrawSubmission] = []
        if self.halo_paint is not None and not self.halo_path.is_empty():
            out.append(DrawSubmission(kind="halo", path=self.halo_path, paint=self.halo_paint))
        if self.cutout_paint is not None and not self.cutout_path.is_empty():
            out.append(DrawSubmission(kind="cutout", path=self.cutout_path, paint=self.cutout_paint))
        if self.paint is not None and not self.path.is_empty():
            out.append(DrawSubmission(kind="primary", path=self.path, paint=self.paint))
        return tuple(out)

    def flush(self, canvas: Canvas, *, save_layers: bool = False) -> FlushedGroup:
        submissions = self.submissions()
        if submissions:
            if save_layers:
                canvas.save_layer()
            for submission in submissions:
                canvas.draw_path(submission.path, submission.paint)
            if save_layers:
                canvas.restore()
        LOGGER.debug(
            "flushed style group %s: polylines=%d draw_calls=%d",
            self.fingerprint[:12],
            len(self.members),
            len(submissions),
        )
        return FlushedGroup(
            fingerprint=self.fingerprint,
            members=tuple(self.members),
            submissions=submissions,
        )


class BatchCompositor:
    """Turns an ordered polyline list into as few draw calls as the styles allow.

    Consecutive polylines with the same style fingerprint share path buffers;
    a fingerprint change, or the end of the input, flushes them. Groups are
    never merged across a different style in between, so input order is the
    paint order.
    """

    def __init__(
        self,
        options: LayerOptions = DEFAULT_LAYER_OPTIONS,
        ground_offset: GroundOffset | None = None,
    ) -> None:
        self.options = options
        self._ground_offset = ground_offset if ground_offset is not None else GeodesicOffset()

    def compose(self, polylines: Iterable[Polyline], canvas: Canvas, projector: Projector) -> CompositeResult:
        groups: list[FlushedGroup] = []
        skipped: list[int] = []
        batch: StyleBatch | None = None
        for index, polyline in enumerate(polylines):
            offsets = project_points(polyline.points, projector)
            if offsets.shape[0] == 0:
                LOGGER.debug("skipping polyline %d: no points", index)
                skipped.append(index)
                continue
            fingerprint = polyline.style_fingerprint
            if batch is not None and batch.fingerprint != fingerprint:
                groups.append(batch.flush(canvas, save_layers=self.options.save_layers))
                batch = None
            if batch is None:
                batch = StyleBatch(fingerprint=fingerprint)
            self._append(batch, index, polyline, offsets, projector)
        if batch is not None:
            groups.append(batch.flush(canvas, save_layers=self.options.save_layers))
        return CompositeResult(groups=tuple(groups), skipped=tuple(skipped))

    def dash_strategy_for(self, polyline: Polyline) -> DashStrategy:
        pattern = polyline.pattern
        if isinstance(pattern, Dashed) and pattern.strategy is not None:
            return pattern.strategy
        return self.options.dash_strategy

    def _append(
        self,
        batch: StyleBatch,
        index: int,
        polyline: Polyline,
        offsets: np.ndarray,
        projector: Projector,
    ) -> None:
        width = effective_stroke_width(
            polyline,
            offsets,
            projector,
            self._ground_offset,
            min_width=self.options.min_stroke_width,
        )
        strategy = self.dash_strategy_for(polyline)
        style = _painting_style(polyline, strategy)
        source = polyline.color_source
        batch.paint = Paint(
            color=polyline.color,
            shader=build_gradient_shader(source, offsets) if isinstance(source, Gradient) else None,
            stroke_width=width,
            stroke_cap=polyline.stroke_cap,
            stroke_join=polyline.stroke_join,
            style=style,
            blend_mode="src_over",
        )
        border = polyline.has_border
        if border:
            batch.halo_paint = _halo_paint(polyline, width, style)
            batch.cutout_paint = Paint(
                color=_opaque(polyline.border_color),
                stroke_width=width,
                stroke_cap=polyline.stroke_cap,
                stroke_join=polyline.stroke_join,
                style=style,
                blend_mode="dst_out",
            )
        batch.members.append(index)

        pattern = polyline.pattern
        if isinstance(pattern, Dotted):
            spacing = width * DOT_SPACING_FACTOR
            if border:
                halo_radius = (width + polyline.border_stroke_width) / 2.0
                add_dotted_line(batch.halo_path, offsets, halo_radius, spacing)
                add_dotted_line(batch.cutout_path, offsets, width / 2.0, spacing)
            add_dotted_line(batch.path, offsets, width / 2.0, spacing)
        elif isinstance(pattern, Dashed):
            if border:
                add_dashed_line(batch.halo_path, offsets, pattern, width, strategy)
                add_dashed_line(batch.cutout_path, offsets, pattern, width, strategy)
            add_dashed_line(batch.path, offsets, pattern, width, strategy)
        else:
            if border:
                add_polyline(batch.halo_path, offsets)
                add_polyline(batch.cutout_path, offsets)
            add_polyline(batch.path, offsets)


def _painting_style(polyline: Polyline, strategy: DashStrategy) -> PaintingStyle:
    if isinstance(polyline.pattern, Dotted):
        return "fill"
    if isinstance(polyline.pattern, Dashed) and strategy == DashStrategy.RECT:
        return "fill"
    return "stroke"


def _halo_paint(polyline: Polyline, width: float, style: PaintingStyle) -> Paint:
    border_color = polyline.border_color or (0, 0, 0, 0)
    if style == "fill" and isinstance(polyline.pattern, Dashed):
        # Rectangle dashes: outline the same rectangles so the halo pokes out by half the border.
        return Paint(
            color=border_color,
            stroke_width=polyline.border_stroke_width,
            stroke_cap="square",
            stroke_join="miter",
            style="stroke",
            blend_mode="src_over",
        )
    return Paint(
        color=border_color,
        stroke_width=width + polyline.border_stroke_width,
        stroke_cap=polyline.stroke_cap,
        stroke_join=polyline.stroke_join,
        style=style,
        blend_mode="src_over",
    )


def _opaque(color: tuple[int, int, int, int] | None) -> tuple[int, int, int, int]:
    if color is None:
        return (0, 0, 0, 255)
    r, g, b, _ = color
    return (r, g, b, 255)
