from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Iterable

from luvatrix_map.compositor import BatchCompositor, CompositeResult
from luvatrix_map.config import DEFAULT_LAYER_OPTIONS, LayerOptions
from luvatrix_map.geo import GroundOffset, LatLngBounds, Projector
from luvatrix_map.repaint import FrameSignature, content_fingerprint, should_repaint
from luvatrix_map.style import Lazy, Polyline
from luvatrix_map.surface import Canvas


LOGGER = logging.getLogger(__name__)

OverlapPredicate = Callable[[LatLngBounds, LatLngBounds], bool]


@dataclass(frozen=True)
class MapView:
    """View state supplied by the host for one frame."""

    projector: Projector
    zoom: float
    rotation: float = 0.0
    bounds: LatLngBounds | None = None


class PolylinePainter:
    """One frame's worth of polylines bound to a view."""

    def __init__(self, polylines: Iterable[Polyline], view: MapView, compositor: BatchCompositor) -> None:
        self.polylines = tuple(polylines)
        self.view = view
        self._compositor = compositor
        self._content: Lazy[str] = Lazy()

    @property
    def signature(self) -> FrameSignature:
        return FrameSignature(
            zoom=self.view.zoom,
            rotation=self.view.rotation,
            content=self._content.get(lambda: content_fingerprint(self.polylines)),
        )

    def paint(self, canvas: Canvas) -> CompositeResult:
        return self._compositor.compose(self.polylines, canvas, self.view.projector)

    def should_repaint(self, old: "PolylinePainter | None") -> bool:
        return should_repaint(
            old.signature if old is not None else None,
            self.signature,
            layer_caching=self._compositor.options.layer_caching,
        )


class PolylineLayer:
    """Map layer drawing a list of polylines in order.

    `overlaps` is the host's culling predicate; when given, polylines whose
    bounding box does not overlap the view bounds are left out before batching.
    """

    def __init__(
        self,
        polylines: Iterable[Polyline] = (),
        *,
        overlaps: OverlapPredicate | None = None,
        options: LayerOptions = DEFAULT_LAYER_OPTIONS,
        ground_offset: GroundOffset | None = None,
    ) -> None:
        self.polylines = tuple(polylines)
        self.options = options
        self._overlaps = overlaps
        self._compositor = BatchCompositor(options=options, ground_offset=ground_offset)

    def visible_polylines(self, view: MapView) -> list[Polyline]:
        if self._overlaps is None or view.bounds is None:
            return list(self.polylines)
        bounds = view.bounds
        return [p for p in self.polylines if p.points and self._overlaps(p.bounding_box, bounds)]

    def painter(self, view: MapView) -> PolylinePainter:
        return PolylinePainter(self.visible_polylines(view), view, self._compositor)

    def render(
        self,
        canvas: Canvas,
        view: MapView,
        previous: PolylinePainter | None = None,
    ) -> tuple[PolylinePainter, CompositeResult | None]:
        """Paint the layer unless `previous` already produced the same frame."""
        painter = self.painter(view)
        if not painter.should_repaint(previous):
            LOGGER.debug("reusing previous polyline frame (%d polylines)", len(painter.polylines))
            return painter, None
        return painter, painter.paint(canvas)
