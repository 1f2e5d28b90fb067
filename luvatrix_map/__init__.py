from luvatrix_map.compositor import BatchCompositor, CompositeResult, FlushedGroup, StyleBatch
from luvatrix_map.config import DEFAULT_LAYER_OPTIONS, LayerOptions, load_layer_options, validate_layer_options
from luvatrix_map.geo import DeviceProjector, GeodesicOffset, LatLng, LatLngBounds, MercatorProjector
from luvatrix_map.layer import MapView, PolylineLayer, PolylinePainter
from luvatrix_map.paint import DrawSubmission, LinearGradient, Paint, Path
from luvatrix_map.raster import MatrixCanvas
from luvatrix_map.repaint import FrameSignature, content_fingerprint, should_repaint
from luvatrix_map.style import DashStrategy, Dashed, Dotted, Flat, Gradient, Polyline, Solid
from luvatrix_map.surface import Canvas, RecordingCanvas

__all__ = [
    "BatchCompositor",
    "Canvas",
    "CompositeResult",
    "DEFAULT_LAYER_OPTIONS",
    "DashStrategy",
    "Dashed",
    "DeviceProjector",
    "Dotted",
    "DrawSubmission",
    "Flat",
    "FlushedGroup",
    "FrameSignature",
    "GeodesicOffset",
    "Gradient",
    "LatLng",
    "LatLngBounds",
    "LayerOptions",
    "LinearGradient",
    "MapView",
    "MatrixCanvas",
    "MercatorProjector",
    "Paint",
    "Path",
    "Polyline",
    "PolylineLayer",
    "PolylinePainter",
    "RecordingCanvas",
    "Solid",
    "StyleBatch",
    "content_fingerprint",
    "load_layer_options",
    "should_repaint",
    "validate_layer_options",
]
