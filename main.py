from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from luvatrix_map.config import DEFAULT_LAYER_OPTIONS, LayerOptions, load_layer_options, validate_layer_options
from luvatrix_map.geo import LatLngBounds, MercatorProjector
from luvatrix_map.layer import MapView, PolylineLayer
from luvatrix_map.raster import MatrixCanvas
from luvatrix_map.scene import Scene, load_scene
from luvatrix_map.surface import RecordingCanvas


LOGGER = logging.getLogger("luvatrix_map")


def main() -> None:
    parser = argparse.ArgumentParser(prog="luvatrix-map")
    parser.add_argument("--verbose", action="store_true", help="Log group flushes and skipped polylines.")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render-scene", help="Rasterize a JSON polyline scene to a PNG.")
    render.add_argument("scene", type=Path)
    render.add_argument("--out", type=Path, required=True)
    render.add_argument("--width", type=int, default=640)
    render.add_argument("--height", type=int, default=360)
    _add_layer_arguments(render)

    inspect = sub.add_parser("inspect-scene", help="Print batching statistics for a JSON polyline scene.")
    inspect.add_argument("scene", type=Path)
    inspect.add_argument("--width", type=int, default=640)
    inspect.add_argument("--height", type=int, default=360)
    _add_layer_arguments(inspect)
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    options = _resolve_options(args.config, args.dash_strategy, args.save_layers, args.culling)
    scene = load_scene(args.scene)
    layer, view = _build_layer(scene, options, width=args.width, height=args.height, culling=args.culling)

    if args.command == "render-scene":
        canvas = MatrixCanvas(width=args.width, height=args.height)
        _, result = layer.render(canvas, view)
        args.out.parent.mkdir(parents=True, exist_ok=True)
        canvas.to_image().save(args.out)
        groups = len(result.groups) if result is not None else 0
        calls = result.draw_call_count if result is not None else 0
        print(f"render complete: out={args.out} groups={groups} draw_calls={calls}")
        return

    if args.command == "inspect-scene":
        canvas = RecordingCanvas()
        painter, result = layer.render(canvas, view)
        assert result is not None
        summary = {
            "polylines": len(scene.polylines),
            "visible": len(painter.polylines),
            "skipped": list(result.skipped),
            "groups": [
                {"members": list(g.members), "submissions": [s.kind for s in g.submissions]}
                for g in result.groups
            ],
            "draw_calls": result.draw_call_count,
            "content_fingerprint": painter.signature.content,
        }
        print(json.dumps(summary, indent=2, sort_keys=True))
        return

    raise RuntimeError(f"unsupported command: {args.command}")


def _add_layer_arguments(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--config", type=Path, default=None, help="TOML file with a [layer] table.")
    cmd.add_argument("--dash-strategy", choices=["uniform", "rect"], default=None)
    cmd.add_argument("--save-layers", action="store_true", default=None)
    cmd.add_argument("--culling", action="store_true", help="Skip polylines outside the viewport.")


def _resolve_options(
    config: Path | None,
    dash_strategy: str | None,
    save_layers: bool | None,
    culling: bool,
) -> LayerOptions:
    base = load_layer_options(config) if config is not None else DEFAULT_LAYER_OPTIONS
    overrides: dict[str, object] = {
        "save_layers": base.save_layers,
        "dash_strategy": base.dash_strategy,
        "layer_caching": base.layer_caching,
        "min_stroke_width": base.min_stroke_width,
    }
    if dash_strategy is not None:
        overrides["dash_strategy"] = dash_strategy
    if save_layers:
        overrides["save_layers"] = True
    options = validate_layer_options(overrides)
    LOGGER.debug("layer options: %s culling=%s", options, culling)
    return options


def _build_layer(
    scene: Scene,
    options: LayerOptions,
    *,
    width: int,
    height: int,
    culling: bool,
) -> tuple[PolylineLayer, MapView]:
    projector = MercatorProjector(
        center=scene.view.center,
        zoom=scene.view.zoom,
        width=width,
        height=height,
        rotation_deg=scene.view.rotation,
    )
    view = MapView(
        projector=projector,
        zoom=scene.view.zoom,
        rotation=scene.view.rotation,
        bounds=projector.visible_bounds() if culling else None,
    )
    overlaps = LatLngBounds.is_overlapping if culling else None
    return PolylineLayer(scene.polylines, overlaps=overlaps, options=options), view


if __name__ == "__main__":
    main()
