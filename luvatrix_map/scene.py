from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Mapping

from luvatrix_map.geo import LatLng
from luvatrix_map.style import Color, Dashed, Dotted, Gradient, Polyline, Solid, StrokePattern


_CAPS = ("butt", "round", "square")
_JOINS = ("miter", "round", "bevel")
_PATTERNS = ("solid", "dotted", "dashed")


@dataclass(frozen=True)
class SceneView:
    center: LatLng
    zoom: float
    rotation: float = 0.0


@dataclass(frozen=True)
class Scene:
    view: SceneView
    polylines: tuple[Polyline, ...]


def load_scene(path: str | Path) -> Scene:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_scene(raw)


def parse_scene(raw: Mapping[str, Any]) -> Scene:
    if not isinstance(raw, Mapping):
        raise ValueError("scene must be a JSON object")
    view_raw = raw.get("view", {})
    if not isinstance(view_raw, Mapping):
        raise ValueError("`view` must be an object")
    center = _parse_point(view_raw.get("center", [0.0, 0.0]), where="view.center")
    view = SceneView(
        center=center,
        zoom=_number(view_raw.get("zoom", 0.0), "view.zoom"),
        rotation=_number(view_raw.get("rotation", 0.0), "view.rotation"),
    )
    entries = raw.get("polylines", [])
    if not isinstance(entries, list):
        raise ValueError("`polylines` must be a list")
    polylines = tuple(parse_polyline(entry, index=i) for i, entry in enumerate(entries))
    return Scene(view=view, polylines=polylines)


def parse_polyline(entry: Mapping[str, Any], *, index: int = 0) -> Polyline:
    where = f"polylines[{index}]"
    if not isinstance(entry, Mapping):
        raise ValueError(f"`{where}` must be an object")
    points_raw = entry.get("points", [])
    if not isinstance(points_raw, list):
        raise ValueError(f"`{where}.points` must be a list of [lat, lng] pairs")
    points = tuple(_parse_point(p, where=f"{where}.points") for p in points_raw)

    pattern_name = entry.get("pattern", "solid")
    if pattern_name not in _PATTERNS:
        raise ValueError(f"`{where}.pattern` must be one of: {', '.join(_PATTERNS)}")
    pattern: StrokePattern
    if pattern_name == "dotted":
        pattern = Dotted()
    elif pattern_name == "dashed":
        pattern = Dashed(
            dash_width=_number(entry.get("dash_width", 4.0), f"{where}.dash_width"),
            dash_gap=_number(entry.get("dash_gap", 3.0), f"{where}.dash_gap"),
            strategy=entry.get("dash_strategy"),
        )
    else:
        pattern = Solid()

    gradient = None
    if entry.get("gradient_colors") is not None:
        colors = tuple(parse_color(c) for c in entry["gradient_colors"])
        stops_raw = entry.get("colors_stop")
        stops = tuple(_number(s, f"{where}.colors_stop") for s in stops_raw) if stops_raw is not None else None
        gradient = Gradient(colors=colors, stops=stops)

    cap = entry.get("stroke_cap", "round")
    if cap not in _CAPS:
        raise ValueError(f"`{where}.stroke_cap` must be one of: {', '.join(_CAPS)}")
    join = entry.get("stroke_join", "round")
    if join not in _JOINS:
        raise ValueError(f"`{where}.stroke_join` must be one of: {', '.join(_JOINS)}")

    border_color = entry.get("border_color")
    return Polyline(
        points=points,
        stroke_width=_number(entry.get("stroke_width", 1.0), f"{where}.stroke_width"),
        color=parse_color(entry.get("color", "#00FF00")),
        border_stroke_width=_number(entry.get("border_stroke_width", 0.0), f"{where}.border_stroke_width"),
        border_color=parse_color(border_color) if border_color is not None else None,
        gradient=gradient,
        pattern=pattern,
        stroke_cap=cap,
        stroke_join=join,
        use_stroke_width_in_meter=bool(entry.get("use_stroke_width_in_meter", False)),
    )


def parse_color(value: Any) -> Color:
    """Accept `#RRGGBB`, `#RRGGBBAA` or an `[r, g, b, a]` list."""
    if isinstance(value, (list, tuple)):
        if len(value) not in (3, 4) or not all(isinstance(v, int) and 0 <= v <= 255 for v in value):
            raise ValueError(f"color list must hold 3 or 4 ints in 0..255, got `{value}`")
        r, g, b = value[0], value[1], value[2]
        a = value[3] if len(value) == 4 else 255
        return (r, g, b, a)
    if not isinstance(value, str) or not value.strip().startswith("#"):
        raise ValueError(f"color must be #RRGGBB or #RRGGBBAA, got `{value}`")
    raw = value.strip()[1:]
    try:
        if len(raw) == 6:
            return (int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16), 255)
        if len(raw) == 8:
            return (int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16), int(raw[6:8], 16))
    except ValueError:
        pass
    raise ValueError(f"color must be #RRGGBB or #RRGGBBAA, got `{value}`")


def _parse_point(value: Any, *, where: str) -> LatLng:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"`{where}` entries must be [lat, lng] pairs")
    return LatLng(lat=_number(value[0], where), lng=_number(value[1], where))


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"`{where}` must be a number")
    return float(value)
