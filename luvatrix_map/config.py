from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
import tomllib
from typing import Any, Mapping

from luvatrix_map.style import DashStrategy


@dataclass(frozen=True)
class LayerOptions:
    """Per-layer rendering switches."""

    save_layers: bool = False
    dash_strategy: DashStrategy = DashStrategy.RECT
    layer_caching: bool = True
    min_stroke_width: float = 0.5


DEFAULT_LAYER_OPTIONS = LayerOptions()


def validate_layer_options(overrides: Mapping[str, Any] | None = None) -> LayerOptions:
    """Validate and merge option overrides against the defaults."""

    raw: dict[str, Any] = asdict(DEFAULT_LAYER_OPTIONS)
    if overrides:
        for key, value in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown layer option: {key}")
            raw[key] = value

    for key in ("save_layers", "layer_caching"):
        if not isinstance(raw[key], bool):
            raise ValueError(f"Option `{key}` must be a boolean")

    try:
        strategy = DashStrategy(raw["dash_strategy"])
    except ValueError:
        choices = ", ".join(s.value for s in DashStrategy)
        raise ValueError(f"Option `dash_strategy` must be one of: {choices}") from None

    min_width = raw["min_stroke_width"]
    if isinstance(min_width, bool) or not isinstance(min_width, (int, float)) or float(min_width) <= 0:
        raise ValueError("Option `min_stroke_width` must be a positive number")

    return LayerOptions(
        save_layers=bool(raw["save_layers"]),
        dash_strategy=strategy,
        layer_caching=bool(raw["layer_caching"]),
        min_stroke_width=float(min_width),
    )


def load_layer_options(path: str | Path) -> LayerOptions:
    """Read the `[layer]` table of a TOML file; a missing table means defaults."""
    with Path(path).open("rb") as f:
        raw = tomllib.load(f)
    table = raw.get("layer", {})
    if not isinstance(table, dict):
        raise ValueError("`layer` must be a table")
    return validate_layer_options(table)
