from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Protocol, Union

from luvatrix_map.paint import Paint, Path


class Canvas(Protocol):
    """Backend-agnostic drawing surface used by the polyline compositor."""

    def draw_path(self, path: Path, paint: Paint) -> None:
        ...

    def save_layer(self) -> None:
        ...

    def restore(self) -> None:
        ...


@dataclass(frozen=True)
class DrawPathCall:
    path: Path
    paint: Paint


@dataclass(frozen=True)
class LayerCall:
    op: Literal["save_layer", "restore"]


CanvasCall = Union[DrawPathCall, LayerCall]


@dataclass
class RecordingCanvas:
    """Keeps every call in order; useful for tests and for counting draw calls."""

    calls: list[CanvasCall] = field(default_factory=list)
    _depth: int = 0

    def draw_path(self, path: Path, paint: Paint) -> None:
        self.calls.append(DrawPathCall(path=path, paint=paint))

    def save_layer(self) -> None:
        self._depth += 1
        self.calls.append(LayerCall("save_layer"))

    def restore(self) -> None:
        if self._depth == 0:
            raise RuntimeError("restore called without a matching save_layer")
        self._depth -= 1
        self.calls.append(LayerCall("restore"))

    @property
    def draw_calls(self) -> list[DrawPathCall]:
        return [c for c in self.calls if isinstance(c, DrawPathCall)]
