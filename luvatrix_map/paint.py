from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Literal, Sequence, Union

from luvatrix_map.style import Color, StrokeCap, StrokeJoin


PaintingStyle = Literal["fill", "stroke"]
BlendMode = Literal["src_over", "dst_out"]
Point = tuple[float, float]


@dataclass(frozen=True)
class SubPath:
    points: tuple[Point, ...]
    closed: bool = False


@dataclass(frozen=True)
class Oval:
    center: Point
    radius: float


PathElement = Union[SubPath, Oval]


@dataclass
class Path:
    """Mutable geometry buffer of open/closed subpaths and circles."""

    elements: list[PathElement] = field(default_factory=list)
    _pending: list[Point] = field(default_factory=list, repr=False)

    def move_to(self, x: float, y: float) -> None:
        self._commit(closed=False)
        self._pending.append((float(x), float(y)))

    def line_to(self, x: float, y: float) -> None:
        if not self._pending:
            self._pending.append((0.0, 0.0))
        self._pending.append((float(x), float(y)))

    def close(self) -> None:
        self._commit(closed=True)

    def add_polygon(self, points: Iterable[Sequence[float]], closed: bool) -> None:
        pts = [(float(p[0]), float(p[1])) for p in points]
        if not pts:
            return
        self._commit(closed=False)
        self.elements.append(SubPath(points=tuple(pts), closed=closed))

    def add_oval(self, center: Sequence[float], radius: float) -> None:
        self._commit(closed=False)
        self.elements.append(Oval(center=(float(center[0]), float(center[1])), radius=float(radius)))

    def is_empty(self) -> bool:
        return not self.elements and not self._pending

    def __iter__(self) -> Iterator[PathElement]:
        self._commit(closed=False)
        return iter(list(self.elements))

    def __len__(self) -> int:
        self._commit(closed=False)
        return len(self.elements)

    def subpaths(self) -> list[SubPath]:
        return [e for e in self if isinstance(e, SubPath)]

    def ovals(self) -> list[Oval]:
        return [e for e in self if isinstance(e, Oval)]

    def _commit(self, *, closed: bool) -> None:
        if self._pending:
            self.elements.append(SubPath(points=tuple(self._pending), closed=closed))
            self._pending = []


@dataclass(frozen=True)
class LinearGradient:
    start: Point
    end: Point
    colors: tuple[Color, ...]
    stops: tuple[float, ...]


@dataclass(frozen=True)
class Paint:
    color: Color = (0, 0, 0, 255)
    shader: LinearGradient | None = None
    stroke_width: float = 1.0
    stroke_cap: StrokeCap = "round"
    stroke_join: StrokeJoin = "round"
    style: PaintingStyle = "stroke"
    blend_mode: BlendMode = "src_over"


@dataclass(frozen=True)
class DrawSubmission:
    """One `draw_path` call: the geometry and the paint it was drawn with."""

    kind: Literal["halo", "cutout", "primary"]
    path: Path
    paint: Paint
