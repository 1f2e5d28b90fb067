from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
import hashlib
from typing import Callable, Generic, Iterable, Literal, TypeVar, Union

from luvatrix_map.geo import LatLng, LatLngBounds


Color = tuple[int, int, int, int]
StrokeCap = Literal["butt", "round", "square"]
StrokeJoin = Literal["miter", "round", "bevel"]

T = TypeVar("T")


class DashStrategy(str, Enum):
    UNIFORM = "uniform"
    RECT = "rect"


@dataclass(frozen=True)
class Solid:
    pass


@dataclass(frozen=True)
class Dotted:
    pass


@dataclass(frozen=True)
class Dashed:
    """Dash pattern in stroke-width units; `strategy=None` uses the layer default."""

    dash_width: float = 4.0
    dash_gap: float = 3.0
    strategy: DashStrategy | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "dash_width", float(self.dash_width))
        object.__setattr__(self, "dash_gap", float(self.dash_gap))
        if self.strategy is not None:
            object.__setattr__(self, "strategy", DashStrategy(self.strategy))


StrokePattern = Union[Solid, Dotted, Dashed]


@dataclass(frozen=True)
class Flat:
    color: Color


@dataclass(frozen=True)
class Gradient:
    colors: tuple[Color, ...]
    stops: tuple[float, ...] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", tuple(tuple(c) for c in self.colors))
        if self.stops is not None:
            object.__setattr__(self, "stops", tuple(float(s) for s in self.stops))


ColorSource = Union[Flat, Gradient]


class Lazy(Generic[T]):
    """Two-state cell: uncomputed until the first `get`, then fixed."""

    __slots__ = ("_computed", "_value")

    def __init__(self) -> None:
        self._computed = False
        self._value: T | None = None

    @property
    def computed(self) -> bool:
        return self._computed

    def get(self, compute: Callable[[], T]) -> T:
        if not self._computed:
            self._value = compute()
            self._computed = True
        return self._value  # type: ignore[return-value]


_DERIVED_FIELDS = {"points", "_bounds", "_style_fp", "_geometry_fp"}


@dataclass(frozen=True)
class Polyline:
    """One renderable path: geographic points plus its visual style."""

    points: tuple[LatLng, ...]
    stroke_width: float = 1.0
    color: Color = (0, 255, 0, 255)
    border_stroke_width: float = 0.0
    border_color: Color | None = None
    gradient: Gradient | None = None
    pattern: StrokePattern = field(default_factory=Solid)
    stroke_cap: StrokeCap = "round"
    stroke_join: StrokeJoin = "round"
    use_stroke_width_in_meter: bool = False
    _bounds: Lazy[LatLngBounds] = field(default_factory=Lazy, init=False, repr=False, compare=False)
    _style_fp: Lazy[str] = field(default_factory=Lazy, init=False, repr=False, compare=False)
    _geometry_fp: Lazy[str] = field(default_factory=Lazy, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        object.__setattr__(self, "stroke_width", float(self.stroke_width))
        object.__setattr__(self, "border_stroke_width", float(self.border_stroke_width))
        object.__setattr__(self, "color", tuple(self.color))
        if self.border_color is not None:
            object.__setattr__(self, "border_color", tuple(self.border_color))

    @classmethod
    def from_flags(
        cls,
        points: Iterable[LatLng],
        *,
        is_dotted: bool = False,
        is_dashed: bool = False,
        dash_width: float = 4.0,
        dash_gap: float = 3.0,
        gradient_colors: Iterable[Color] | None = None,
        colors_stop: Iterable[float] | None = None,
        **style,
    ) -> "Polyline":
        # Dotted takes precedence when both flags are set.
        if is_dotted:
            pattern: StrokePattern = Dotted()
        elif is_dashed:
            pattern = Dashed(dash_width=dash_width, dash_gap=dash_gap)
        else:
            pattern = Solid()
        gradient = None
        if gradient_colors is not None:
            stops = tuple(colors_stop) if colors_stop is not None else None
            gradient = Gradient(colors=tuple(gradient_colors), stops=stops)
        return cls(points=tuple(points), pattern=pattern, gradient=gradient, **style)

    @property
    def is_dotted(self) -> bool:
        return isinstance(self.pattern, Dotted)

    @property
    def is_dashed(self) -> bool:
        return isinstance(self.pattern, Dashed)

    @property
    def has_border(self) -> bool:
        return self.border_stroke_width > 0.0 and self.border_color is not None

    @property
    def color_source(self) -> ColorSource:
        if self.gradient is not None and self.gradient.colors:
            return self.gradient
        return Flat(self.color)

    @property
    def bounding_box(self) -> LatLngBounds:
        return self._bounds.get(lambda: LatLngBounds.from_points(self.points))

    @property
    def style_fingerprint(self) -> str:
        """Digest of every styling field; used to batch draw calls."""
        return self._style_fp.get(self._compute_style_fingerprint)

    @property
    def geometry_fingerprint(self) -> str:
        return self._geometry_fp.get(
            lambda: _digest(tuple((p.lat, p.lng) for p in self.points))
        )

    def style_key(self) -> tuple:
        return tuple(
            (f.name, getattr(self, f.name)) for f in fields(self) if f.name not in _DERIVED_FIELDS
        )

    def _compute_style_fingerprint(self) -> str:
        return _digest(self.style_key())


def _digest(value: object) -> str:
    return hashlib.sha256(repr(value).encode("utf-8")).hexdigest()
