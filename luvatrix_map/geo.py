from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, Protocol

from pyproj import Geod, Transformer


TILE_SIZE_PX = 256.0
EARTH_CIRCUMFERENCE_M = 2.0 * math.pi * 6378137.0


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float


@dataclass(frozen=True)
class LatLngBounds:
    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_points(cls, points: Iterable[LatLng]) -> "LatLngBounds":
        pts = list(points)
        if not pts:
            raise ValueError("bounds require at least one point")
        lats = [p.lat for p in pts]
        lngs = [p.lng for p in pts]
        return cls(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))

    def contains(self, point: LatLng) -> bool:
        return self.south <= point.lat <= self.north and self.west <= point.lng <= self.east

    def is_overlapping(self, other: "LatLngBounds") -> bool:
        if self.north < other.south or self.south > other.north:
            return False
        if self.east < other.west or self.west > other.east:
            return False
        return True


class Projector(Protocol):
    """Maps a geographic point into device pixels for the current view."""

    def project(self, point: LatLng) -> tuple[float, float]:
        ...


class GroundOffset(Protocol):
    """Moves a geographic point by a ground distance along a bearing."""

    def offset(self, point: LatLng, distance_m: float, bearing_deg: float) -> LatLng:
        ...


class GeodesicOffset:
    """WGS84 forward geodesic, used to convert meter widths into pixels."""

    def __init__(self, ellps: str = "WGS84") -> None:
        self._geod = Geod(ellps=ellps)

    def offset(self, point: LatLng, distance_m: float, bearing_deg: float) -> LatLng:
        lng, lat, _ = self._geod.fwd(point.lng, point.lat, bearing_deg, distance_m)
        return LatLng(lat=float(lat), lng=float(lng))


class MercatorProjector:
    """Web Mercator view projector for a viewport of `width` x `height` pixels.

    The projected point is relative to the viewport's top-left corner, with the
    map `center` at the middle of the viewport and `rotation_deg` applied
    clockwise around it.
    """

    def __init__(
        self,
        center: LatLng,
        zoom: float,
        width: int,
        height: int,
        rotation_deg: float = 0.0,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be > 0")
        self.center = center
        self.zoom = float(zoom)
        self.rotation_deg = float(rotation_deg)
        self._width = width
        self._height = height
        self._to_mercator = Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)
        self._from_mercator = Transformer.from_crs("EPSG:3857", "EPSG:4326", always_xy=True)
        self._scale = (TILE_SIZE_PX * (2.0 ** self.zoom)) / EARTH_CIRCUMFERENCE_M
        self._origin = self._world_px(center)
        theta = math.radians(self.rotation_deg)
        self._cos = math.cos(theta)
        self._sin = math.sin(theta)

    def project(self, point: LatLng) -> tuple[float, float]:
        wx, wy = self._world_px(point)
        dx = wx - self._origin[0]
        dy = wy - self._origin[1]
        rx = dx * self._cos - dy * self._sin
        ry = dx * self._sin + dy * self._cos
        return (rx + self._width / 2.0, ry + self._height / 2.0)

    def visible_bounds(self) -> LatLngBounds:
        corners = [
            self._unproject(0.0, 0.0),
            self._unproject(float(self._width), 0.0),
            self._unproject(0.0, float(self._height)),
            self._unproject(float(self._width), float(self._height)),
        ]
        return LatLngBounds.from_points(corners)

    def _world_px(self, point: LatLng) -> tuple[float, float]:
        mx, my = self._to_mercator.transform(point.lng, point.lat)
        return (mx * self._scale, -my * self._scale)

    def _unproject(self, x: float, y: float) -> LatLng:
        rx = x - self._width / 2.0
        ry = y - self._height / 2.0
        dx = rx * self._cos + ry * self._sin
        dy = -rx * self._sin + ry * self._cos
        mx = (dx + self._origin[0]) / self._scale
        my = -(dy + self._origin[1]) / self._scale
        lng, lat = self._from_mercator.transform(mx, my)
        return LatLng(lat=float(lat), lng=float(lng))


class DeviceProjector:
    """Treats `lng` as x and `lat` as y; for geometry already in device space."""

    def project(self, point: LatLng) -> tuple[float, float]:
        return (float(point.lng), float(point.lat))
