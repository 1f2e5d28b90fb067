from __future__ import annotations

from dataclasses import dataclass, field

import torch
from PIL import Image

from luvatrix_map.paint import LinearGradient, Oval, Paint, Path, SubPath


RGBA = tuple[int, int, int, int]


@dataclass
class MatrixCanvas:
    """Torch-backed raster surface for polyline paths.

    Pixels are sampled at their centers with hard coverage (no anti-aliasing).
    The frame is kept as premultiplied float RGBA so `dst_out` and transparency
    layers compose correctly; `snapshot` converts back to straight uint8.
    Miter joins are drawn as bevels.
    """

    width: int
    height: int
    clear_color: RGBA = (0, 0, 0, 0)
    _layers: list[torch.Tensor] = field(default_factory=list, init=False, repr=False)
    _grid_x: torch.Tensor | None = field(default=None, init=False, repr=False)
    _grid_y: torch.Tensor | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("canvas dimensions must be > 0")
        base = torch.zeros((self.height, self.width, 4), dtype=torch.float32)
        color = torch.tensor(self.clear_color, dtype=torch.float32) / 255.0
        base[:, :, :3] = color[:3] * color[3]
        base[:, :, 3] = color[3]
        self._layers = [base]
        self._grid_x = (torch.arange(self.width, dtype=torch.float32) + 0.5).unsqueeze(0).expand(self.height, self.width)
        self._grid_y = (torch.arange(self.height, dtype=torch.float32) + 0.5).unsqueeze(1).expand(self.height, self.width)

    def draw_path(self, path: Path, paint: Paint) -> None:
        mask = self._coverage(path, paint)
        if not bool(mask.any()):
            return
        src = self._source(paint)
        alpha = src[..., 3] * mask.to(torch.float32)
        frame = self._layers[-1]
        if paint.blend_mode == "dst_out":
            frame.mul_((1.0 - alpha).unsqueeze(-1))
            return
        frame[:, :, :3] = src[..., :3] * alpha.unsqueeze(-1) + frame[:, :, :3] * (1.0 - alpha).unsqueeze(-1)
        frame[:, :, 3] = alpha + frame[:, :, 3] * (1.0 - alpha)

    def save_layer(self) -> None:
        self._layers.append(torch.zeros((self.height, self.width, 4), dtype=torch.float32))

    def restore(self) -> None:
        if len(self._layers) < 2:
            raise RuntimeError("restore called without a matching save_layer")
        top = self._layers.pop()
        below = self._layers[-1]
        below.mul_((1.0 - top[:, :, 3]).unsqueeze(-1)).add_(top)

    def snapshot(self) -> torch.Tensor:
        if len(self._layers) != 1:
            raise RuntimeError("snapshot requires every save_layer to be restored")
        frame = self._layers[0]
        alpha = frame[:, :, 3:4]
        safe = torch.where(alpha > 1e-6, alpha, torch.ones_like(alpha))
        rgb = torch.where(alpha > 1e-6, frame[:, :, :3] / safe, torch.zeros_like(frame[:, :, :3]))
        out = torch.cat([rgb, alpha], dim=-1)
        return torch.clamp(out * 255.0 + 0.5, 0, 255).to(torch.uint8)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.snapshot().numpy())

    def _source(self, paint: Paint) -> torch.Tensor:
        if paint.shader is None:
            return torch.tensor(paint.color, dtype=torch.float32) / 255.0
        return self._gradient(paint.shader)

    def _gradient(self, shader: LinearGradient) -> torch.Tensor:
        assert self._grid_x is not None and self._grid_y is not None
        colors = torch.tensor(shader.colors, dtype=torch.float32) / 255.0
        if colors.shape[0] == 1:
            return colors[0]
        stops = torch.tensor(shader.stops, dtype=torch.float32)
        (sx, sy), (ex, ey) = shader.start, shader.end
        dx = ex - sx
        dy = ey - sy
        len2 = dx * dx + dy * dy
        if len2 <= 0:
            t = torch.zeros_like(self._grid_x)
        else:
            t = ((self._grid_x - sx) * dx + (self._grid_y - sy) * dy) / len2
        t = torch.clamp(t, 0.0, 1.0).contiguous()
        hi = torch.clamp(torch.bucketize(t, stops, right=True), 1, stops.shape[0] - 1)
        lo = hi - 1
        span = stops[hi] - stops[lo]
        safe = torch.where(span > 0, span, torch.ones_like(span))
        frac = torch.clamp((t - stops[lo]) / safe, 0.0, 1.0).unsqueeze(-1)
        return colors[lo] * (1.0 - frac) + colors[hi] * frac

    def _coverage(self, path: Path, paint: Paint) -> torch.Tensor:
        mask = torch.zeros((self.height, self.width), dtype=torch.bool)
        half = max(0.0, paint.stroke_width / 2.0)
        for element in path:
            if isinstance(element, Oval):
                self._cover_oval(mask, element, paint, half)
            elif paint.style == "fill":
                self._cover_polygon(mask, element)
            else:
                self._cover_stroke(mask, element, paint, half)
        return mask

    def _window(self, x0: float, y0: float, x1: float, y1: float) -> tuple[int, int, int, int] | None:
        xa = max(0, int(x0) - 1)
        ya = max(0, int(y0) - 1)
        xb = min(self.width, int(x1) + 2)
        yb = min(self.height, int(y1) + 2)
        if xb <= xa or yb <= ya:
            return None
        return (xa, ya, xb, yb)

    def _grids(self, window: tuple[int, int, int, int]) -> tuple[torch.Tensor, torch.Tensor]:
        assert self._grid_x is not None and self._grid_y is not None
        xa, ya, xb, yb = window
        return self._grid_x[ya:yb, xa:xb], self._grid_y[ya:yb, xa:xb]

    def _cover_oval(self, mask: torch.Tensor, oval: Oval, paint: Paint, half: float) -> None:
        (cx, cy), r = oval.center, oval.radius
        reach = r + (half if paint.style == "stroke" else 0.0)
        window = self._window(cx - reach, cy - reach, cx + reach, cy + reach)
        if window is None:
            return
        gx, gy = self._grids(window)
        dist = torch.sqrt((gx - cx) ** 2 + (gy - cy) ** 2)
        if paint.style == "fill":
            hit = dist <= r
        else:
            hit = (dist - r).abs() <= half
        xa, ya, xb, yb = window
        mask[ya:yb, xa:xb] |= hit

    def _cover_polygon(self, mask: torch.Tensor, sub: SubPath) -> None:
        pts = list(sub.points)
        if len(pts) < 3:
            return
        xs = [p[0] for p in pts]
        ys = [p[1] for p in pts]
        window = self._window(min(xs), min(ys), max(xs), max(ys))
        if window is None:
            return
        gx, gy = self._grids(window)
        inside = torch.zeros_like(gx, dtype=torch.bool)
        for (x0, y0), (x1, y1) in zip(pts, pts[1:] + pts[:1]):
            if y0 == y1:
                continue
            crosses = (gy < y0) != (gy < y1)
            x_cross = x0 + (gy - y0) * (x1 - x0) / (y1 - y0)
            inside ^= crosses & (gx < x_cross)
        xa, ya, xb, yb = window
        mask[ya:yb, xa:xb] |= inside

    def _cover_stroke(self, mask: torch.Tensor, sub: SubPath, paint: Paint, half: float) -> None:
        if half <= 0:
            return
        pts = list(sub.points)
        if sub.closed and len(pts) > 2:
            pts.append(pts[0])
        if len(pts) == 1:
            pts = pts * 2
        last = len(pts) - 2
        for i in range(len(pts) - 1):
            cap_start = paint.stroke_cap if i == 0 and not sub.closed else "butt"
            cap_end = paint.stroke_cap if i == last and not sub.closed else "butt"
            self._cover_segment(mask, pts[i], pts[i + 1], half, cap_start, cap_end)
        joints = range(1, len(pts) - 1)
        if sub.closed and len(pts) > 3:
            joints = range(0, len(pts) - 1)
        for j in joints:
            prev_pt = pts[j - 1] if j > 0 else pts[-2]
            self._cover_join(mask, prev_pt, pts[j], pts[j + 1], half, paint.stroke_join)

    def _cover_segment(
        self,
        mask: torch.Tensor,
        a: tuple[float, float],
        b: tuple[float, float],
        half: float,
        cap_start: str,
        cap_end: str,
    ) -> None:
        (ax, ay), (bx, by) = a, b
        window = self._window(min(ax, bx) - half, min(ay, by) - half, max(ax, bx) + half, max(ay, by) + half)
        if window is None:
            return
        gx, gy = self._grids(window)
        dx = bx - ax
        dy = by - ay
        length = (dx * dx + dy * dy) ** 0.5
        if length == 0:
            if "round" in (cap_start, cap_end):
                hit = (gx - ax) ** 2 + (gy - ay) ** 2 <= half * half
            elif "square" in (cap_start, cap_end):
                hit = ((gx - ax).abs() <= half) & ((gy - ay).abs() <= half)
            else:
                return
        else:
            ux = dx / length
            uy = dy / length
            along = (gx - ax) * ux + (gy - ay) * uy
            across = (-(gx - ax) * uy + (gy - ay) * ux).abs()
            lo = -half if cap_start == "square" else 0.0
            hi = length + half if cap_end == "square" else length
            hit = (across <= half) & (along >= lo) & (along <= hi)
            if cap_start == "round":
                hit |= (gx - ax) ** 2 + (gy - ay) ** 2 <= half * half
            if cap_end == "round":
                hit |= (gx - bx) ** 2 + (gy - by) ** 2 <= half * half
        xa, ya, xb, yb = window
        mask[ya:yb, xa:xb] |= hit

    def _cover_join(
        self,
        mask: torch.Tensor,
        prev_pt: tuple[float, float],
        vertex: tuple[float, float],
        next_pt: tuple[float, float],
        half: float,
        join: str,
    ) -> None:
        vx, vy = vertex
        if join == "round":
            window = self._window(vx - half, vy - half, vx + half, vy + half)
            if window is None:
                return
            gx, gy = self._grids(window)
            xa, ya, xb, yb = window
            mask[ya:yb, xa:xb] |= (gx - vx) ** 2 + (gy - vy) ** 2 <= half * half
            return
        n_in = _normal(prev_pt, vertex)
        n_out = _normal(vertex, next_pt)
        if n_in is None or n_out is None:
            return
        for sign in (1.0, -1.0):
            tri = SubPath(
                points=(
                    (vx, vy),
                    (vx + sign * n_in[0] * half, vy + sign * n_in[1] * half),
                    (vx + sign * n_out[0] * half, vy + sign * n_out[1] * half),
                ),
                closed=True,
            )
            self._cover_polygon(mask, tri)


def _normal(a: tuple[float, float], b: tuple[float, float]) -> tuple[float, float] | None:
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    length = (dx * dx + dy * dy) ** 0.5
    if length == 0:
        return None
    return (-dy / length, dx / length)
