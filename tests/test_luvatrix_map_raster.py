from __future__ import annotations

import unittest

import torch

from luvatrix_map.config import LayerOptions
from luvatrix_map.geo import DeviceProjector, LatLng
from luvatrix_map.layer import MapView, PolylineLayer
from luvatrix_map.paint import LinearGradient, Paint, Path
from luvatrix_map.raster import MatrixCanvas
from luvatrix_map.style import DashStrategy, Dashed, Polyline


RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def _px(frame: torch.Tensor, x: int, y: int) -> tuple[int, ...]:
    return tuple(int(v) for v in frame[y, x].tolist())


def _hline(x0: float, x1: float, y: float) -> Path:
    path = Path()
    path.add_polygon([(x0, y), (x1, y)], closed=False)
    return path


class MatrixCanvasTests(unittest.TestCase):
    def test_stroke_covers_band_around_line(self) -> None:
        canvas = MatrixCanvas(width=40, height=20)
        canvas.draw_path(_hline(2.0, 30.0, 10.0), Paint(color=RED, stroke_width=4.0, stroke_cap="butt"))
        frame = canvas.snapshot()
        self.assertEqual(tuple(frame.shape), (20, 40, 4))
        self.assertEqual(_px(frame, 15, 10), RED)
        self.assertEqual(_px(frame, 15, 8), RED)
        self.assertEqual(_px(frame, 15, 2), (0, 0, 0, 0))
        self.assertEqual(_px(frame, 35, 10), (0, 0, 0, 0))

    def test_round_cap_extends_past_endpoint(self) -> None:
        butt = MatrixCanvas(width=40, height=20)
        butt.draw_path(_hline(10.0, 20.0, 10.0), Paint(color=RED, stroke_width=6.0, stroke_cap="butt"))
        rounded = MatrixCanvas(width=40, height=20)
        rounded.draw_path(_hline(10.0, 20.0, 10.0), Paint(color=RED, stroke_width=6.0, stroke_cap="round"))
        self.assertEqual(_px(butt.snapshot(), 21, 10), (0, 0, 0, 0))
        self.assertEqual(_px(rounded.snapshot(), 21, 10), RED)

    def test_translucent_color_keeps_alpha(self) -> None:
        canvas = MatrixCanvas(width=20, height=20)
        canvas.draw_path(_hline(0.0, 20.0, 10.0), Paint(color=(255, 0, 0, 128), stroke_width=4.0))
        self.assertEqual(_px(canvas.snapshot(), 10, 10), (255, 0, 0, 128))

    def test_cutout_leaves_a_ring(self) -> None:
        canvas = MatrixCanvas(width=40, height=20)
        canvas.draw_path(_hline(2.0, 38.0, 10.0), Paint(color=(0, 0, 0, 255), stroke_width=8.0, stroke_cap="butt"))
        canvas.draw_path(
            _hline(2.0, 38.0, 10.0),
            Paint(color=(0, 0, 0, 255), stroke_width=4.0, stroke_cap="butt", blend_mode="dst_out"),
        )
        frame = canvas.snapshot()
        self.assertEqual(_px(frame, 20, 10)[3], 0)
        self.assertEqual(_px(frame, 20, 7), (0, 0, 0, 255))

        canvas.draw_path(_hline(2.0, 38.0, 10.0), Paint(color=RED, stroke_width=4.0, stroke_cap="butt"))
        self.assertEqual(_px(canvas.snapshot(), 20, 10), RED)

    def test_filled_oval(self) -> None:
        canvas = MatrixCanvas(width=20, height=20)
        path = Path()
        path.add_oval((10.0, 10.0), 3.0)
        canvas.draw_path(path, Paint(color=BLUE, style="fill"))
        frame = canvas.snapshot()
        self.assertEqual(_px(frame, 10, 10), BLUE)
        self.assertEqual(_px(frame, 15, 10), (0, 0, 0, 0))

    def test_filled_rectangle(self) -> None:
        canvas = MatrixCanvas(width=20, height=20)
        path = Path()
        path.add_polygon([(2.0, 2.0), (8.0, 2.0), (8.0, 6.0), (2.0, 6.0)], closed=True)
        canvas.draw_path(path, Paint(color=RED, style="fill"))
        frame = canvas.snapshot()
        self.assertEqual(_px(frame, 5, 4), RED)
        self.assertEqual(_px(frame, 9, 4), (0, 0, 0, 0))
        self.assertEqual(_px(frame, 5, 7), (0, 0, 0, 0))

    def test_linear_gradient_runs_first_to_last_point(self) -> None:
        canvas = MatrixCanvas(width=40, height=10)
        shader = LinearGradient(start=(0.0, 5.0), end=(40.0, 5.0), colors=(RED, BLUE), stops=(0.0, 1.0))
        canvas.draw_path(_hline(0.0, 40.0, 5.0), Paint(shader=shader, stroke_width=4.0, stroke_cap="butt"))
        frame = canvas.snapshot()
        left = _px(frame, 1, 5)
        right = _px(frame, 38, 5)
        self.assertGreater(left[0], left[2])
        self.assertGreater(right[2], right[0])

    def test_layers_compose_on_restore(self) -> None:
        canvas = MatrixCanvas(width=20, height=20, clear_color=(0, 0, 0, 255))
        canvas.save_layer()
        canvas.draw_path(_hline(0.0, 20.0, 10.0), Paint(color=RED, stroke_width=4.0))
        with self.assertRaises(RuntimeError):
            canvas.snapshot()
        canvas.restore()
        frame = canvas.snapshot()
        self.assertEqual(_px(frame, 10, 10), RED)
        self.assertEqual(_px(frame, 10, 2), (0, 0, 0, 255))
        with self.assertRaises(RuntimeError):
            canvas.restore()

    def test_invalid_size_rejected(self) -> None:
        with self.assertRaises(ValueError):
            MatrixCanvas(width=0, height=10)

    def test_to_image_matches_size(self) -> None:
        image = MatrixCanvas(width=12, height=7).to_image()
        self.assertEqual(image.size, (12, 7))
        self.assertEqual(image.mode, "RGBA")


class LayerRasterTests(unittest.TestCase):
    def test_rect_dashes_leave_gaps(self) -> None:
        line = Polyline(
            points=(LatLng(lat=10.0, lng=0.0), LatLng(lat=10.0, lng=40.0)),
            stroke_width=2.0,
            color=RED,
            pattern=Dashed(dash_width=4.0, dash_gap=3.0),
        )
        layer = PolylineLayer([line], options=LayerOptions(dash_strategy=DashStrategy.RECT))
        canvas = MatrixCanvas(width=48, height=20)
        layer.render(canvas, MapView(projector=DeviceProjector(), zoom=1.0))
        frame = canvas.snapshot()
        self.assertEqual(_px(frame, 4, 10), RED)
        self.assertEqual(_px(frame, 11, 10), (0, 0, 0, 0))
        self.assertEqual(_px(frame, 18, 10), RED)

    def test_bordered_line_shows_border_ring(self) -> None:
        line = Polyline(
            points=(LatLng(lat=10.0, lng=2.0), LatLng(lat=10.0, lng=38.0)),
            stroke_width=4.0,
            color=RED,
            border_stroke_width=4.0,
            border_color=(0, 0, 0, 255),
            stroke_cap="butt",
        )
        canvas = MatrixCanvas(width=40, height=20, clear_color=(255, 255, 255, 255))
        PolylineLayer([line]).render(canvas, MapView(projector=DeviceProjector(), zoom=1.0))
        frame = canvas.snapshot()
        self.assertEqual(_px(frame, 20, 10), RED)
        self.assertEqual(_px(frame, 20, 7), (0, 0, 0, 255))
        self.assertEqual(_px(frame, 20, 3), (255, 255, 255, 255))


if __name__ == "__main__":
    unittest.main()
