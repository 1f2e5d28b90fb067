from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from luvatrix_map.config import DEFAULT_LAYER_OPTIONS, load_layer_options, validate_layer_options
from luvatrix_map.scene import load_scene, parse_color, parse_polyline
from luvatrix_map.style import DashStrategy, Dashed, Dotted, Gradient, Solid


class LayerOptionsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        options = validate_layer_options()
        self.assertEqual(options, DEFAULT_LAYER_OPTIONS)
        self.assertFalse(options.save_layers)
        self.assertEqual(options.dash_strategy, DashStrategy.RECT)
        self.assertTrue(options.layer_caching)

    def test_overrides_are_merged(self) -> None:
        options = validate_layer_options({"dash_strategy": "uniform", "min_stroke_width": 1})
        self.assertEqual(options.dash_strategy, DashStrategy.UNIFORM)
        self.assertEqual(options.min_stroke_width, 1.0)

    def test_unknown_key_rejected(self) -> None:
        with self.assertRaises(ValueError):
            validate_layer_options({"polyline_culling": True})

    def test_bad_values_rejected(self) -> None:
        for overrides in (
            {"dash_strategy": "zigzag"},
            {"save_layers": "yes"},
            {"layer_caching": 1},
            {"min_stroke_width": 0},
            {"min_stroke_width": True},
        ):
            with self.assertRaises(ValueError):
                validate_layer_options(overrides)

    def test_load_from_toml(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "layer.toml"
            path.write_text('[layer]\nsave_layers = true\ndash_strategy = "uniform"\n', encoding="utf-8")
            options = load_layer_options(path)
        self.assertTrue(options.save_layers)
        self.assertEqual(options.dash_strategy, DashStrategy.UNIFORM)

    def test_toml_without_layer_table_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "layer.toml"
            path.write_text('title = "map"\n', encoding="utf-8")
            self.assertEqual(load_layer_options(path), DEFAULT_LAYER_OPTIONS)


class SceneTests(unittest.TestCase):
    def test_parse_color_forms(self) -> None:
        self.assertEqual(parse_color("#FF8000"), (255, 128, 0, 255))
        self.assertEqual(parse_color("#FF800080"), (255, 128, 0, 128))
        self.assertEqual(parse_color([1, 2, 3]), (1, 2, 3, 255))
        for bad in ("red", "#12345", "#GG0000", [1, 2], [0, 0, 300]):
            with self.assertRaises(ValueError):
                parse_color(bad)

    def test_parse_polyline_patterns(self) -> None:
        dotted = parse_polyline({"points": [[0, 0], [1, 1]], "pattern": "dotted"})
        self.assertEqual(dotted.pattern, Dotted())
        dashed = parse_polyline(
            {"points": [[0, 0]], "pattern": "dashed", "dash_width": 2, "dash_gap": 5, "dash_strategy": "uniform"}
        )
        self.assertEqual(dashed.pattern, Dashed(dash_width=2.0, dash_gap=5.0, strategy=DashStrategy.UNIFORM))
        self.assertEqual(parse_polyline({"points": []}).pattern, Solid())

    def test_parse_polyline_style_fields(self) -> None:
        line = parse_polyline(
            {
                "points": [[48.1, 11.5], [48.2, 11.6]],
                "stroke_width": 5,
                "color": "#112233",
                "border_color": "#000000",
                "border_stroke_width": 2,
                "gradient_colors": ["#FF0000", "#0000FF"],
                "colors_stop": [0.0, 1.0],
                "stroke_cap": "butt",
                "stroke_join": "miter",
                "use_stroke_width_in_meter": True,
            }
        )
        self.assertEqual(line.points[0].lat, 48.1)
        self.assertEqual(line.points[0].lng, 11.5)
        self.assertEqual(line.color, (17, 34, 51, 255))
        self.assertTrue(line.has_border)
        self.assertEqual(line.gradient, Gradient(colors=((255, 0, 0, 255), (0, 0, 255, 255)), stops=(0.0, 1.0)))
        self.assertEqual(line.stroke_cap, "butt")
        self.assertTrue(line.use_stroke_width_in_meter)

    def test_parse_polyline_rejects_bad_input(self) -> None:
        for entry in (
            {"points": [[0, 0, 0]]},
            {"points": "0,0"},
            {"points": [], "pattern": "wavy"},
            {"points": [], "stroke_cap": "arrow"},
            {"points": [], "stroke_width": "wide"},
        ):
            with self.assertRaises(ValueError):
                parse_polyline(entry)

    def test_load_scene_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "scene.json"
            path.write_text(
                '{"view": {"center": [48.0, 11.0], "zoom": 12, "rotation": 5},'
                ' "polylines": [{"points": [[48.0, 11.0], [48.01, 11.01]]}, {"points": []}]}',
                encoding="utf-8",
            )
            scene = load_scene(path)
        self.assertEqual(scene.view.zoom, 12.0)
        self.assertEqual(scene.view.rotation, 5.0)
        self.assertEqual(len(scene.polylines), 2)


if __name__ == "__main__":
    unittest.main()
