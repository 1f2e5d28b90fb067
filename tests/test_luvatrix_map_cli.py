from __future__ import annotations

import contextlib
import io
import json
from pathlib import Path
import tempfile
import unittest
from unittest import mock

import main


SCENE = {
    "view": {"center": [48.137, 11.575], "zoom": 14},
    "polylines": [
        {"points": [[48.136, 11.570], [48.138, 11.580]], "color": "#FF0000", "stroke_width": 3},
        {"points": [[48.135, 11.571], [48.137, 11.579]], "color": "#FF0000", "stroke_width": 3},
        {"points": []},
        {"points": [[48.136, 11.572], [48.136, 11.578]], "pattern": "dotted", "color": "#0000FF"},
    ],
}


class CliTests(unittest.TestCase):
    def _run(self, *argv: str) -> str:
        out = io.StringIO()
        with mock.patch("sys.argv", ["luvatrix-map", *argv]), contextlib.redirect_stdout(out):
            main.main()
        return out.getvalue()

    def test_inspect_scene_reports_groups(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            scene_path = Path(td) / "scene.json"
            scene_path.write_text(json.dumps(SCENE), encoding="utf-8")
            summary = json.loads(self._run("inspect-scene", str(scene_path)))
        self.assertEqual(summary["polylines"], 4)
        self.assertEqual(summary["skipped"], [2])
        self.assertEqual([g["members"] for g in summary["groups"]], [[0, 1], [3]])
        self.assertEqual(summary["draw_calls"], 2)

    def test_render_scene_writes_png(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            scene_path = Path(td) / "scene.json"
            scene_path.write_text(json.dumps(SCENE), encoding="utf-8")
            out_path = Path(td) / "out" / "scene.png"
            text = self._run("render-scene", str(scene_path), "--out", str(out_path), "--width", "64", "--height", "48")
            self.assertTrue(out_path.exists())
        self.assertIn("groups=2", text)

    def test_config_file_feeds_options(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            config = Path(td) / "layer.toml"
            config.write_text('[layer]\ndash_strategy = "uniform"\n', encoding="utf-8")
            options = main._resolve_options(config, None, None, False)
            self.assertEqual(options.dash_strategy.value, "uniform")
            overridden = main._resolve_options(config, "rect", True, False)
        self.assertEqual(overridden.dash_strategy.value, "rect")
        self.assertTrue(overridden.save_layers)


if __name__ == "__main__":
    unittest.main()
