import sys
import unittest
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from ascii_image.models import ColorConfig
from ascii_image.rendering.colors import (
    blend_over,
    extract_main_colors,
    parse_color,
    resolve_colors,
    to_hex,
)


class ParseColorTests(unittest.TestCase):
    def test_formats(self):
        self.assertEqual(parse_color("#abc"), (170, 187, 204, 255))
        self.assertEqual(parse_color("#102030"), (16, 32, 48, 255))
        self.assertEqual(parse_color("#10203040"), (16, 32, 48, 64))

    def test_garbage_is_black(self):
        self.assertEqual(parse_color("nope"), (0, 0, 0, 255))
        self.assertEqual(parse_color(""), (0, 0, 0, 255))

    def test_to_hex(self):
        self.assertEqual(to_hex(255, 0, 16), "#ff0010")


class ResolveColorsTests(unittest.TestCase):
    def test_solid_mode_has_no_array(self):
        self.assertIsNone(resolve_colors(np.zeros((2, 2)), ColorConfig(mode="color")))

    def test_gradient_endpoints_and_midpoint(self):
        cfg = ColorConfig(mode="gradient", color1="#000000", color2="#ffffff",
                          color1_point=0, color2_point=100)
        out = resolve_colors(np.array([[0.0, 51.0, 255.0]]), cfg)
        self.assertEqual(out.shape, (1, 3, 4))
        self.assertEqual(out[0, 0].tolist(), [0, 0, 0, 255])
        self.assertEqual(out[0, 1].tolist(), [51, 51, 51, 255])
        self.assertEqual(out[0, 2].tolist(), [255, 255, 255, 255])

    def test_gradient_clamps_outside_points(self):
        cfg = ColorConfig(mode="gradient", color1="#ff0000", color2="#0000ff",
                          color1_point=25, color2_point=75)
        out = resolve_colors(np.array([[0.0, 255.0]]), cfg)
        self.assertEqual(out[0, 0].tolist(), [255, 0, 0, 255])
        self.assertEqual(out[0, 1].tolist(), [0, 0, 255, 255])

    def test_equal_points_split_hard(self):
        cfg = ColorConfig(mode="gradient", color1="#ff0000", color2="#0000ff",
                          color1_point=50, color2_point=50)
        out = resolve_colors(np.array([[127.0, 128.0]]), cfg)
        self.assertEqual(out[0, 0].tolist(), [255, 0, 0, 255])
        self.assertEqual(out[0, 1].tolist(), [0, 0, 255, 255])

    def test_reversed_points_swap_stops(self):
        cfg = ColorConfig(mode="gradient", color1="#ff0000", color2="#0000ff",
                          color1_point=100, color2_point=0)
        out = resolve_colors(np.array([[0.0, 255.0]]), cfg)
        self.assertEqual(out[0, 0].tolist(), [0, 0, 255, 255])
        self.assertEqual(out[0, 1].tolist(), [255, 0, 0, 255])

    def test_glow_fades_to_transparent(self):
        cfg = ColorConfig(mode="glow", color2="#00ff00", threshold=50)
        out = resolve_colors(np.array([[0.0, 100.0, 255.0]]), cfg)
        self.assertEqual(out[0, 0].tolist(), [0, 255, 0, 255])
        self.assertEqual(out[0, 1].tolist(), [0, 255, 0, 255])
        self.assertEqual(out[0, 2].tolist(), [0, 255, 0, 0])

    def test_gradient_halves_round_up(self):
        cfg = ColorConfig(mode="gradient", color1="#000000", color2="#010101",
                          color1_point=0, color2_point=100)
        out = resolve_colors(np.array([[127.5]]), cfg)
        self.assertEqual(out[0, 0].tolist(), [1, 1, 1, 255])

    def test_source_mode_uses_samples(self):
        rgb = np.array([[[10.0, 20.0, 30.0], [0.5, 254.5, 300.0]]])
        out = resolve_colors(np.zeros((1, 2)), ColorConfig(mode="source"), rgb)
        self.assertEqual(out.dtype, np.uint8)
        self.assertEqual(out[0, 0].tolist(), [10, 20, 30, 255])
        self.assertEqual(out[0, 1].tolist(), [1, 255, 255, 255])

    def test_source_mode_without_samples_is_gray(self):
        out = resolve_colors(np.array([[64.0]]), ColorConfig(mode="source"))
        self.assertEqual(out[0, 0].tolist(), [64, 64, 64, 255])

    def test_blend_over(self):
        self.assertEqual(blend_over((255, 255, 255, 0), (10, 20, 30)), (10, 20, 30))
        self.assertEqual(blend_over((255, 255, 255, 255), (10, 20, 30)), (255, 255, 255))
        self.assertEqual(blend_over((255, 255, 255, 51), (0, 0, 0)), (51, 51, 51))


class ExtractMainColorsTests(unittest.TestCase):
    def test_blue_dominant_image(self):
        rgba = np.zeros((4, 4, 4), dtype=np.uint8)
        rgba[...] = (20, 40, 200, 255)
        self.assertEqual(extract_main_colors(rgba), ("#1428c8", "#ffffff"))

    def test_defaults_to_blue(self):
        rgba = np.zeros((4, 4, 4), dtype=np.uint8)
        rgba[...] = (200, 10, 10, 255)
        self.assertEqual(extract_main_colors(rgba), ("#0000ff", "#ffffff"))

    def test_transparent_pixels_are_skipped(self):
        rgba = np.zeros((4, 4, 4), dtype=np.uint8)
        rgba[...] = (20, 40, 200, 0)
        self.assertEqual(extract_main_colors(rgba)[0], "#0000ff")


if __name__ == "__main__":
    unittest.main()
