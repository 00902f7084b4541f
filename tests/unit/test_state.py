import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from ascii_image.config import Config
from ascii_image.models import Status
from ascii_image.ui.state import ViewerState


class ViewerStateTests(unittest.TestCase):
    def setUp(self):
        self.state = ViewerState(Config(path="unused.json"))

    def test_cycle_dither_bumps_version(self):
        v = self.state.snapshot()
        self.assertEqual(self.state.cycle_dither(), "floyd")
        self.assertGreater(self.state.snapshot(), v)
        self.assertEqual(self.state.info_msg, "Dither floyd")

    def test_cycle_charset_covers_external_and_custom(self):
        self.state.update({"character_sets": {"mine": "xo"}})
        seen = [self.state.cycle_charset() for _ in range(7)]
        self.assertIn("mine", seen)
        self.assertIn("custom", seen)
        self.assertEqual(seen[-1], "detailed")

    def test_toggles(self):
        self.assertTrue(self.state.toggle("render", "invert_colors"))
        self.assertFalse(self.state.toggle("render", "invert_colors"))
        self.assertEqual(self.state.toggle_white_mode(), "keep")
        self.assertEqual(self.state.toggle_sizing(), "fill")
        self.assertEqual(self.state.cycle_color_mode(), "gradient")

    def test_adjust_clamps(self):
        for _ in range(20):
            value = self.state.adjust("contrast", 10, -100, 100)
        self.assertEqual(value, 100)

    def test_status(self):
        self.assertEqual(self.state.status, Status.LOADING)
        self.state.set_status(Status.ERROR, "bad")
        self.assertEqual((self.state.status, self.state.error), (Status.ERROR, "bad"))
        self.state.set_info("hello")
        self.assertEqual(self.state.pop_info(), "hello")
        self.assertEqual(self.state.pop_info(), "")

    def test_render_config(self):
        rc = self.state.render_config(0.5, output_width=33)
        self.assertEqual(rc.output_width, 33)
        self.assertEqual(rc.font_aspect_ratio, 0.5)
        self.assertEqual(rc.dither, "none")
        self.assertIsNone(rc.cursor)

    def test_static_forces_noise(self):
        self.state.update({"static": {"interval_s": 0.1}, "render": {"dither": "floyd"}})
        self.assertEqual(self.state.render_config(0.5).dither, "noise")


if __name__ == "__main__":
    unittest.main()
