import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from ascii_image.ui.cursor import CursorTracker, Spring, map_range


class MapRangeTests(unittest.TestCase):
    def test_stiffness_range(self):
        self.assertEqual(map_range(0, 0, 100, 2000, 50), 2000)
        self.assertEqual(map_range(100, 0, 100, 2000, 50), 50)
        self.assertEqual(map_range(50, 0, 100, 2000, 50), 1025)

    def test_degenerate_input_range(self):
        self.assertEqual(map_range(5, 1, 1, 10, 20), 10)


class SpringTests(unittest.TestCase):
    def test_converges_to_target(self):
        s = Spring(stiffness=1025)
        s.set_target(1.0)
        s.step(2.0)
        self.assertAlmostEqual(s.value, 1.0, places=3)

    def test_jump_settles_immediately(self):
        s = Spring(stiffness=500)
        s.jump(0.3)
        self.assertTrue(s.settled)
        self.assertEqual(s.step(0.1), 0.3)

    def test_moves_towards_target_without_overshoot(self):
        s = Spring(stiffness=500)
        s.set_target(1.0)
        values = [s.step(0.016) for _ in range(60)]
        self.assertTrue(all(0.0 <= v <= 1.0 for v in values))
        self.assertEqual(values, sorted(values))


class CursorTrackerTests(unittest.TestCase):
    def test_no_position_before_first_event(self):
        self.assertIsNone(CursorTracker().position())

    def test_unsmoothed_follows_pointer(self):
        t = CursorTracker(smoothing=0)
        t.on_pointer(25, 50, 100, 100)
        self.assertEqual(t.position(), (0.25, 0.5))
        t.on_pointer(75, 10, 100, 100)
        self.assertEqual(t.position(), (0.75, 0.1))

    def test_first_event_jumps_when_smoothed(self):
        t = CursorTracker(smoothing=50)
        t.on_pointer(50, 25, 100, 100)
        self.assertTrue(t.initialized)
        self.assertEqual(t.position(), (0.5, 0.25))

    def test_smoothed_lags_then_catches_up(self):
        t = CursorTracker(smoothing=50)
        t.on_pointer(0, 0, 100, 100)
        t.on_pointer(100, 100, 100, 100)
        t.tick(0.01)
        x, y = t.position()
        self.assertGreater(x, 0.0)
        self.assertLess(x, 1.0)
        t.tick(3.0)
        x, y = t.position()
        self.assertAlmostEqual(x, 1.0, places=3)
        self.assertAlmostEqual(y, 1.0, places=3)

    def test_scroll_is_folded_into_position(self):
        t = CursorTracker(smoothing=0)
        t.on_pointer(10, 10, 100, 100)
        t.on_scroll(0, 0, 100, 100)
        t.on_scroll(0, 20, 100, 100)
        x, y = t.position()
        self.assertAlmostEqual(x, 0.1)
        self.assertAlmostEqual(y, 0.3)

    def test_scroll_before_pointer_is_ignored(self):
        t = CursorTracker()
        t.on_scroll(0, 40, 100, 100)
        self.assertIsNone(t.position())

    def test_zero_sized_surface(self):
        t = CursorTracker()
        t.on_pointer(10, 10, 0, 0)
        self.assertEqual(t.position(), (0.0, 0.0))


if __name__ == "__main__":
    unittest.main()
