import random
import sys
import threading
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from ascii_image.ui.controller import MIN_STATIC_INTERVAL_S, InteractionController
from ascii_image.ui.cursor import CursorTracker


class ControllerTests(unittest.TestCase):
    def setUp(self):
        self.calls = []
        self.version = 0
        self.tracker = CursorTracker()
        self.controller = InteractionController(
            self.calls.append,
            lambda: self.version,
            tracker=self.tracker,
            rng=random.Random(7),
        )

    def tearDown(self):
        self.controller.stop()

    def test_poll_reruns_only_on_change(self):
        self.assertTrue(self.controller.poll_once(0.0))
        self.assertFalse(self.controller.poll_once(0.0))
        self.version += 1
        self.assertTrue(self.controller.poll_once(0.0))
        self.assertEqual(len(self.calls), 2)

    def test_pointer_movement_triggers_rerun(self):
        self.controller.poll_once(0.0)
        self.tracker.on_pointer(5, 5, 10, 10)
        self.assertTrue(self.controller.poll_once(0.0))
        self.assertFalse(self.controller.poll_once(0.0))

    def test_poll_uses_current_seed(self):
        self.controller.poll_once(0.0)
        self.assertEqual(self.calls, [self.controller.seed])

    def test_static_tick_reseeds_and_reruns(self):
        seeds = {self.controller.seed}
        for _ in range(3):
            seed = self.controller.static_tick()
            self.assertEqual(self.calls[-1], seed)
            self.assertEqual(self.controller.seed, seed)
            self.assertTrue(1 <= seed <= 2147483646)
            seeds.add(seed)
        self.assertEqual(len(self.calls), 3)
        self.assertGreater(len(seeds), 1)

    def test_static_interval_floor(self):
        c = InteractionController(lambda seed: None, lambda: 0, static_interval=0.01)
        self.assertEqual(c.static_interval, MIN_STATIC_INTERVAL_S)
        self.assertTrue(c.static_active)
        c = InteractionController(lambda seed: None, lambda: 0, static_interval=0)
        self.assertFalse(c.static_active)

    def test_set_static_interval(self):
        self.controller.set_static_interval(0.2)
        self.assertEqual(self.controller.static_interval, 0.2)
        self.controller.set_static_interval(None)
        self.assertFalse(self.controller.static_active)

    def test_rerun_errors_are_logged(self):
        def boom(seed):
            raise RuntimeError("nope")

        c = InteractionController(boom, lambda: 0)
        with self.assertLogs("ascii_image.ui.controller", "ERROR"):
            self.assertTrue(c.poll_once(0.0))

    def test_start_renders_on_poll_thread(self):
        threads = []
        rendered = threading.Event()

        def rerun(seed):
            threads.append(threading.current_thread().name)
            rendered.set()

        c = InteractionController(rerun, lambda: 0)
        c.start()
        try:
            self.assertTrue(rendered.wait(5.0))
            self.assertEqual(threads[0], "ascii-poll")
        finally:
            c.stop()
        self.assertFalse(c.running)

    def test_restart_does_not_revive_old_threads(self):
        self.controller.start()
        old_stop = self.controller._stop
        old_threads = list(self.controller._threads)
        self.controller.set_static_interval(0.2)
        self.assertTrue(old_stop.is_set())
        self.assertIsNot(self.controller._stop, old_stop)
        self.assertFalse(self.controller._stop.is_set())
        self.assertTrue(self.controller.running)
        self.assertEqual(len(self.controller._threads), 2)
        for t in old_threads:
            t.join(5.0)
            self.assertFalse(t.is_alive())
            self.assertNotIn(t, self.controller._threads)


if __name__ == "__main__":
    unittest.main()
