import sys
import threading
import unittest
from pathlib import Path

from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from ascii_image.models import RenderConfig
from ascii_image.pipeline import AsciiPipeline
from ascii_image.worker import AsciiWorker, WorkerClosedError


class GatedPipeline(AsciiPipeline):
    """Blocks the first transform until released."""

    def __init__(self):
        super().__init__()
        self.gate = threading.Event()
        self.started = threading.Event()
        self.calls = 0

    def transform(self, rgba, config, seed=1):
        self.calls += 1
        if self.calls == 1:
            self.started.set()
            self.gate.wait(5.0)
        return super().transform(rgba, config, seed)


class FailingPipeline(AsciiPipeline):
    def transform(self, rgba, config, seed=1):
        raise ValueError("boom")


class WorkerTests(unittest.TestCase):
    def setUp(self):
        self.config = RenderConfig(output_width=16, font_aspect_ratio=0.5, character_set="standard")
        self.img = Image.linear_gradient("L").convert("RGB")
        self.workers = []

    def tearDown(self):
        for w in self.workers:
            w.shutdown()

    def _worker(self, pipeline=None, on_result=None):
        w = AsciiWorker(pipeline, on_result=on_result)
        self.workers.append(w)
        return w

    def _sample(self, pipeline):
        return pipeline.sample(self.img, self.config)

    def test_submit_and_wait(self):
        w = self._worker()
        rid = w.submit(self._sample(w.pipeline), self.config)
        result = w.wait(rid)
        self.assertIsNotNone(result)
        self.assertTrue(result.ok)
        self.assertEqual(result.request_id, rid)
        self.assertEqual(result.grid.width, 16)

    def test_ids_increase(self):
        w = self._worker()
        a = w.submit(self._sample(w.pipeline), self.config)
        b = w.submit(self._sample(w.pipeline), self.config)
        self.assertGreater(b, a)
        self.assertEqual(w.latest_id, b)

    def test_latest_result_wins(self):
        pipeline = GatedPipeline()
        w = self._worker(pipeline)
        first = w.submit(self._sample(pipeline), self.config)
        self.assertTrue(pipeline.started.wait(5.0))
        second = w.submit(self._sample(pipeline), self.config)
        pipeline.gate.set()
        self.assertIsNone(w.wait(first, timeout=0.5))
        result = w.wait(second)
        self.assertIsNotNone(result)
        self.assertEqual(result.request_id, second)
        self.assertIsNone(w.poll())

    def test_errors_are_reported(self):
        w = self._worker(FailingPipeline())
        with self.assertLogs("ascii_image.worker", "ERROR"):
            rid = w.submit(self._sample(w.pipeline), self.config)
            result = w.wait(rid)
        self.assertIsNotNone(result)
        self.assertFalse(result.ok)
        self.assertIn("ValueError", result.error)

    def test_callback_runs(self):
        seen = threading.Event()
        w = self._worker(on_result=lambda result: seen.set())
        w.submit(self._sample(w.pipeline), self.config)
        self.assertTrue(seen.wait(5.0))

    def test_submit_after_shutdown_raises(self):
        w = self._worker()
        w.shutdown()
        self.assertTrue(w.closed)
        with self.assertRaises(WorkerClosedError):
            w.submit(self._sample(w.pipeline), self.config)
        self.assertIsNone(w.poll())

    def test_inflight_result_dropped_after_shutdown(self):
        pipeline = GatedPipeline()
        seen = []
        w = self._worker(pipeline, on_result=seen.append)
        w.submit(self._sample(pipeline), self.config)
        self.assertTrue(pipeline.started.wait(5.0))
        w.shutdown()
        pipeline.gate.set()
        w._thread.join(5.0)
        self.assertFalse(w._thread.is_alive())
        self.assertTrue(w._res_q.empty())
        self.assertIsNone(w.poll())
        self.assertEqual(seen, [])


if __name__ == "__main__":
    unittest.main()
