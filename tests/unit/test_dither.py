import sys
import unittest
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from ascii_image.rendering.dither import BLANK, Ditherer, SeededRandom, apply_jitter, quantize, render_rows
from ascii_image.rendering.photometric import normalize

STANDARD = "@%#*+=-:."
ALGORITHMS = ("none", "floyd", "atkinson", "ordered", "noise")


def gray_buffer(values):
    arr = np.asarray(values, dtype=np.uint8)
    rgba = np.zeros(arr.shape + (4,), dtype=np.uint8)
    rgba[..., :3] = arr[..., None]
    rgba[..., 3] = 255
    return normalize(rgba)


def random_buffer(w=16, h=12, seed=3):
    rng = np.random.RandomState(seed)
    return gray_buffer(rng.randint(0, 256, size=(h, w)))


class SeededRandomTests(unittest.TestCase):
    def test_first_draw(self):
        rng = SeededRandom(1)
        self.assertAlmostEqual(rng.next(), 16806 / 2147483646)
        self.assertEqual(rng.seed, 16807)

    def test_same_seed_same_sequence(self):
        a, b = SeededRandom(42), SeededRandom(42)
        self.assertEqual([a.next() for _ in range(5)], [b.next() for _ in range(5)])

    def test_values_in_unit_interval(self):
        rng = SeededRandom(0)
        for _ in range(1000):
            v = rng.next()
            self.assertGreaterEqual(v, 0.0)
            self.assertLessEqual(v, 1.0)


class QuantizeTests(unittest.TestCase):
    def test_mid_gray_maps_to_middle_glyph(self):
        buf = gray_buffer(np.full((3, 4), 128))
        indices = quantize(buf, STANDARD, "none")
        self.assertTrue(np.all(indices == 4))
        self.assertEqual(render_rows(indices, STANDARD), ("++++",) * 3)

    def test_extremes(self):
        indices = quantize(gray_buffer([[0, 255]]), STANDARD, "none", "keep")
        self.assertEqual(indices.tolist(), [[0, 8]])

    def test_white_pixel_ignored(self):
        buf = gray_buffer([[255]])
        for algorithm in ALGORITHMS:
            indices = quantize(buf, STANDARD, algorithm, "ignore", seed=9)
            self.assertEqual(indices.tolist(), [[BLANK]], algorithm)
            self.assertEqual(render_rows(indices, STANDARD), (" ",))

    def test_white_pixel_kept(self):
        indices = quantize(gray_buffer([[255]]), STANDARD, "none", "keep")
        self.assertEqual(render_rows(indices, STANDARD), (".",))

    def test_indices_in_range_for_every_algorithm(self):
        for algorithm in ALGORITHMS:
            for white_mode in ("keep", "ignore"):
                indices = quantize(random_buffer(), STANDARD, algorithm, white_mode, seed=5)
                self.assertEqual(indices.shape, (12, 16))
                self.assertTrue(np.all(indices < len(STANDARD)), algorithm)
                if white_mode == "keep":
                    self.assertTrue(np.all(indices >= 0), algorithm)
                else:
                    self.assertTrue(np.all(indices >= BLANK), algorithm)

    def test_single_glyph_palette(self):
        for algorithm in ALGORITHMS:
            indices = quantize(random_buffer(), "#", algorithm, "keep", seed=2)
            self.assertTrue(np.all(indices == 0), algorithm)

    def test_noise_is_reproducible(self):
        a = quantize(random_buffer(), STANDARD, "noise", seed=1234)
        b = quantize(random_buffer(), STANDARD, "noise", seed=1234)
        self.assertEqual(a.tolist(), b.tolist())

    def test_noise_depends_on_seed(self):
        buf = gray_buffer(np.full((16, 16), 120))
        a = quantize(buf, STANDARD, "noise", seed=1)
        b = quantize(buf, STANDARD, "noise", seed=99)
        self.assertNotEqual(a.tolist(), b.tolist())

    def test_ordered_is_stateless(self):
        buf = random_buffer()
        before = buf.working.copy()
        a = quantize(buf, STANDARD, "ordered")
        b = quantize(buf, STANDARD, "ordered")
        self.assertEqual(a.tolist(), b.tolist())
        self.assertTrue(np.array_equal(buf.working, before))

    def test_diffusion_only_touches_working(self):
        buf = random_buffer()
        original = buf.original.copy()
        quantize(buf, STANDARD, "floyd")
        self.assertTrue(np.array_equal(buf.original, original))
        self.assertFalse(np.array_equal(buf.working, original))
        self.assertTrue(np.all((buf.working >= 0) & (buf.working <= 255)))

    def test_ignored_white_cells_carry_no_error(self):
        values = np.full((3, 5), 255)
        values[1, 2] = 100
        for algorithm in ("floyd", "atkinson"):
            buf = gray_buffer(values)
            indices = quantize(buf, STANDARD, algorithm, "ignore")
            direct = quantize(gray_buffer(values), STANDARD, "none", "ignore")
            self.assertEqual(indices.tolist(), direct.tolist(), algorithm)
            self.assertEqual(int((indices != BLANK).sum()), 1)

    def test_flat_mid_gray_floyd_alternates(self):
        # Roughly halfway between the two levels.
        indices = quantize(gray_buffer(np.full((8, 8), 127)), "#.", "floyd")
        self.assertEqual(set(np.unique(indices).tolist()), {0, 1})

    def test_unknown_algorithm_falls_back(self):
        buf = random_buffer()
        with self.assertLogs("ascii_image.rendering.dither", "WARNING"):
            indices = Ditherer().quantize(buf, STANDARD, "bogus")
        self.assertEqual(indices.tolist(), quantize(buf, STANDARD, "none").tolist())


class JitterTests(unittest.TestCase):
    def test_jitter_is_bounded_and_reproducible(self):
        a, b = random_buffer(), random_buffer()
        apply_jitter(a, 11)
        apply_jitter(b, 11)
        self.assertEqual(a.working.tolist(), b.working.tolist())
        delta = np.abs(a.working - a.original)
        self.assertLessEqual(float(delta.max()), 0.05 * 255 + 1e-9)
        self.assertTrue(np.all((a.working >= 0) & (a.working <= 255)))

    def test_jitter_draws_one_value_per_cell(self):
        buf = gray_buffer(np.full((2, 3), 100))
        apply_jitter(buf, 7)
        rng = SeededRandom(7)
        expected = [100 + (rng.next() - 0.5) * 0.1 * 255 for _ in range(6)]
        for got, want in zip(buf.working.ravel().tolist(), expected):
            self.assertAlmostEqual(got, want)

    def test_jitter_keeps_original(self):
        buf = gray_buffer([[255, 255]])
        apply_jitter(buf, 3)
        self.assertEqual(buf.original.tolist(), [[255.0, 255.0]])
        indices = quantize(buf, STANDARD, "none", "ignore")
        self.assertEqual(indices.tolist(), [[BLANK, BLANK]])


if __name__ == "__main__":
    unittest.main()
