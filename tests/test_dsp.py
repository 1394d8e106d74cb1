import pathlib
import sys
import unittest
import warnings

import numpy as np

# Ensure src/ is on path for direct test execution
ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from irconvolve.dsp import Signal, convolve, normalize  # noqa: E402
from irconvolve.errors import InvalidInput, RateMismatch  # noqa: E402


def _impulse(n: int = 8) -> np.ndarray:
    x = np.zeros(n, dtype=np.float32)
    x[0] = 1.0
    return x


class ConvolveTest(unittest.TestCase):
    def setUp(self):
        rng = np.random.default_rng(7)
        self.x8 = rng.uniform(-1.0, 1.0, 8).astype(np.float32)
        self.x8[0] = 0.75
        self.y8 = rng.uniform(-1.0, 1.0, 8).astype(np.float32)
        self.y8[0] = -0.5

    def test_impulse_reproduces_signal(self):
        result = convolve(Signal(self.x8, 44100), Signal(_impulse(), 44100))

        self.assertEqual(result.fft_length, 16)
        self.assertEqual(result.length, 8)
        np.testing.assert_allclose(result.samples, self.x8 / self.x8[0], atol=1e-5)

    def test_impulse_reproduces_longer_signal(self):
        x16 = np.linspace(1.0, -1.0, 16).astype(np.float32)
        result = convolve(Signal(x16, 48000), Signal(_impulse(16), 48000))

        self.assertEqual(result.fft_length, 32)
        np.testing.assert_allclose(result.samples, x16, atol=1e-5)

    def test_matches_direct_convolution_for_eight_by_eight(self):
        direct = np.convolve(self.x8.astype(np.float64), self.y8.astype(np.float64))
        result = convolve(Signal(self.x8, 44100), Signal(self.y8, 44100))

        np.testing.assert_allclose(result.samples, direct[:8] / direct[0], rtol=1e-4, atol=1e-4)

    def test_unnormalized_output_carries_transform_scale(self):
        direct = np.convolve(self.x8.astype(np.float64), self.y8.astype(np.float64))
        result = convolve(Signal(self.x8, 44100), Signal(self.y8, 44100), normalize_mode="none")

        # forward yields 2X per input, inverse multiplies by N=16
        np.testing.assert_allclose(result.samples, 64.0 * direct[:8], rtol=1e-4, atol=1e-3)
        self.assertEqual(result.scale, 1.0)

    def test_commutative(self):
        rng = np.random.default_rng(21)
        a = Signal(rng.standard_normal(20), 44100)
        b = Signal(rng.standard_normal(9), 44100)

        ab = convolve(a, b)
        ba = convolve(b, a)

        self.assertEqual(ab.length, ba.length)
        np.testing.assert_allclose(ab.samples, ba.samples, rtol=1e-5, atol=1e-5)

    def test_length_is_half_fft_length(self):
        a = Signal(np.ones(20), 44100)
        b = Signal(np.ones(9), 44100)
        result = convolve(a, b)

        self.assertEqual(result.fft_length, 32)
        self.assertGreaterEqual(result.fft_length, len(a) + len(b) - 1)
        self.assertEqual(result.length, 16)

    def test_short_input_rejected(self):
        with self.assertRaises(InvalidInput):
            convolve(Signal(np.ones(7), 44100), Signal(np.ones(8), 44100))
        with self.assertRaises(InvalidInput):
            convolve(Signal(np.ones(8), 44100), Signal(np.ones(3), 44100))

    def test_short_input_fails_before_rate_check(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", RateMismatch)
            with self.assertRaises(InvalidInput):
                convolve(Signal(np.ones(4), 44100), Signal(np.ones(8), 48000))

    def test_rate_mismatch_warns_and_uses_first_rate(self):
        with self.assertWarns(RateMismatch):
            result = convolve(Signal(self.x8, 48000), Signal(_impulse(), 44100))
        self.assertEqual(result.sample_rate, 48000)

    def test_inputs_are_not_mutated(self):
        x = self.x8.copy()
        sig = Signal(x, 44100)
        convolve(sig, Signal(_impulse(), 44100))

        np.testing.assert_array_equal(x, self.x8)
        self.assertFalse(sig.samples.flags.writeable)

    def test_small_first_sample_still_divides(self):
        x = np.array([1e-5, 1.0, 0.5, 0.2, 0.1, 0.0, 0.0, 0.0], dtype=np.float32)
        result = convolve(Signal(x, 44100), Signal(_impulse(), 44100))

        self.assertEqual(float(result.samples[0]), 1.0)
        self.assertNotEqual(result.scale, 1.0)
        self.assertGreater(float(result.samples[1]), 1e4)

    def test_unknown_normalize_mode(self):
        with self.assertRaises(ValueError):
            convolve(Signal(self.x8, 44100), Signal(self.y8, 44100), normalize_mode="rms")


class NormalizeTest(unittest.TestCase):
    def test_peak_mode_hits_unity(self):
        out, scale = normalize(np.array([0.1, -0.4, 0.2], dtype=np.float32), "peak")
        self.assertAlmostEqual(float(np.max(np.abs(out))), 1.0, places=6)
        self.assertAlmostEqual(scale, 2.5, places=5)

    def test_first_mode_skips_exact_zero(self):
        x = np.array([0.0, 1.0, -0.5], dtype=np.float32)
        with self.assertLogs("irconvolve.dsp", level="WARNING"):
            out, scale = normalize(x, "first")
        np.testing.assert_array_equal(out, x)
        self.assertEqual(scale, 1.0)

    def test_first_mode_divides_by_first(self):
        out, scale = normalize(np.array([2.0, 1.0, -4.0], dtype=np.float32), "first")
        np.testing.assert_allclose(out, [1.0, 0.5, -2.0])
        self.assertEqual(scale, 0.5)


if __name__ == "__main__":
    unittest.main()
