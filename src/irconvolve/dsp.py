"""
Spectral convolution engine: FFT sizing, spectrum preparation, spectral multiply,
inverse transform and normalization.

All working spectra are allocated and dropped inside a single `convolve` call.
"""

from __future__ import annotations
import logging
import warnings
from dataclasses import dataclass, field

import numpy as np

from .constants import MIN_FRAMES, NORMALIZE_MODES
from .errors import InvalidInput, RateMismatch
from .spectrum import bit_length, fft_size, forward, inverse, multiply, pack, unpack

logger = logging.getLogger(__name__)


# ---------- Data ----------

@dataclass(frozen=True)
class Signal:
    """Immutable mono input buffer."""
    samples: np.ndarray
    sample_rate: float
    name: str = "signal"
    channels: int = 1

    def __post_init__(self) -> None:
        data = np.array(self.samples, dtype=np.float32).reshape(-1)
        data.setflags(write=False)
        object.__setattr__(self, "samples", data)

    def __len__(self) -> int:
        return int(self.samples.shape[0])


@dataclass
class ConvolutionResult:
    samples: np.ndarray
    sample_rate: float
    fft_length: int
    scale: float = field(default=1.0)

    @property
    def length(self) -> int:
        return int(self.samples.shape[0])


# ---------- Normalization ----------

def normalize_first(x: np.ndarray) -> tuple[np.ndarray, float]:
    """
    Divide every sample by the first one.

    A first sample that is exactly zero or not finite leaves the buffer unscaled.
    """
    first = float(x[0]) if x.size else 0.0
    if first == 0.0 or not np.isfinite(first):
        logger.warning("first output sample is %r; skipping normalization", first)
        return x, 1.0
    return (x / np.float32(first)).astype(np.float32), 1.0 / first


def normalize_peak(x: np.ndarray, headroom_db: float = 0.0) -> tuple[np.ndarray, float]:
    """
    Normalize to 0 dBFS, then apply headroom (positive dB reduces level).
    """
    peak = float(np.max(np.abs(x))) if x.size else 0.0
    if peak == 0.0:
        return x, 1.0
    scale = (1.0 / peak) * 10 ** (-headroom_db / 20.0)
    return (x * scale).astype(np.float32), float(scale)


def normalize(x: np.ndarray, mode: str = "first") -> tuple[np.ndarray, float]:
    """Apply one of NORMALIZE_MODES and return (samples, scale applied)."""
    if mode == "first":
        return normalize_first(x)
    if mode == "peak":
        return normalize_peak(x)
    if mode == "none":
        return x, 1.0
    raise ValueError(f"normalize must be one of {NORMALIZE_MODES}, got {mode!r}")


# ---------- Engine ----------

def _check_inputs(a: Signal, b: Signal) -> None:
    if len(a) < MIN_FRAMES or len(b) < MIN_FRAMES:
        raise InvalidInput(
            f"at least one input buffer is too short "
            f"({a.name}={len(a)}, {b.name}={len(b)}, minimum {MIN_FRAMES})"
        )
    if a.sample_rate != b.sample_rate:
        msg = (f"input buffers have different sample rates "
               f"({a.name}={a.sample_rate}, {b.name}={b.sample_rate}); using {a.sample_rate}")
        logger.warning(msg)
        warnings.warn(msg, RateMismatch, stacklevel=3)


def convolve(a: Signal, b: Signal, normalize_mode: str = "first") -> ConvolutionResult:
    """
    Linear convolution of two signals via packed real FFTs.

    Each input is transformed at its own power-of-two size (2^bit_length(len)), the
    product is inverted at 2^bit_length(len(a)+len(b)-1) points, and the first
    fft_length/2 samples are returned.
    """
    if normalize_mode not in NORMALIZE_MODES:
        raise ValueError(f"normalize must be one of {NORMALIZE_MODES}, got {normalize_mode!r}")
    _check_inputs(a, b)

    n = len(a) + len(b) - 1
    fft_length = fft_size(n)
    log2n = bit_length(n)
    logger.debug("convolving %s (%d) with %s (%d): n=%d fft_length=%d",
                 a.name, len(a), b.name, len(b), n, fft_length)

    spec_a = pack(a.samples, fft_length)
    spec_b = pack(b.samples, fft_length)

    forward(spec_a, bit_length(len(a)))
    forward(spec_b, bit_length(len(b)))

    product = multiply(spec_a, spec_b, fft_length)
    del spec_a, spec_b

    inverse(product, log2n)
    out = unpack(product, fft_length // 2)
    del product

    out, scale = normalize(out, normalize_mode)
    return ConvolutionResult(samples=out, sample_rate=a.sample_rate,
                             fft_length=fft_length, scale=scale)
