"""
Packed split-complex spectra for real signals.

A real signal of N points is stored as two float32 arrays of N/2 slots: before the
forward transform `real` holds the even-indexed samples and `imag` the odd-indexed
ones. After the forward transform slot k (1 <= k < N/2) holds bin k, while slot 0
holds the DC term in `real[0]` and the Nyquist term in `imag[0]`.

Scaling follows the packed real-FFT convention: the forward transform yields twice
the DFT and the inverse is unnormalized, so a forward/inverse pair scales by 2N.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass

import numpy as np

from .constants import MAX_LOG2N
from .errors import AllocationFailure, TransformSetupFailure

logger = logging.getLogger(__name__)


@dataclass
class Spectrum:
    """Split real/imaginary storage for one packed real FFT."""
    real: np.ndarray
    imag: np.ndarray

    @classmethod
    def allocate(cls, fft_length: int) -> "Spectrum":
        """Zeroed spectrum with `fft_length/2` slots."""
        slots = fft_length // 2
        try:
            real = np.zeros(slots, dtype=np.float32)
            imag = np.zeros(slots, dtype=np.float32)
        except (MemoryError, ValueError) as exc:
            raise AllocationFailure(
                f"could not allocate memory for spectrums ({slots} slots)"
            ) from exc
        return cls(real=real, imag=imag)

    def __len__(self) -> int:
        return int(self.real.shape[0])

    @property
    def nyquist(self) -> float:
        return float(self.imag[0])

    @property
    def dc(self) -> float:
        return float(self.real[0])


# ---------- Sizing ----------

def bit_length(n: int) -> int:
    """Number of right shifts needed to bring `n` to zero."""
    return int(n).bit_length()


def fft_size(n: int) -> int:
    """
    Transform length used for an `n`-point linear convolution.

    Shifts 1 left by the bit length of `n`, i.e. 2^ceil(log2(n + 1)). The result is
    always strictly greater than `n`, a full octave above `n` when `n` is a power of two.
    """
    if n < 1:
        raise ValueError(f"n must be >= 1, got {n}")
    return 1 << bit_length(n)


def _check_plan(log2n: int, spectrum: Spectrum) -> int:
    if log2n < 1 or log2n > MAX_LOG2N:
        raise TransformSetupFailure(f"could not pre-compute FFT bins for 2^{log2n} points")
    half = 1 << (log2n - 1)
    if half > len(spectrum):
        raise TransformSetupFailure(
            f"transform of 2^{log2n} points does not fit a spectrum of {len(spectrum)} slots"
        )
    return half


# ---------- Packing ----------

def pack(samples: np.ndarray, fft_length: int) -> Spectrum:
    """
    Pack real samples into split form and zero-pad up to `fft_length/2` slots.

    Sample pairs (x[2k], x[2k+1]) go to slot k. Only `len(samples)//2` pairs are
    packed, so the last sample of an odd-length signal is dropped.
    """
    x = np.asarray(samples, dtype=np.float32).reshape(-1)
    spectrum = Spectrum.allocate(fft_length)
    pairs = min(x.shape[0] // 2, len(spectrum))
    spectrum.real[:pairs] = x[0:2 * pairs:2]
    spectrum.imag[:pairs] = x[1:2 * pairs:2]
    return spectrum


def unpack(spectrum: Spectrum, length: int) -> np.ndarray:
    """Interleave the first `length/2` slots back into `length` real samples."""
    pairs = length // 2
    out = np.empty(2 * pairs, dtype=np.float32)
    out[0::2] = spectrum.real[:pairs]
    out[1::2] = spectrum.imag[:pairs]
    return out


# ---------- Transforms ----------

def forward(spectrum: Spectrum, log2n: int) -> None:
    """
    In-place packed real FFT over the first 2^(log2n-1) slots.

    Slots beyond the transform size are left untouched.
    """
    half = _check_plan(log2n, spectrum)
    n = 2 * half
    x = np.empty(n, dtype=np.float64)
    x[0::2] = spectrum.real[:half]
    x[1::2] = spectrum.imag[:half]

    bins = np.fft.rfft(x) * 2.0
    spectrum.real[:half] = bins[:half].real
    spectrum.imag[:half] = bins[:half].imag
    spectrum.imag[0] = bins[half].real
    logger.debug("forward rfft: %d points", n)


def inverse(spectrum: Spectrum, log2n: int) -> None:
    """In-place unnormalized inverse of `forward`; output stays in packed form."""
    half = _check_plan(log2n, spectrum)
    n = 2 * half
    bins = np.empty(half + 1, dtype=np.complex128)
    bins[:half] = spectrum.real[:half] + 1j * spectrum.imag[:half].astype(np.float64)
    bins[0] = spectrum.real[0]
    bins[half] = spectrum.imag[0]

    x = np.fft.irfft(bins, n=n) * n
    spectrum.real[:half] = x[0::2]
    spectrum.imag[:half] = x[1::2]
    logger.debug("inverse rfft: %d points", n)


# ---------- Spectral product ----------

def multiply(a: Spectrum, b: Spectrum, fft_length: int) -> Spectrum:
    """
    Element-wise complex product of two packed spectra.

    The Nyquist terms sitting in `imag[0]` are taken out of both inputs before the
    general multiply (the inputs are modified) and their real product is put back
    into the result's `imag[0]`.
    """
    nyq_a = a.nyquist
    nyq_b = b.nyquist
    a.imag[0] = 0.0
    b.imag[0] = 0.0

    out = Spectrum.allocate(fft_length)
    slots = min(len(out), len(a), len(b))
    ar, ai = a.real[:slots], a.imag[:slots]
    br, bi = b.real[:slots], b.imag[:slots]
    out.real[:slots] = ar * br - ai * bi
    out.imag[:slots] = ar * bi + ai * br

    out.imag[0] = np.float32(nyq_a) * np.float32(nyq_b)
    return out
