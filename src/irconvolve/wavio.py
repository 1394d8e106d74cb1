"""
Mono 16-bit WAV writer and header reader.

Samples are quantized here (scale, truncate toward zero, clip) and handed to soundfile
as int16, which libsndfile stores unchanged behind the canonical 44-byte PCM header.

Files are written to a temporary sibling and renamed into place, so a failed write
never leaves a truncated file at the destination.
"""

from __future__ import annotations
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import soundfile as sf

from .constants import DEFAULT_SR, PCM_SCALE
from .errors import DestinationUnavailable, WavFormatError, WriteFailure

logger = logging.getLogger(__name__)

BITS_PER_SAMPLE = {"PCM_16": 16, "PCM_24": 24, "PCM_32": 32, "PCM_U8": 8}


@dataclass(frozen=True)
class WavHeader:
    sample_rate: int
    channels: int
    frame_count: int
    subtype: str

    @property
    def bits_per_sample(self) -> int:
        return BITS_PER_SAMPLE.get(self.subtype, 0)

    @property
    def data_bytes(self) -> int:
        return self.frame_count * self.channels * self.bits_per_sample // 8


# ---------- Encoding ----------

def resolve_sample_rate(sample_rate) -> int:
    """Truncate to an integer rate; non-positive rates fall back to DEFAULT_SR."""
    try:
        rate = int(sample_rate)
    except (TypeError, ValueError, OverflowError):
        rate = 0
    return rate if rate > 0 else DEFAULT_SR


def encode_pcm16(samples, scale: float = PCM_SCALE) -> np.ndarray:
    """
    Scale floats and truncate toward zero into int16.

    Out-of-range values are clipped to the int16 range and NaN becomes 0.
    """
    x = np.asarray(samples, dtype=np.float64).reshape(-1) * float(scale)
    x = np.nan_to_num(x, nan=0.0, posinf=32767.0, neginf=-32768.0)
    x = np.clip(np.trunc(x), -32768, 32767)
    return x.astype(np.int16)


# ---------- Writing ----------

def write_wav(path, samples, sample_rate, scale: float = PCM_SCALE) -> Path:
    """
    Write `samples` as a mono 16-bit WAV at `path` and return the path.

    Raises DestinationUnavailable if the temporary file cannot be created next to
    `path`, WriteFailure if writing or the final rename fails. In both cases nothing
    is left behind at `path`.
    """
    path = Path(path)
    rate = resolve_sample_rate(sample_rate)
    pcm = encode_pcm16(samples, scale)

    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp",
                                        dir=str(path.parent))
        os.close(fd)
    except OSError as exc:
        raise DestinationUnavailable(f"could not create output file {path}: {exc}") from exc

    try:
        sf.write(tmp_name, pcm, rate, subtype="PCM_16", format="WAV")
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except (OSError, RuntimeError) as exc:  # LibsndfileError is a RuntimeError
        _discard(tmp_name)
        raise WriteFailure(f"could not write {path}: {exc}") from exc
    except BaseException:
        _discard(tmp_name)
        raise

    logger.info("wrote %s (%d samples, %d Hz)", path, pcm.shape[0], rate)
    return path


def _discard(tmp_name: str) -> None:
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass


# ---------- Reading ----------

def read_wav_header(path) -> WavHeader:
    """Rate, channel count, frame count and subtype of a WAV file."""
    try:
        info = sf.info(str(path))
    except RuntimeError as exc:
        raise WavFormatError(f"could not read {path}: {exc}") from exc
    if info.format != "WAV":
        raise WavFormatError(f"{path} is {info.format}, not WAV")
    return WavHeader(sample_rate=int(info.samplerate), channels=int(info.channels),
                     frame_count=int(info.frames), subtype=str(info.subtype))
