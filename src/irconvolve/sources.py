"""
Sample sources: where the two input buffers come from.

A source exposes interleaved float samples plus frame count, sample rate and channel
count. `to_signal` turns any source into the engine's mono Signal.
"""

from __future__ import annotations
import logging
import warnings
from pathlib import Path
from typing import Protocol

import numpy as np
import soundfile as sf

from .dsp import Signal
from .errors import ChannelMismatch, InvalidInput

logger = logging.getLogger(__name__)


class SampleSource(Protocol):
    """Read-only view of one named audio buffer."""

    def samples(self) -> np.ndarray:  # pragma: no cover - protocol
        ...

    def frame_count(self) -> int:  # pragma: no cover - protocol
        ...

    def sample_rate(self) -> float:  # pragma: no cover - protocol
        ...

    def channel_count(self) -> int:  # pragma: no cover - protocol
        ...


class ArraySource:
    """In-memory buffer. 2-D input is (frames, channels) and is stored interleaved."""

    def __init__(self, data, sample_rate: float, name: str = "buffer"):
        arr = np.asarray(data, dtype=np.float32)
        if arr.ndim > 2:
            raise InvalidInput(f"{name}: expected 1-D or (frames, channels) data, got shape {arr.shape}")
        if arr.ndim == 2:
            self._frames, self._channels = int(arr.shape[0]), int(arr.shape[1])
        else:
            self._frames, self._channels = int(arr.shape[0]), 1
        self._data = np.ascontiguousarray(arr).reshape(-1)
        self._data.setflags(write=False)
        self._sr = float(sample_rate)
        self.name = name

    def samples(self) -> np.ndarray:
        return self._data

    def frame_count(self) -> int:
        return self._frames

    def sample_rate(self) -> float:
        return self._sr

    def channel_count(self) -> int:
        return self._channels


class FileSource(ArraySource):
    """Audio file decoded with soundfile (any format libsndfile reads)."""

    def __init__(self, path, name: str | None = None):
        self.path = Path(path)
        try:
            data, sr = sf.read(str(self.path), dtype="float32", always_2d=True)
        except (RuntimeError, OSError) as exc:  # soundfile raises LibsndfileError(RuntimeError)
            raise InvalidInput(f"could not read {self.path}: {exc}") from exc
        if data.shape[1] == 1:
            data = data[:, 0]
        super().__init__(data, sr, name=name or self.path.stem)
        logger.debug("loaded %s: %d frames, %d ch, %s Hz",
                     self.path, self.frame_count(), self.channel_count(), sr)


def to_signal(source: SampleSource, name: str | None = None) -> Signal:
    """
    Read `frame_count()` values from the source's interleaved data as a mono Signal.

    Multi-channel sources are not downmixed: the first frame_count interleaved values
    are used, which stretches and distorts the result. A ChannelMismatch warning is
    emitted in that case.
    """
    label = name or getattr(source, "name", "buffer")
    frames = int(source.frame_count())
    channels = int(source.channel_count())
    if channels != 1:
        msg = f"{label} has {channels} channels; reading interleaved data as mono"
        logger.warning(msg)
        warnings.warn(msg, ChannelMismatch, stacklevel=2)
    data = np.asarray(source.samples(), dtype=np.float32).reshape(-1)
    return Signal(samples=data[:frames], sample_rate=float(source.sample_rate()),
                  name=label, channels=channels)
