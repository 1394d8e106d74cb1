"""
Error and warning kinds raised by the engine, the writer and the render entry point.

Fatal conditions are exceptions deriving from ConvolveError; each carries a short
`kind` string so callers can report it without matching on class names.
Recoverable conditions are UserWarning subclasses emitted through `warnings`.
"""

from __future__ import annotations


class ConvolveError(Exception):
    """Base class for every fatal convolution/render failure."""

    kind: str = "ConvolveError"


class InvalidInput(ConvolveError):
    """An input signal is too short (or otherwise unusable) to convolve."""

    kind = "InvalidInput"


class AllocationFailure(ConvolveError):
    """A spectrum or output buffer could not be allocated."""

    kind = "AllocationFailure"


class TransformSetupFailure(ConvolveError):
    """The FFT could not be planned for the requested size."""

    kind = "TransformSetupFailure"


class DestinationUnavailable(ConvolveError):
    """The output path could not be created or opened."""

    kind = "DestinationUnavailable"


class WriteFailure(ConvolveError):
    """An I/O error happened while writing the header or the payload."""

    kind = "WriteFailure"


class WavFormatError(ConvolveError):
    """A file does not hold the canonical mono 16-bit RIFF/WAVE layout."""

    kind = "WavFormatError"


# ---------- Warnings ----------

class RateMismatch(UserWarning):
    """The two inputs have different sample rates; the first one's rate is used."""

    kind = "RateMismatch"


class ChannelMismatch(UserWarning):
    """A source has more than one channel; its interleaved data is read as mono."""

    kind = "ChannelMismatch"
