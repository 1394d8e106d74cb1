"""
Rendering entry point: read two sources, convolve, write the WAV, signal completion.

Runs synchronously on the calling thread; pick a thread that may block on file I/O.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .dsp import ConvolutionResult, convolve
from .errors import DestinationUnavailable
from .presets import RenderSettings
from .sources import FileSource, SampleSource, to_signal
from .wavio import write_wav

logger = logging.getLogger(__name__)

CompletionSink = Callable[[bool], None]


@dataclass
class RenderOutcome:
    path: Path
    result: ConvolutionResult


def _check_destination(destination: Path) -> None:
    parent = destination.parent
    if not parent.is_dir():
        raise DestinationUnavailable(f"output folder does not exist: {parent}")
    if destination.is_dir():
        raise DestinationUnavailable(f"output path is a directory: {destination}")


def run(source_a: SampleSource,
        source_b: SampleSource,
        destination,
        on_complete: Optional[CompletionSink] = None,
        settings: Optional[RenderSettings] = None) -> RenderOutcome:
    """
    Convolve `source_a` with `source_b` and write the result to `destination`.

    `on_complete(ok)` is called exactly once: with True after the file is fully
    written, with False if anything fails. Failures are re-raised as ConvolveError
    subclasses after the sink has been told.
    """
    settings = settings or RenderSettings()
    destination = Path(destination)
    ok = False
    try:
        _check_destination(destination)
        signal_a = to_signal(source_a, getattr(source_a, "name", "buffer1"))
        signal_b = to_signal(source_b, getattr(source_b, "name", "buffer2"))

        result = convolve(signal_a, signal_b, normalize_mode=settings.normalize)
        path = write_wav(destination, result.samples, result.sample_rate, scale=settings.pcm_scale)
        ok = True
        return RenderOutcome(path=path, result=result)
    except Exception as exc:
        logger.error("render to %s failed: %s", destination, exc)
        raise
    finally:
        if on_complete is not None:
            on_complete(ok)


def convolve_files(ir_path, signal_path, out_path,
                   on_complete: Optional[CompletionSink] = None,
                   settings: Optional[RenderSettings] = None) -> RenderOutcome:
    """Convolve two audio files on disk and write the result as WAV."""
    try:
        ir = FileSource(ir_path)
        dry = FileSource(signal_path)
    except Exception:
        if on_complete is not None:
            on_complete(False)
        raise
    return run(ir, dry, out_path, on_complete=on_complete, settings=settings)
