"""
Command-line entrypoint: convolve two audio files into a WAV, or inspect a WAV header.
"""

from __future__ import annotations
import argparse
import logging
import os
import sys

from .errors import ConvolveError
from .constants import NORMALIZE_MODES
from .presets import RENDER_PRESETS, SCALE_PRESETS, RenderSettings
from .render import convolve_files
from .wavio import read_wav_header


def _cmd_convolve(args: argparse.Namespace) -> int:
    pcm_scale = args.pcm_scale
    if pcm_scale is None and args.scale_preset is not None:
        pcm_scale = SCALE_PRESETS[args.scale_preset]
    settings = RenderSettings.from_preset(args.preset, pcm_scale=pcm_scale, normalize=args.normalize)

    out_dir = os.path.dirname(args.out) or "."
    os.makedirs(out_dir, exist_ok=True)
    outcome = convolve_files(args.ir, args.signal, args.out, settings=settings)
    print(f"[OK] Wrote: {os.path.abspath(outcome.path)} "
          f"({outcome.result.length} samples @ {int(outcome.result.sample_rate)} Hz)")
    return 0


def _cmd_info(args: argparse.Namespace) -> int:
    h = read_wav_header(args.wav)
    print(f"{args.wav}: {h.channels} ch, {h.bits_per_sample}-bit, {h.sample_rate} Hz, "
          f"{h.frame_count} frames ({h.data_bytes} data bytes, {h.subtype})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="irconvolve",
                                 description="FFT convolution of an impulse response with a dry signal.")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    sub = ap.add_subparsers(dest="command", required=True)

    c = sub.add_parser("convolve", help="Convolve two audio files into a mono 16-bit WAV")
    c.add_argument("ir", help="Impulse response file")
    c.add_argument("signal", help="Dry signal file")
    c.add_argument("--out", type=str, default="outputs/convolved.wav", help="Output WAV path")
    c.add_argument("--preset", choices=sorted(RENDER_PRESETS), default="legacy", help="Render preset")
    c.add_argument("--scale-preset", choices=sorted(SCALE_PRESETS), default=None,
                   help="Named float->int16 multiplier")
    c.add_argument("--pcm-scale", type=float, default=None, help="Explicit float->int16 multiplier")
    c.add_argument("--normalize", choices=NORMALIZE_MODES, default=None, help="Normalization mode")
    c.set_defaults(func=_cmd_convolve)

    i = sub.add_parser("info", help="Print the header of a WAV written by this tool")
    i.add_argument("wav", help="WAV file")
    i.set_defaults(func=_cmd_info)
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except ConvolveError as exc:
        print(f"[ERR] {exc.kind}: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"[ERR] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
