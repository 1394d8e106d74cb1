"""
Render presets: named pairs of float->int16 multiplier and normalization mode,
and the RenderSettings object `render.run` takes.
"""

from __future__ import annotations
from dataclasses import dataclass, replace

from .constants import NORMALIZE_MODES, PCM_SCALE

SCALE_PRESETS = {
    # later revision of the writer, quiet but rarely clips after first-sample normalization
    "legacy": 64,
    # earlier revision
    "early": 255,
    # full 16-bit range, for peak-normalized output
    "full": 32767,
}

RENDER_PRESETS = {
    "legacy": dict(pcm_scale=SCALE_PRESETS["legacy"], normalize="first"),
    "early": dict(pcm_scale=SCALE_PRESETS["early"], normalize="first"),
    "mastered": dict(pcm_scale=SCALE_PRESETS["full"], normalize="peak"),
}


@dataclass(frozen=True)
class RenderSettings:
    pcm_scale: float = PCM_SCALE
    normalize: str = "first"

    def __post_init__(self) -> None:
        if self.normalize not in NORMALIZE_MODES:
            raise ValueError(f"normalize must be one of {NORMALIZE_MODES}, got {self.normalize!r}")
        if self.pcm_scale <= 0:
            raise ValueError(f"pcm_scale must be > 0, got {self.pcm_scale}")

    @classmethod
    def from_preset(cls, name: str, **overrides) -> "RenderSettings":
        """Build settings from RENDER_PRESETS; None-valued overrides are ignored."""
        try:
            base = RENDER_PRESETS[name.lower()]
        except KeyError:
            raise ValueError(f"unknown preset {name!r}; choose from {sorted(RENDER_PRESETS)}") from None
        settings = cls(**base)
        extra = {k: v for k, v in overrides.items() if v is not None}
        return replace(settings, **extra) if extra else settings
