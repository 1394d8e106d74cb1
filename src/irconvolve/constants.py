"""
Global constants used across the spectral engine and the WAV writer.
"""

DEFAULT_SR: int = 44_100  # Fallback sample rate (Hz) when the result carries none
MIN_FRAMES: int = 8  # Shortest input either signal may have
PCM_SCALE: int = 64  # float -> int16 multiplier (not full scale, see presets)
MAX_LOG2N: int = 28  # Largest transform the engine will plan (2^28 points)
NORMALIZE_MODES: tuple[str, ...] = ("first", "peak", "none")
