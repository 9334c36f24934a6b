"""Waveform peak reduction over decoded audio."""

import numpy as np

from .decode_result import DecodeResult

DEFAULT_RESOLUTION = 320


def compute_peaks(result: DecodeResult, resolution: int = DEFAULT_RESOLUTION) -> list[float]:
    """
    Reduce decoded audio to `resolution` peak magnitudes.

    Each frame's magnitude is its largest absolute sample across channels.
    Frames are split into time-proportional windows and each bucket holds the
    window maximum. Windows are at least one frame wide, so with fewer frames
    than buckets some frames feed several buckets.
    """
    if resolution <= 0:
        return []

    if result.sample_count == 0 or result.channels == 0:
        return [0.0] * resolution

    magnitudes = np.abs(result.frames()).max(axis=1)
    n = len(magnitudes)

    peaks = []
    for i in range(resolution):
        start = min(i * n // resolution, n - 1)
        end = max((i + 1) * n // resolution, start + 1)
        peaks.append(float(magnitudes[start:min(end, n)].max()))

    return peaks
