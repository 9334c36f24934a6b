"""
Opus decoder.

Decodes at the input rate recorded in the OpusHead packet, as libsndfile
reports it, with the channel count from the same header. Decoded samples
are floats and pass through unchanged.
"""

from pathlib import Path
from typing import Optional

from .decode_result import DecodeResult
from .sndfile_reader import read_interleaved


def decode(path: str | Path) -> Optional[DecodeResult]:
    read = read_interleaved(path, "float32")
    if read is None:
        return None

    samples, channels, sample_rate = read
    return DecodeResult.from_samples(samples, channels, sample_rate)
