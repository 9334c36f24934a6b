"""Ogg Vorbis decoder. Same 16-bit intermediate as MP3."""

from pathlib import Path
from typing import Optional

from .decode_result import DecodeResult, normalize_int
from .sndfile_reader import read_interleaved


def decode(path: str | Path) -> Optional[DecodeResult]:
    read = read_interleaved(path, "int16")
    if read is None:
        return None

    samples, channels, sample_rate = read
    return DecodeResult.from_samples(normalize_int(samples, 16), channels, sample_rate)
