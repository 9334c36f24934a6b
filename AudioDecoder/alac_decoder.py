"""
ALAC decoder.

Stream parameters come from the MP4 container (via mutagen); the PCM itself
is produced by ffmpeg as signed 32-bit little-endian samples on stdout and
normalized by the 32-bit maximum.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional

import numpy as np
from mutagen import MutagenError
from mutagen.mp4 import MP4

from .decode_result import DecodeResult, normalize_int
from .ffmpeg import find_ffmpeg

logger = logging.getLogger(__name__)


def decode(path: str | Path, ffmpeg_path: Optional[str] = None) -> Optional[DecodeResult]:
    try:
        info = MP4(str(path)).info
    except (MutagenError, OSError) as e:
        logger.debug(f"Not a readable MP4 container: {path}: {e}")
        return None

    if getattr(info, "codec", "") != "alac":
        logger.debug(f"MP4 stream in {path} is {getattr(info, 'codec', '?')}, not ALAC")
        return None

    ffmpeg = ffmpeg_path or find_ffmpeg()
    if not ffmpeg:
        logger.warning(f"ffmpeg not found, cannot decode ALAC: {path}")
        return None

    channels = info.channels
    sample_rate = info.sample_rate

    cmd = [
        ffmpeg,
        "-v", "error",
        "-i", str(path),
        "-f", "s32le",
        "-acodec", "pcm_s32le",
        "-ac", str(channels),
        "-",
    ]

    try:
        result = subprocess.run(cmd, capture_output=True)
    except OSError as e:
        logger.debug(f"Could not launch ffmpeg for {path}: {e}")
        return None

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace")
        logger.debug(f"ffmpeg ALAC decode failed for {path}: {stderr[:500]}")
        return None

    data = result.stdout[:len(result.stdout) - len(result.stdout) % 4]
    raw = np.frombuffer(data, dtype="<i4")
    return DecodeResult.from_samples(normalize_int(raw, 32), channels, sample_rate)
