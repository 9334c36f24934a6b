"""
FLAC decoder using libsndfile (via soundfile).

libsndfile scales integer reads to the full width of the requested dtype,
so samples are read as int32 and shifted back down to the stream's bit
depth before normalizing. This keeps the divisor tied to the bit depth in
use (127, 32767 or 8388607).
"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import soundfile as sf

from .decode_result import DecodeResult, normalize_int

logger = logging.getLogger(__name__)

SUBTYPE_BITS = {
    "PCM_S8": 8,
    "PCM_16": 16,
    "PCM_24": 24,
}


def decode(path: str | Path) -> Optional[DecodeResult]:
    try:
        with sf.SoundFile(str(path)) as f:
            bits = SUBTYPE_BITS.get(f.subtype)
            if bits is None:
                logger.debug(f"Unsupported FLAC subtype {f.subtype} in {path}")
                return None

            channels = f.channels
            sample_rate = f.samplerate
            raw = f.read(dtype="int32", always_2d=True)
    except (sf.LibsndfileError, RuntimeError, OSError) as e:
        logger.debug(f"FLAC decode failed for {path}: {e}")
        return None

    shifted = np.right_shift(raw.reshape(-1), 32 - bits)
    return DecodeResult.from_samples(normalize_int(shifted, bits), channels, sample_rate)
