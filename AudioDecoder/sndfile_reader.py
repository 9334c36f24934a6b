import logging
from pathlib import Path
from typing import Optional

import numpy as np
import soundfile as sf

logger = logging.getLogger(__name__)


def read_interleaved(path: str | Path, dtype: str) -> Optional[tuple[np.ndarray, int, int]]:
    """
    Read a whole file through libsndfile.

    Returns (interleaved samples, channels, sample_rate), or None if
    libsndfile cannot open or decode the file.
    """
    try:
        with sf.SoundFile(str(path)) as f:
            channels = f.channels
            sample_rate = f.samplerate
            frames = f.read(dtype=dtype, always_2d=True)
    except (sf.LibsndfileError, RuntimeError, OSError) as e:
        logger.debug(f"libsndfile could not decode {path}: {e}")
        return None

    return frames.reshape(-1), channels, sample_rate
