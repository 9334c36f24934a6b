"""Locating the ffmpeg binary used for ALAC decoding and for transcoding."""

import shutil
from pathlib import Path
from typing import Optional

# Checked in order when ffmpeg is not on PATH
FFMPEG_INSTALL_PATHS = (
    r"C:\Program Files\ffmpeg\bin\ffmpeg.exe",
    r"C:\ffmpeg\bin\ffmpeg.exe",
    "/opt/homebrew/bin/ffmpeg",
    "/usr/local/bin/ffmpeg",
    "/usr/bin/ffmpeg",
)


def find_ffmpeg() -> Optional[str]:
    """Path of the ffmpeg executable, or None if it is not installed."""
    on_path = shutil.which("ffmpeg")
    if on_path:
        return on_path

    for candidate in FFMPEG_INSTALL_PATHS:
        if Path(candidate).is_file():
            return candidate
    return None


def is_ffmpeg_available() -> bool:
    return find_ffmpeg() is not None
