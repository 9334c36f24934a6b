"""
Source format detection.

A file is only considered when its extension names a supported audio
format; its header then decides which codec actually handles it. A file
whose header matches none of the known signatures is rejected, even when
its extension looks right.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from mutagen import MutagenError
from mutagen.mp4 import MP4

logger = logging.getLogger(__name__)

SNIFF_BYTES = 64


class SourceFormat(Enum):
    """Audio source formats the pipeline can decode and read tags from."""

    AIFF = "aiff"
    ALAC = "alac"
    FLAC = "flac"
    MP3 = "mp3"
    OGG_VORBIS = "ogg_vorbis"
    OPUS = "opus"
    WAV = "wav"


# Extensions accepted as audio sources (lowercase, with dot)
AUDIO_EXTENSIONS = {
    ".aif": SourceFormat.AIFF,
    ".aifc": SourceFormat.AIFF,
    ".aiff": SourceFormat.AIFF,
    ".alac": SourceFormat.ALAC,
    ".m4a": SourceFormat.ALAC,
    ".flac": SourceFormat.FLAC,
    ".mp3": SourceFormat.MP3,
    ".oga": SourceFormat.OGG_VORBIS,
    ".ogg": SourceFormat.OGG_VORBIS,
    ".opus": SourceFormat.OPUS,
    ".wav": SourceFormat.WAV,
}


def is_audio_file(path: str | Path) -> bool:
    return Path(path).suffix.lower() in AUDIO_EXTENSIONS


def sniff_format(header: bytes) -> Optional[SourceFormat]:
    """Identify a format from the first bytes of a file."""
    if len(header) < 4:
        return None

    match header[:4]:
        case b"RIFF" if header[8:12] == b"WAVE":
            return SourceFormat.WAV
        case b"FORM" if header[8:12] in (b"AIFF", b"AIFC"):
            return SourceFormat.AIFF
        case b"fLaC":
            return SourceFormat.FLAC
        case b"OggS":
            # The first page carries the codec identification packet
            if b"OpusHead" in header:
                return SourceFormat.OPUS
            if b"\x01vorbis" in header:
                return SourceFormat.OGG_VORBIS
            return None

    if header[4:8] == b"ftyp":
        return SourceFormat.ALAC
    if header[:3] == b"ID3":
        return SourceFormat.MP3
    if header[0] == 0xFF and (header[1] & 0xE0) == 0xE0:
        return SourceFormat.MP3

    return None


def _is_alac(path: Path) -> bool:
    try:
        return getattr(MP4(str(path)).info, "codec", "") == "alac"
    except (MutagenError, OSError):
        return False


def detect_format(path: str | Path) -> Optional[SourceFormat]:
    """
    Detect the source format of a file.

    Returns None for unknown extensions, unreadable files, unrecognized
    headers and MP4 files that do not hold an ALAC stream.
    """
    path = Path(path)
    by_extension = AUDIO_EXTENSIONS.get(path.suffix.lower())
    if by_extension is None:
        return None

    try:
        with open(path, "rb") as f:
            header = f.read(SNIFF_BYTES)
    except OSError as e:
        logger.debug(f"Cannot read {path} for format detection: {e}")
        return None

    sniffed = sniff_format(header)
    if sniffed is None:
        logger.debug(f"Unrecognized header in {path}")
        return None

    if sniffed != by_extension:
        logger.debug(f"{path.name}: header says {sniffed.value}, extension says {by_extension.value}")

    if sniffed == SourceFormat.ALAC and not _is_alac(path):
        logger.debug(f"{path.name}: MP4 container without an ALAC stream")
        return None

    return sniffed
