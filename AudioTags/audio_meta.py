"""
Audio metadata extraction.

extract_audio_meta never fails: a file that cannot be decoded still yields
its tags (with zero duration and no peaks), and a file in an unsupported
format yields an empty AudioMeta.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from AudioDecoder import DEFAULT_RESOLUTION, SourceFormat, compute_peaks, detect_format

from .codec_registry import CODECS

logger = logging.getLogger(__name__)


@dataclass
class AudioMeta:
    """Everything the catalog needs to know about one audio source."""

    album: Optional[str] = None
    album_artists: list[str] = field(default_factory=list)
    artists: list[str] = field(default_factory=list)
    title: Optional[str] = None
    track_number: Optional[int] = None
    lossless: bool = False
    duration_seconds: float = 0.0
    peaks: Optional[list[float]] = None

    def to_dict(self) -> dict:
        return {
            "album": self.album,
            "album_artists": list(self.album_artists),
            "artists": list(self.artists),
            "title": self.title,
            "track_number": self.track_number,
            "lossless": self.lossless,
            "duration_seconds": self.duration_seconds,
            "peaks": list(self.peaks) if self.peaks is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AudioMeta":
        peaks = data.get("peaks")
        return cls(
            album=data.get("album"),
            album_artists=list(data.get("album_artists", [])),
            artists=list(data.get("artists", [])),
            title=data.get("title"),
            track_number=data.get("track_number"),
            lossless=bool(data.get("lossless", False)),
            duration_seconds=float(data.get("duration_seconds", 0.0)),
            peaks=[float(p) for p in peaks] if peaks is not None else None,
        )


def extract_audio_meta(
    path: str | Path,
    source_format: Optional[SourceFormat] = None,
    resolution: int = DEFAULT_RESOLUTION,
    ffmpeg_path: Optional[str] = None,
) -> AudioMeta:
    """
    Decode a file for duration and peaks and read its tags.

    Args:
        path: Audio source file
        source_format: Skip detection when the format is already known
        resolution: Number of peak buckets
        ffmpeg_path: ffmpeg binary for codecs decoded through it (ALAC)

    Returns:
        AudioMeta (empty, lossless=False, for unsupported formats)
    """
    path = Path(path)
    if source_format is None:
        source_format = detect_format(path)
    if source_format is None:
        logger.warning(f"Unsupported audio format: {path.name}")
        return AudioMeta()

    codec = CODECS[source_format]
    meta = AudioMeta(lossless=codec.lossless)

    if codec.uses_ffmpeg:
        result = codec.decode(path, ffmpeg_path=ffmpeg_path)
    else:
        result = codec.decode(path)
    if result is not None:
        meta.duration_seconds = result.duration
        meta.peaks = compute_peaks(result, resolution)
    else:
        logger.warning(f"Could not decode {path.name}; duration and peaks unavailable")

    tags = codec.read_tags(path)
    meta.album = tags.album
    meta.album_artists = tags.album_artists
    meta.artists = tags.artists
    meta.title = tags.title
    meta.track_number = tags.track_number

    return meta
