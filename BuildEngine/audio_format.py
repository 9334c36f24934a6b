"""
Audio delivery formats and their encoder settings.

Each format knows its settings key, output extension, whether it is lossless
and the ffmpeg encoder arguments it needs. Formats whose muxer picks the
right encoder from the output extension carry no encoder arguments.
"""

from enum import Enum
from typing import Optional

from AudioDecoder import SourceFormat


class AudioFormatFamily(Enum):
    """Container/codec families, which decide how ffmpeg handles tags."""

    AAC = "aac"
    AIFF = "aiff"
    ALAC = "alac"
    FLAC = "flac"
    MP3 = "mp3"
    OGG_VORBIS = "ogg_vorbis"
    OPUS = "opus"
    WAV = "wav"

    @classmethod
    def of_source(cls, source_format: SourceFormat) -> "AudioFormatFamily":
        return cls(source_format.value)


class AudioFormat(Enum):
    # value: (key, extension, lossless, family, encoder args, label)
    AAC = ("aac", ".aac", False, AudioFormatFamily.AAC, (), "AAC")
    AIFF = ("aiff", ".aiff", True, AudioFormatFamily.AIFF, (), "AIFF")
    ALAC = ("alac", ".m4a", True, AudioFormatFamily.ALAC, ("-vn", "-codec:a", "alac"), "ALAC")
    FLAC = ("flac", ".flac", True, AudioFormatFamily.FLAC, (), "FLAC")
    MP3_VBR_V0 = ("mp3", ".mp3", False, AudioFormatFamily.MP3, ("-codec:a", "libmp3lame", "-qscale:a", "0"), "MP3 V0")
    MP3_VBR_V5 = ("mp3_v5", ".mp3", False, AudioFormatFamily.MP3, ("-codec:a", "libmp3lame", "-qscale:a", "5"), "MP3 V5")
    MP3_VBR_V7 = ("mp3_v7", ".mp3", False, AudioFormatFamily.MP3, ("-codec:a", "libmp3lame", "-qscale:a", "7"), "MP3 V7")
    OGG_VORBIS = ("ogg_vorbis", ".ogg", False, AudioFormatFamily.OGG_VORBIS, ("-codec:a", "libvorbis"), "Ogg Vorbis")
    OPUS_48 = ("opus_48", ".opus", False, AudioFormatFamily.OPUS, ("-codec:a", "libopus", "-b:a", "48k"), "Opus 48")
    OPUS_96 = ("opus_96", ".opus", False, AudioFormatFamily.OPUS, ("-codec:a", "libopus", "-b:a", "96k"), "Opus 96")
    OPUS_128 = ("opus_128", ".opus", False, AudioFormatFamily.OPUS, ("-codec:a", "libopus", "-b:a", "128k"), "Opus 128")
    WAV = ("wav", ".wav", True, AudioFormatFamily.WAV, (), "WAV")

    @property
    def key(self) -> str:
        return self.value[0]

    @property
    def extension(self) -> str:
        return self.value[1]

    @property
    def lossless(self) -> bool:
        return self.value[2]

    @property
    def family(self) -> AudioFormatFamily:
        return self.value[3]

    @property
    def encoder_args(self) -> list[str]:
        return list(self.value[4])

    @property
    def asset_dirname(self) -> str:
        """Per-format directory name, so renditions of one track never collide."""
        return self.key.replace("_", "-")

    def __str__(self) -> str:
        return self.value[5]

    @classmethod
    def from_key(cls, key: str) -> Optional["AudioFormat"]:
        key = key.strip().lower()
        if key == "opus":
            return cls.OPUS_128
        for audio_format in cls:
            if audio_format.key == key:
                return audio_format
        return None


DEFAULT_DOWNLOAD_FORMAT = AudioFormat.OPUS_128


class StreamingQuality(Enum):
    STANDARD = "standard"
    FRUGAL = "frugal"

    @property
    def formats(self) -> tuple[AudioFormat, AudioFormat]:
        """Primary (Opus) and fallback (MP3) streaming formats."""
        match self:
            case StreamingQuality.STANDARD:
                return (AudioFormat.OPUS_96, AudioFormat.MP3_VBR_V5)
            case StreamingQuality.FRUGAL:
                return (AudioFormat.OPUS_48, AudioFormat.MP3_VBR_V7)

    @classmethod
    def from_key(cls, key: str) -> "StreamingQuality":
        try:
            return cls(key.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown streaming quality '{key}' (expected standard or frugal)") from None


class DownloadGranularity(Enum):
    """How download formats are offered: zipped per release, as single files, or both."""

    ENTIRE_RELEASE = "entire_release"
    SINGLE_FILES = "single_files"
    ALL_OPTIONS = "all_options"

    @property
    def archives(self) -> bool:
        return self != DownloadGranularity.SINGLE_FILES

    @property
    def single_files(self) -> bool:
        return self != DownloadGranularity.ENTIRE_RELEASE

    @classmethod
    def from_key(cls, key: str) -> "DownloadGranularity":
        try:
            return cls(key.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown download granularity '{key}' (expected one of: "
                f"{', '.join(g.value for g in cls)})"
            ) from None
