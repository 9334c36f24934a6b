"""Codec capability registry: how to decode and read tags for each source format."""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from AudioDecoder import DECODERS, DecodeResult, SourceFormat

from .id3_reader import read_aiff_tags, read_mp3_tags, read_wav_tags
from .mp4_reader import read_alac_tags
from .tag_fields import TagFields
from .vorbis_reader import read_flac_tags, read_ogg_vorbis_tags, read_opus_tags


@dataclass(frozen=True)
class Codec:
    source_format: SourceFormat
    lossless: bool
    decode: Callable[..., Optional[DecodeResult]]
    read_tags: Callable[[str | Path], TagFields]
    uses_ffmpeg: bool = False


CODECS: dict[SourceFormat, Codec] = {
    SourceFormat.AIFF: Codec(SourceFormat.AIFF, True, DECODERS[SourceFormat.AIFF], read_aiff_tags),
    SourceFormat.ALAC: Codec(SourceFormat.ALAC, True, DECODERS[SourceFormat.ALAC], read_alac_tags, uses_ffmpeg=True),
    SourceFormat.FLAC: Codec(SourceFormat.FLAC, True, DECODERS[SourceFormat.FLAC], read_flac_tags),
    SourceFormat.MP3: Codec(SourceFormat.MP3, False, DECODERS[SourceFormat.MP3], read_mp3_tags),
    SourceFormat.OGG_VORBIS: Codec(SourceFormat.OGG_VORBIS, False, DECODERS[SourceFormat.OGG_VORBIS], read_ogg_vorbis_tags),
    SourceFormat.OPUS: Codec(SourceFormat.OPUS, False, DECODERS[SourceFormat.OPUS], read_opus_tags),
    SourceFormat.WAV: Codec(SourceFormat.WAV, True, DECODERS[SourceFormat.WAV], read_wav_tags),
}
