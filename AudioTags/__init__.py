"""
AudioTags - Tag reading and per-track metadata

Core components:
- extract_audio_meta: decode + peaks + tags for one file, never fails
- AudioMeta: the cached per-track metadata record
- CODECS: per-format capabilities (lossless flag, decoder, tag reader)
- Readers: Vorbis comments, ID3, MP4 atoms
"""

from .tag_fields import TagFields, parse_track_number, trim_and_reject_empty
from .codec_registry import Codec, CODECS
from .audio_meta import AudioMeta, extract_audio_meta

__all__ = [
    "AudioMeta",
    "extract_audio_meta",
    # Codec registry
    "Codec",
    "CODECS",
    # Tag rules
    "TagFields",
    "parse_track_number",
    "trim_and_reject_empty",
]
