"""
ID3 reader for MP3, AIFF and WAV files.

ID3v2.2 and v2.3 have no multi-value text frames; some taggers store a "/"
as a null byte there. mutagen splits such values on the null, so for those
versions the parts of a frame are joined back with "/" before the usual
trimming rules apply.
"""

import logging
from pathlib import Path

from mutagen import MutagenError
from mutagen.aiff import AIFF
from mutagen.mp3 import MP3
from mutagen.wave import WAVE

from .tag_fields import TagFields

logger = logging.getLogger(__name__)

NULL_SLASH_VERSIONS = (2, 4, 0)


def _frame_values(tags, frame_id: str) -> list[str]:
    values = []
    legacy = tags.version < NULL_SLASH_VERSIONS
    for frame in tags.getall(frame_id):
        text = [str(t) for t in getattr(frame, "text", [])]
        if legacy:
            values.append("/".join(text))
        else:
            values.extend(text)
    return values


def tags_from_id3(tags) -> TagFields:
    fields = TagFields()
    if tags is None:
        return fields

    for value in _frame_values(tags, "TALB"):
        fields.set_album(value)
    for value in _frame_values(tags, "TPE2"):
        fields.add_album_artist(value)
    for value in _frame_values(tags, "TPE1"):
        fields.add_artist(value)
    for value in _frame_values(tags, "TIT2"):
        fields.set_title(value)
    for value in _frame_values(tags, "TRCK"):
        fields.set_track_number(value)

    return fields


def _read(opener, path: str | Path) -> TagFields:
    try:
        audio = opener(str(path))
    except (MutagenError, OSError) as e:
        logger.debug(f"Could not read ID3 tags from {path}: {e}")
        return TagFields()
    return tags_from_id3(audio.tags)


def read_mp3_tags(path: str | Path) -> TagFields:
    return _read(MP3, path)


def read_aiff_tags(path: str | Path) -> TagFields:
    return _read(AIFF, path)


def read_wav_tags(path: str | Path) -> TagFields:
    return _read(WAVE, path)
