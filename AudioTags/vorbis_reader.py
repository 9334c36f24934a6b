"""Vorbis comment reader for FLAC, Ogg Vorbis and Opus files."""

import logging
from pathlib import Path

from mutagen import MutagenError
from mutagen.flac import FLAC
from mutagen.oggopus import OggOpus
from mutagen.oggvorbis import OggVorbis

from .tag_fields import TagFields

logger = logging.getLogger(__name__)


def tags_from_comments(comments) -> TagFields:
    """Apply the tag rules to a mutagen VCommentDict (keys are case-insensitive)."""
    fields = TagFields()
    if comments is None:
        return fields

    for value in comments.get("album", []):
        fields.set_album(value)

    album_artists = comments.get("albumartist") or comments.get("album artist") or []
    for value in album_artists:
        fields.add_album_artist(value)

    for value in comments.get("artist", []):
        fields.add_artist(value)

    for value in comments.get("title", []):
        fields.set_title(value)

    for value in comments.get("tracknumber", []):
        fields.set_track_number(value)

    return fields


def _read(opener, path: str | Path) -> TagFields:
    try:
        audio = opener(str(path))
    except (MutagenError, OSError) as e:
        logger.debug(f"Could not read Vorbis comments from {path}: {e}")
        return TagFields()
    return tags_from_comments(audio.tags)


def read_flac_tags(path: str | Path) -> TagFields:
    return _read(FLAC, path)


def read_ogg_vorbis_tags(path: str | Path) -> TagFields:
    return _read(OggVorbis, path)


def read_opus_tags(path: str | Path) -> TagFields:
    return _read(OggOpus, path)
