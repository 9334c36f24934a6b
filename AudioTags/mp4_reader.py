"""MP4 atom reader for ALAC files."""

import logging
from pathlib import Path

from mutagen import MutagenError
from mutagen.mp4 import MP4

from .tag_fields import TagFields

logger = logging.getLogger(__name__)


def tags_from_mp4(tags) -> TagFields:
    fields = TagFields()
    if tags is None:
        return fields

    for value in tags.get("\xa9alb", []):
        fields.set_album(value)
    for value in tags.get("aART", []):
        fields.add_album_artist(value)
    for value in tags.get("\xa9ART", []):
        fields.add_artist(value)
    for value in tags.get("\xa9nam", []):
        fields.set_title(value)

    # trkn is a list of (track, total) tuples; 0 means unset
    for track_info in tags.get("trkn", []):
        if isinstance(track_info, tuple) and track_info and track_info[0]:
            fields.set_track_number(track_info[0])

    return fields


def read_alac_tags(path: str | Path) -> TagFields:
    try:
        audio = MP4(str(path))
    except (MutagenError, OSError) as e:
        logger.debug(f"Could not read MP4 tags from {path}: {e}")
        return TagFields()
    return tags_from_mp4(audio.tags)
