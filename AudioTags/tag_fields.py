"""
Tag field accumulation shared by all tag readers.

Rules applied to every raw value regardless of container:
- values are trimmed, and a value that is empty after trimming is absent
- list fields (artists, album artists) keep every non-empty value in file order
- single fields (album, title) keep the last non-empty value
- track numbers ignore a "/total" suffix and reject anything non-numeric;
  the last parseable value wins
"""

from dataclasses import dataclass, field
from typing import Optional


def trim_and_reject_empty(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_track_number(value) -> Optional[int]:
    """Parse '3', ' 03 ' or '3/12' into 3. Returns None for anything else."""
    text = trim_and_reject_empty(value)
    if text is None:
        return None
    head = text.split("/", 1)[0].strip()
    if not head.isascii() or not head.isdigit():
        return None
    return int(head)


@dataclass
class TagFields:
    """Normalized tag values read from one file."""

    album: Optional[str] = None
    album_artists: list[str] = field(default_factory=list)
    artists: list[str] = field(default_factory=list)
    title: Optional[str] = None
    track_number: Optional[int] = None

    def set_album(self, value) -> None:
        self.album = trim_and_reject_empty(value) or self.album

    def set_title(self, value) -> None:
        self.title = trim_and_reject_empty(value) or self.title

    def add_album_artist(self, value) -> None:
        text = trim_and_reject_empty(value)
        if text:
            self.album_artists.append(text)

    def add_artist(self, value) -> None:
        text = trim_and_reject_empty(value)
        if text:
            self.artists.append(text)

    def set_track_number(self, value) -> None:
        number = parse_track_number(value)
        if number is not None:
            self.track_number = number
