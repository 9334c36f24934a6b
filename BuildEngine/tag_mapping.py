"""
Tag Mapping - The tags to write into a transcoded file.

A transcode either copies the source's tags (no mapping) or replaces them
with an explicit mapping. A mapping with every field unset strips all tags.
"""

import hashlib
import json
from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class TagMapping:
    album: Optional[str] = None
    album_artist: Optional[str] = None
    artist: Optional[str] = None
    title: Optional[str] = None
    track: Optional[int] = None

    def hash_key(self) -> str:
        """Stable digest of the mapping, part of the cache key of a transcode."""
        payload = json.dumps(asdict(self), sort_keys=True, ensure_ascii=False)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "TagMapping":
        return cls(**{k: data.get(k) for k in ("album", "album_artist", "artist", "title", "track")})


# Cache key used for transcodes that copy the source's tags
COPY_TAGS_KEY = "copy"


def mapping_key(tag_mapping: Optional[TagMapping]) -> str:
    return tag_mapping.hash_key() if tag_mapping is not None else COPY_TAGS_KEY
