"""
Archives - Cached zip downloads of one release, one per download format.

A release is identified by its cover, its ordered track signatures and the
tag mapping each track is written with. Changing any of them makes it a
different release: the old record simply stops being used and goes stale.
"""

import base64
import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Iterator, Optional

from .asset import Asset, stale_expired, timestamp_from_str, timestamp_to_str
from .audio_format import AudioFormat
from .source_file_signature import SourceFileSignature

if TYPE_CHECKING:
    from .build_settings import Build

ARCHIVE_DIRNAME = "archives"


def archive_key(
    cover_signature: Optional[SourceFileSignature],
    track_signatures: list[SourceFileSignature],
    tag_keys: list[str],
) -> str:
    """Short URL-safe digest of everything that goes into a release's archives."""
    identity = json.dumps(
        {
            "cover": cover_signature.to_dict() if cover_signature is not None else None,
            "tracks": [s.to_dict() for s in track_signatures],
            "tags": tag_keys,
        },
        sort_keys=True,
    )
    digest = hashlib.sha256(identity.encode()).digest()
    return base64.urlsafe_b64encode(digest[:15]).decode("ascii")


def archive_filename(key: str, audio_format: AudioFormat) -> str:
    return f"{ARCHIVE_DIRNAME}/{key}-{audio_format.asset_dirname}.zip"


def unique_entry_name(name: str, used: set[str]) -> str:
    """`name`, suffixed with _duplicate before its extension until unused. Records the result in `used`."""
    while name in used:
        stem, dot, rest = name.partition(".")
        name = f"{stem}_duplicate{dot}{rest}"
    used.add(name)
    return name


@dataclass
class Archives:
    cover_signature: Optional[SourceFileSignature]
    track_signatures: list[SourceFileSignature]
    tag_keys: list[str]
    assets: dict[AudioFormat, Asset] = field(default_factory=dict)
    marked_stale: Optional[datetime] = None

    @property
    def key(self) -> str:
        return archive_key(self.cover_signature, self.track_signatures, self.tag_keys)

    def get(self, audio_format: AudioFormat) -> Optional[Asset]:
        return self.assets.get(audio_format)

    def set(self, audio_format: AudioFormat, asset: Asset) -> None:
        self.assets[audio_format] = asset

    def asset_filename(self, audio_format: AudioFormat) -> str:
        return archive_filename(self.key, audio_format)

    def all_assets(self) -> Iterator[Asset]:
        yield from self.assets.values()

    def mark_stale(self, timestamp: datetime) -> None:
        if self.marked_stale is None:
            self.marked_stale = timestamp
        for asset in self.assets.values():
            asset.mark_stale(timestamp)

    def unmark_stale(self) -> None:
        self.marked_stale = None

    def obsolete(self, build: "Build") -> bool:
        return stale_expired(self.marked_stale, build)

    def to_dict(self) -> dict:
        return {
            "cover_signature": self.cover_signature.to_dict() if self.cover_signature is not None else None,
            "track_signatures": [s.to_dict() for s in self.track_signatures],
            "tag_keys": list(self.tag_keys),
            "marked_stale": timestamp_to_str(self.marked_stale),
            "assets": {audio_format.key: asset.to_dict() for audio_format, asset in self.assets.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Archives":
        assets = {}
        for key, entry in data.get("assets", {}).items():
            audio_format = AudioFormat.from_key(key)
            if audio_format is None:
                raise ValueError(f"Unknown audio format in cache index: {key}")
            assets[audio_format] = Asset.from_dict(entry)

        cover = data.get("cover_signature")
        track_signatures = [SourceFileSignature.from_dict(s) for s in data["track_signatures"]]
        tag_keys = [str(k) for k in data.get("tag_keys", [])]
        if len(tag_keys) != len(track_signatures):
            raise ValueError("Archive record has mismatched track and tag lists")

        return cls(
            cover_signature=SourceFileSignature.from_dict(cover) if cover is not None else None,
            track_signatures=track_signatures,
            tag_keys=tag_keys,
            assets=assets,
            marked_stale=timestamp_from_str(data.get("marked_stale")),
        )
