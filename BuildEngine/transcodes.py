"""
Transcodes - Everything cached for one audio source file.

Holds the extracted AudioMeta (so an unchanged file is never decoded again)
and one Asset per (delivery format, tag mapping) that has been transcoded.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Iterator, Optional

from AudioTags import AudioMeta

from .asset import Asset, stale_expired, timestamp_from_str, timestamp_to_str
from .audio_format import AudioFormat
from .source_file_signature import SourceFileSignature

if TYPE_CHECKING:
    from .build_settings import Build

TranscodeKey = tuple[AudioFormat, str]  # (format, tag mapping key)


def transcode_filename(signature: SourceFileSignature, audio_format: AudioFormat, tag_key: str) -> str:
    """Deterministic path, relative to the cache directory, for a transcode."""
    return f"{audio_format.asset_dirname}/{signature.hash_key()}-{tag_key}{audio_format.extension}"


@dataclass
class Transcodes:
    signature: SourceFileSignature
    source_meta: AudioMeta
    assets: dict[TranscodeKey, Asset] = field(default_factory=dict)
    marked_stale: Optional[datetime] = None

    def get(self, audio_format: AudioFormat, tag_key: str) -> Optional[Asset]:
        return self.assets.get((audio_format, tag_key))

    def set(self, audio_format: AudioFormat, tag_key: str, asset: Asset) -> None:
        self.assets[(audio_format, tag_key)] = asset

    def asset_filename(self, audio_format: AudioFormat, tag_key: str) -> str:
        return transcode_filename(self.signature, audio_format, tag_key)

    def all_assets(self) -> Iterator[Asset]:
        yield from self.assets.values()

    def mark_stale(self, timestamp: datetime) -> None:
        if self.marked_stale is None:
            self.marked_stale = timestamp
        for asset in self.assets.values():
            asset.mark_stale(timestamp)

    def unmark_stale(self) -> None:
        """Mark the record (and its metadata) as used. Assets are unmarked individually."""
        self.marked_stale = None

    def obsolete(self, build: "Build") -> bool:
        return stale_expired(self.marked_stale, build)

    def to_dict(self) -> dict:
        return {
            "signature": self.signature.to_dict(),
            "source_meta": self.source_meta.to_dict(),
            "marked_stale": timestamp_to_str(self.marked_stale),
            "assets": [
                {"format": audio_format.key, "tags": tag_key, "asset": asset.to_dict()}
                for (audio_format, tag_key), asset in self.assets.items()
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Transcodes":
        assets = {}
        for entry in data.get("assets", []):
            audio_format = AudioFormat.from_key(entry["format"])
            if audio_format is None:
                raise ValueError(f"Unknown audio format in cache index: {entry['format']}")
            assets[(audio_format, str(entry["tags"]))] = Asset.from_dict(entry["asset"])

        return cls(
            signature=SourceFileSignature.from_dict(data["signature"]),
            source_meta=AudioMeta.from_dict(data["source_meta"]),
            assets=assets,
            marked_stale=timestamp_from_str(data.get("marked_stale")),
        )
