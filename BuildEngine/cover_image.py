"""CoverImage - Cached square renditions of one cover image, keyed by edge size."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Iterator, Optional

from .asset import Asset, stale_expired, timestamp_from_str, timestamp_to_str
from .source_file_signature import SourceFileSignature

if TYPE_CHECKING:
    from .build_settings import Build


def cover_filename(signature: SourceFileSignature, edge_size: int) -> str:
    return f"covers/{signature.hash_key()}-{edge_size}.jpg"


@dataclass
class CoverImage:
    signature: SourceFileSignature
    assets: dict[int, Asset] = field(default_factory=dict)  # requested edge size → asset
    source_edge: int = 0  # Shorter edge of the source in pixels, 0 = not yet known
    marked_stale: Optional[datetime] = None

    def get(self, edge_size: int) -> Optional[Asset]:
        return self.assets.get(edge_size)

    def set(self, edge_size: int, asset: Asset) -> None:
        self.assets[edge_size] = asset

    def asset_filename(self, edge_size: int) -> str:
        return cover_filename(self.signature, edge_size)

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
            "signature": self.signature.to_dict(),
            "source_edge": self.source_edge,
            "marked_stale": timestamp_to_str(self.marked_stale),
            "assets": {str(edge): asset.to_dict() for edge, asset in self.assets.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CoverImage":
        return cls(
            signature=SourceFileSignature.from_dict(data["signature"]),
            assets={int(edge): Asset.from_dict(a) for edge, a in data.get("assets", {}).items()},
            source_edge=int(data.get("source_edge", 0)),
            marked_stale=timestamp_from_str(data.get("marked_stale")),
        )
