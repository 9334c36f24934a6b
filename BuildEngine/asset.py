"""
Asset - One file in the cache directory, with its staleness marker.

An asset is stale when it was not used by the build that is currently
running (or last ran). Whether a stale asset may be deleted depends on the
cache optimization policy and on how long ago it went stale.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .build_settings import Build

# Stale assets younger than this survive under the default/delayed policies
STALE_GRACE_PERIOD = timedelta(hours=24)


class AssetIntent(Enum):
    DELIVERABLE = "deliverable"  # Used by the current build's output
    INTERMEDIATE = "intermediate"  # Only needed while the build runs


class CacheOptimization(Enum):
    DEFAULT = "default"
    DELAYED = "delayed"
    IMMEDIATE = "immediate"
    MANUAL = "manual"
    WIPE = "wipe"

    @classmethod
    def from_key(cls, key: str) -> "CacheOptimization":
        try:
            return cls(key.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown cache optimization '{key}' (expected one of: "
                f"{', '.join(o.value for o in cls)})"
            ) from None


def stale_expired(marked_stale: Optional[datetime], build: "Build") -> bool:
    """True if something marked stale at `marked_stale` may be reclaimed by `build`."""
    if marked_stale is None:
        return False

    match build.cache_optimization:
        case CacheOptimization.DEFAULT | CacheOptimization.DELAYED:
            return build.build_begin - marked_stale > STALE_GRACE_PERIOD
        case _:
            return True


def timestamp_to_str(timestamp: Optional[datetime]) -> Optional[str]:
    return timestamp.isoformat() if timestamp is not None else None


def timestamp_from_str(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class Asset:
    filename: str  # Relative to the cache directory
    filesize_bytes: int
    marked_stale: Optional[datetime] = None

    @classmethod
    def create(cls, build: "Build", filename: str, intent: AssetIntent) -> "Asset":
        """
        Register a file the build just wrote into the cache directory.

        Raises:
            OSError: The file is not there
        """
        size = (build.cache_dir / filename).stat().st_size
        marked_stale = build.build_begin if intent == AssetIntent.INTERMEDIATE else None
        return cls(filename=filename, filesize_bytes=size, marked_stale=marked_stale)

    def mark_stale(self, timestamp: datetime) -> None:
        # Keep the earliest marker so the grace period is not restarted
        if self.marked_stale is None:
            self.marked_stale = timestamp

    def unmark_stale(self) -> None:
        self.marked_stale = None

    def obsolete(self, build: "Build") -> bool:
        return stale_expired(self.marked_stale, build)

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "filesize_bytes": self.filesize_bytes,
            "marked_stale": timestamp_to_str(self.marked_stale),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Asset":
        return cls(
            filename=str(data["filename"]),
            filesize_bytes=int(data["filesize_bytes"]),
            marked_stale=timestamp_from_str(data.get("marked_stale")),
        )
