"""
Asset Cache - Disk-resident store of decoded metadata, transcodes and covers.

Cache location: <catalog>/.catalog_cache/ by default

Cache structure:
  index.json    - Signature → record index (versioned)
  <format>/     - Transcoded audio, one directory per delivery format
  covers/       - Square JPEG cover renditions
  archives/     - Zipped release downloads, one per download format

The index is the single authority on what can be reused. Every record is
keyed by the SourceFileSignature of its source file, so a source that
changed on disk simply misses and its old record goes stale.

Lifecycle of one build:
  1. retrieve()        - load the index, drop dead references, remove orphans
  2. mark_all_stale()  - everything is provisional until the build uses it
  3. lookups           - hits are unmarked (in use)
  4. register_*()      - new artifacts are added
  5. save()            - persist the index
  6. optimize() / report_stale() / wipe() depending on the policy
"""

import json
import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional

from .archives import Archives
from .asset import Asset
from .cover_image import CoverImage
from .source_file_signature import SourceFileSignature
from .stats import format_bytes
from .transcodes import Transcodes

if TYPE_CHECKING:
    from .build_settings import Build

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"

# Bump whenever the index layout or cached artifact semantics change; a
# mismatching index is discarded and its files are removed as orphans.
CACHE_VERSION = 1


class AssetCache:
    """
    Owner of the signature → record index.

    Usage:
        cache = AssetCache.retrieve(build.cache_dir)
        cache.mark_all_stale(build.build_begin)

        record = cache.get_transcodes(signature)
        if record is None:
            record = Transcodes(signature, extract_audio_meta(path))
            cache.register_transcodes(record)

        cache.save()
        cache.optimize(build)

    Only one thread may mutate a cache at a time.
    """

    def __init__(self, cache_dir: str | Path):
        self.cache_dir = Path(cache_dir)
        self.index_path = self.cache_dir / INDEX_FILENAME
        self._transcodes: dict[SourceFileSignature, Transcodes] = {}
        self._covers: dict[SourceFileSignature, CoverImage] = {}
        self._archives: dict[str, Archives] = {}  # release key → record

    # ── Loading ────────────────────────────────────────────────────────────

    @classmethod
    def retrieve(cls, cache_dir: str | Path) -> "AssetCache":
        """
        Load the cache from disk and repair it.

        A missing, corrupt or version-mismatched index yields an empty cache.
        References to files that no longer exist are dropped (and the
        corrected index written back); files nobody references are deleted.
        """
        cache = cls(cache_dir)
        cache.cache_dir.mkdir(parents=True, exist_ok=True)
        cache._load_index()

        corrected = cache._drop_dead_references()
        cache._remove_orphans()

        if corrected:
            cache.save()

        logger.debug(
            f"Retrieved cache: {len(cache._transcodes)} transcode records, "
            f"{len(cache._covers)} cover records, "
            f"{len(cache._archives)} archive records"
        )
        return cache

    def _load_index(self) -> None:
        if not self.index_path.exists():
            return

        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("index is not a JSON object")

            version = data.get("version")
            if version != CACHE_VERSION:
                logger.warning(
                    f"Cache index version {version} does not match {CACHE_VERSION}, starting with an empty cache"
                )
                return

            transcodes = [Transcodes.from_dict(t) for t in data.get("transcodes", [])]
            covers = [CoverImage.from_dict(c) for c in data.get("cover_images", [])]
            archives = [Archives.from_dict(a) for a in data.get("archives", [])]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load cache index, starting with an empty cache: {e}")
            return

        self._transcodes = {t.signature: t for t in transcodes}
        self._covers = {c.signature: c for c in covers}
        self._archives = {a.key: a for a in archives}

    def _drop_dead_references(self) -> bool:
        """Remove assets whose files are gone. Returns True if anything changed."""
        changed = False

        for record in self._records():
            dead = [key for key, asset in record.assets.items() if not (self.cache_dir / asset.filename).is_file()]
            for key in dead:
                logger.warning(f"Cached file missing, dropping reference: {record.assets[key].filename}")
                del record.assets[key]
                changed = True

        return changed

    def _remove_orphans(self) -> int:
        referenced = {Path(asset.filename).as_posix() for asset in self._all_assets()}
        removed = 0

        for root, _, files in os.walk(self.cache_dir):
            for filename in files:
                file_path = Path(root) / filename
                relative = file_path.relative_to(self.cache_dir).as_posix()
                if relative == INDEX_FILENAME or relative in referenced:
                    continue
                try:
                    file_path.unlink()
                    removed += 1
                    logger.debug(f"Removed orphaned file: {relative}")
                except OSError as e:
                    logger.warning(f"Failed to remove orphan {relative}: {e}")

        if removed:
            logger.warning(f"Removed {removed} orphaned file(s) from the cache")
        return removed

    # ── Lookup / registration ──────────────────────────────────────────────

    def get_transcodes(self, signature: SourceFileSignature) -> Optional[Transcodes]:
        """Look up the record for a source file. A hit marks the record as in use."""
        record = self._transcodes.get(signature)
        if record is not None:
            record.unmark_stale()
        return record

    def get_cover_image(self, signature: SourceFileSignature) -> Optional[CoverImage]:
        record = self._covers.get(signature)
        if record is not None:
            record.unmark_stale()
        return record

    def get_archives(self, key: str) -> Optional[Archives]:
        record = self._archives.get(key)
        if record is not None:
            record.unmark_stale()
        return record

    def register_transcodes(self, record: Transcodes) -> None:
        self._transcodes[record.signature] = record

    def register_cover_image(self, record: CoverImage) -> None:
        self._covers[record.signature] = record

    def register_archives(self, record: Archives) -> None:
        self._archives[record.key] = record

    # ── Staleness ──────────────────────────────────────────────────────────

    def mark_all_stale(self, timestamp: datetime) -> None:
        for record in self._records():
            record.mark_stale(timestamp)

    def optimize(self, build: "Build") -> tuple[int, int]:
        """
        Reclaim obsolete assets and delete their files.

        A record is dropped once it has no assets left and is itself
        obsolete. The index is saved afterwards.

        Returns:
            (assets_removed, bytes_freed)
        """
        removed = 0
        freed = 0

        for store in (self._transcodes, self._covers, self._archives):
            for key in list(store):
                record = store[key]
                for asset_key in [k for k, a in record.assets.items() if a.obsolete(build)]:
                    asset = record.assets.pop(asset_key)
                    self._delete_file(asset.filename)
                    removed += 1
                    freed += asset.filesize_bytes
                    logger.info(f"Removed cached asset {asset.filename} for {describe(record)}")

                if not record.assets and record.obsolete(build):
                    del store[key]

        self.save()

        if removed:
            logger.info(f"Cache optimized: {removed} asset(s) removed, {format_bytes(freed)} freed")
        return removed, freed

    def report_stale(self) -> tuple[int, int]:
        """
        Count currently stale assets without deleting anything.

        Returns:
            (stale_assets, stale_bytes)
        """
        count = 0
        size = 0
        for asset in self._all_assets():
            if asset.marked_stale is not None:
                count += 1
                size += asset.filesize_bytes

        if count:
            logger.info(
                f"{count} stale asset(s) ({format_bytes(size)}) in the cache; "
                f"run a cache optimization to reclaim them"
            )
        return count, size

    def wipe(self) -> None:
        """Remove the cache directory entirely."""
        self._transcodes.clear()
        self._covers.clear()
        self._archives.clear()
        shutil.rmtree(self.cache_dir, ignore_errors=True)
        logger.info(f"Wiped cache at {self.cache_dir}")

    # ── Persistence ────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "version": CACHE_VERSION,
            "transcodes": [t.to_dict() for t in self._transcodes.values()],
            "cover_images": [c.to_dict() for c in self._covers.values()],
            "archives": [a.to_dict() for a in self._archives.values()],
        }

    def save(self) -> None:
        """Write the index atomically (temp file + rename)."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        tmp = self.index_path.with_name(INDEX_FILENAME + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.index_path)
        except OSError as e:
            logger.error(f"Failed to save cache index: {e}")
            try:
                tmp.unlink()
            except OSError:
                pass
            raise

    # ── Introspection ──────────────────────────────────────────────────────

    def stats(self) -> dict:
        """Get cache statistics."""
        assets = list(self._all_assets())
        total = sum(a.filesize_bytes for a in assets)
        stale = [a for a in assets if a.marked_stale is not None]
        return {
            "transcode_records": len(self._transcodes),
            "cover_records": len(self._covers),
            "archive_records": len(self._archives),
            "total_files": len(assets),
            "total_size_bytes": total,
            "total_size_mb": round(total / (1024 * 1024), 2),
            "stale_files": len(stale),
            "stale_size_bytes": sum(a.filesize_bytes for a in stale),
            "cache_dir": str(self.cache_dir),
        }

    def _records(self) -> Iterator[Transcodes | CoverImage | Archives]:
        yield from self._transcodes.values()
        yield from self._covers.values()
        yield from self._archives.values()

    def _all_assets(self) -> Iterator[Asset]:
        for record in self._records():
            yield from record.all_assets()

    def _delete_file(self, filename: str) -> None:
        try:
            (self.cache_dir / filename).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to delete cached file {filename}: {e}")


def describe(record: Transcodes | CoverImage | Archives) -> str:
    if isinstance(record, Archives):
        return f"release archive with {len(record.track_signatures)} tracks"
    return record.signature.path
