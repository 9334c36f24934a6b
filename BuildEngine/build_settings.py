"""
Build settings with JSON persistence, and the per-run Build context.

BuildSettings is what a user configures; Build is what a single run works
with (resolved directories, parsed policy, the timestamp the run began).
"""

import json
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .asset import CacheOptimization
from .audio_format import DEFAULT_DOWNLOAD_FORMAT, AudioFormat, DownloadGranularity, StreamingQuality

CACHE_DIRNAME = ".catalog_cache"

# Worker cap when max_workers is 0 (auto)
MAX_AUTO_WORKERS = 8


@dataclass
class BuildSettings:
    """All user-configurable build settings."""

    # ── Paths ───────────────────────────────────────────────────────────────
    catalog_dir: str = ""

    # Cache directory (empty = <catalog_dir>/.catalog_cache)
    cache_dir: str = ""

    # ── Cache ───────────────────────────────────────────────────────────────
    # default | delayed | immediate | manual | wipe
    cache_optimization: str = "default"

    # Remove the whole cache before building
    wipe_cache: bool = False

    # Only report stale assets, do not build or delete anything
    analyze_cache_only: bool = False

    # Only reclaim stale assets, do not build
    optimize_cache_only: bool = False

    # ── Audio ───────────────────────────────────────────────────────────────
    # standard (Opus 96 + MP3 V5) | frugal (Opus 48 + MP3 V7)
    streaming_quality: str = "standard"

    # Download format keys, e.g. ["flac", "mp3", "opus_128"]
    download_formats: list[str] = field(default_factory=lambda: [DEFAULT_DOWNLOAD_FORMAT.key])

    # entire_release (zip per release) | single_files | all_options
    download_granularity: str = "entire_release"

    # Parallel decode/transcode workers. 0 = auto (CPU count, capped at 8)
    max_workers: int = 0

    # Path to ffmpeg (empty = search PATH and common install locations)
    ffmpeg_path: str = ""

    def save(self, path: str | Path) -> None:
        """Write settings atomically (temp file + rename)."""
        path = str(path)
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        tmp = path + ".tmp"
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(asdict(self), f, indent=2, ensure_ascii=False)
            os.replace(tmp, path)
        except Exception:
            try:
                os.remove(tmp)
            except OSError:
                pass
            raise

    @classmethod
    def load(cls, path: str | Path) -> "BuildSettings":
        """Load settings from JSON, returning defaults for missing keys."""
        settings = cls()
        if not os.path.exists(path):
            return settings
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                return settings
            # Only set known fields, ignoring unknown keys and mismatched types
            for key, value in data.items():
                if hasattr(settings, key):
                    expected_type = type(getattr(settings, key))
                    if isinstance(value, expected_type):
                        setattr(settings, key, value)
        except (json.JSONDecodeError, OSError):
            pass
        return settings

    def resolved_download_formats(self) -> list[AudioFormat]:
        """Download formats in configured order, unknown keys rejected."""
        formats = []
        for key in self.download_formats:
            audio_format = AudioFormat.from_key(key)
            if audio_format is None:
                raise ValueError(f"Unknown download format '{key}'")
            if audio_format not in formats:
                formats.append(audio_format)
        return formats


def resolve_workers(max_workers: int) -> int:
    if max_workers > 0:
        return max_workers
    return min(os.cpu_count() or 4, MAX_AUTO_WORKERS)


@dataclass
class Build:
    """Runtime context of one build."""

    catalog_dir: Path
    cache_dir: Path
    build_begin: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cache_optimization: CacheOptimization = CacheOptimization.DEFAULT
    streaming_quality: StreamingQuality = StreamingQuality.STANDARD
    download_granularity: DownloadGranularity = DownloadGranularity.ENTIRE_RELEASE
    ffmpeg_path: Optional[str] = None
    max_workers: int = 0
    wipe_cache: bool = False  # Start from an empty cache

    def __post_init__(self):
        self.catalog_dir = Path(self.catalog_dir)
        self.cache_dir = Path(self.cache_dir)
        self.max_workers = resolve_workers(self.max_workers)

    @classmethod
    def from_settings(cls, settings: BuildSettings) -> "Build":
        if not settings.catalog_dir:
            raise ValueError("catalog_dir is not set")

        catalog_dir = Path(settings.catalog_dir).resolve()
        cache_dir = Path(settings.cache_dir) if settings.cache_dir else catalog_dir / CACHE_DIRNAME

        return cls(
            catalog_dir=catalog_dir,
            cache_dir=cache_dir,
            cache_optimization=CacheOptimization.from_key(settings.cache_optimization),
            wipe_cache=settings.wipe_cache,
            streaming_quality=StreamingQuality.from_key(settings.streaming_quality),
            download_granularity=DownloadGranularity.from_key(settings.download_granularity),
            ffmpeg_path=settings.ffmpeg_path or None,
            max_workers=settings.max_workers,
        )
