"""
Catalog Build - One call from persisted settings to a finished build.

Every audio file in the catalog is requested in the streaming formats of the
configured quality. Download formats are zipped per release directory,
offered as single files, or both, depending on the download granularity.
Every cover image is requested at the default edge sizes.
"""

import logging
from pathlib import Path
from typing import Optional

from .audio_format import AudioFormat
from .build_executor import BuildExecutor, BuildResult
from .build_settings import Build, BuildSettings
from .catalog_scanner import CatalogScanner
from .stats import BuildStats

logger = logging.getLogger(__name__)


def requested_formats(build: Build, settings: BuildSettings) -> list[AudioFormat]:
    """Per-track formats: streaming first, then single-file downloads, without duplicates."""
    formats = list(build.streaming_quality.formats)
    if build.download_granularity.single_files:
        for audio_format in settings.resolved_download_formats():
            if audio_format not in formats:
                formats.append(audio_format)
    return formats


def build_catalog(
    settings: BuildSettings,
    publish_dir: Optional[str | Path] = None,
    stats: Optional[BuildStats] = None,
) -> BuildResult:
    """
    Build the configured catalog, or with analyze_cache_only / optimize_cache_only
    only report or reclaim stale cache assets.

    Raises:
        ValueError: Invalid settings (no catalog, unknown policy, granularity or format)
        OSError: A catalog file disappeared while the build was planned
    """
    build = Build.from_settings(settings)
    executor = BuildExecutor(build, stats, publish_dir)

    if settings.analyze_cache_only:
        logger.info(f"Analyzing cache at {build.cache_dir}")
        return executor.analyze_only()

    if settings.optimize_cache_only:
        logger.info(f"Optimizing cache at {build.cache_dir}")
        return executor.optimize_only()

    formats = requested_formats(build, settings)
    download_formats = settings.resolved_download_formats()
    scanner = CatalogScanner(build.catalog_dir)
    tracks = scanner.track_requests(formats)
    images = scanner.image_requests()
    archives = []
    if build.download_granularity.archives and download_formats:
        archives = scanner.archive_requests(download_formats)

    logger.info(
        f"Building {len(tracks)} tracks, {len(images)} covers and {len(archives)} release archives "
        f"from {build.catalog_dir} ({', '.join(str(f) for f in formats)})"
    )
    return executor.run(tracks, images, archives)
