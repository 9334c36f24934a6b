"""
BuildEngine - Incremental asset pipeline for a music catalog

Core components:
- SourceFileSignature: path + size + mtime change detection
- AssetCache: disk-resident index of reusable artifacts, staleness and reclamation
- Archives: cached zip downloads of a release, one per download format
- Transcoder: drives ffmpeg to produce delivery formats
- BuildExecutor: plans work against the cache and runs it on a thread pool
- BuildSettings / Build: persisted configuration and per-run context
- CatalogScanner: finds audio sources and cover images and groups them into releases
- build_catalog: settings → scan → build in one call
"""

from .source_file_signature import SourceFileSignature
from .asset import Asset, AssetIntent, CacheOptimization, STALE_GRACE_PERIOD
from .audio_format import (
    AudioFormat,
    AudioFormatFamily,
    DownloadGranularity,
    StreamingQuality,
    DEFAULT_DOWNLOAD_FORMAT,
)
from .tag_mapping import TagMapping, mapping_key
from .transcoder import (
    transcode,
    build_command,
    TranscodeError,
    TranscodeFailure,
)
from .transcodes import Transcodes
from .cover_image import CoverImage
from .archives import Archives
from .asset_cache import AssetCache, CACHE_VERSION
from .build_settings import BuildSettings, Build
from .stats import BuildStats, format_bytes
from .build_executor import (
    BuildExecutor,
    BuildResult,
    TrackRequest,
    ImageRequest,
    ArchiveRequest,
    TrackOutput,
    CoverOutput,
    ArchiveOutput,
)
from .catalog_scanner import CatalogScanner
from .catalog_build import build_catalog, requested_formats
from .image_processor import COVER_EDGE_SIZES

__all__ = [
    # Signatures
    "SourceFileSignature",
    # Assets and cache
    "Asset",
    "AssetIntent",
    "CacheOptimization",
    "STALE_GRACE_PERIOD",
    "Transcodes",
    "CoverImage",
    "Archives",
    "AssetCache",
    "CACHE_VERSION",
    # Formats
    "AudioFormat",
    "AudioFormatFamily",
    "StreamingQuality",
    "DownloadGranularity",
    "DEFAULT_DOWNLOAD_FORMAT",
    # Transcoding
    "TagMapping",
    "mapping_key",
    "transcode",
    "build_command",
    "TranscodeError",
    "TranscodeFailure",
    # Build
    "BuildSettings",
    "Build",
    "BuildStats",
    "format_bytes",
    "BuildExecutor",
    "BuildResult",
    "TrackRequest",
    "ImageRequest",
    "ArchiveRequest",
    "TrackOutput",
    "CoverOutput",
    "ArchiveOutput",
    "CatalogScanner",
    "build_catalog",
    "requested_formats",
    "COVER_EDGE_SIZES",
]
