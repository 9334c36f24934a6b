"""
Catalog Scanner - Finds audio sources and cover images in a catalog directory.

Hidden directories (the cache, build output, VCS metadata) are skipped.
Paths are yielded relative to the catalog root, in sorted order.
"""

import os
from pathlib import Path
from typing import Iterator, Optional

from AudioDecoder import is_audio_file

from .build_executor import ArchiveRequest, ImageRequest, TrackRequest
from .image_processor import COVER_EDGE_SIZES
from .tag_mapping import TagMapping

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp", ".tif", ".tiff"}

# Stems that mark an image as a release cover
COVER_STEMS = {"cover", "folder", "front", "album"}


class CatalogScanner:
    """
    Usage:
        scanner = CatalogScanner("~/music/catalog")
        tracks = scanner.track_requests([AudioFormat.OPUS_96, AudioFormat.MP3_VBR_V5])
        images = scanner.image_requests()
        archives = scanner.archive_requests([AudioFormat.FLAC])
    """

    def __init__(self, catalog_dir: str | Path):
        self.catalog_dir = Path(catalog_dir).expanduser().resolve()
        if not self.catalog_dir.is_dir():
            raise ValueError(f"Catalog path is not a directory: {self.catalog_dir}")

    def _walk(self) -> Iterator[Path]:
        for root, dirs, files in os.walk(self.catalog_dir):
            dirs[:] = sorted(d for d in dirs if not d.startswith("."))
            for filename in sorted(files):
                if filename.startswith("."):
                    continue
                yield (Path(root) / filename).relative_to(self.catalog_dir)

    def audio_files(self) -> Iterator[Path]:
        for path in self._walk():
            if is_audio_file(path):
                yield path

    def cover_images(self) -> Iterator[Path]:
        for path in self._walk():
            if path.suffix.lower() in IMAGE_EXTENSIONS and path.stem.lower() in COVER_STEMS:
                yield path

    def track_requests(self, formats, tag_mappings: Optional[dict[Path, TagMapping]] = None) -> list[TrackRequest]:
        """One request per audio file, with an optional per-file tag mapping."""
        tag_mappings = tag_mappings or {}
        return [
            TrackRequest(source_path=path, formats=list(formats), tag_mapping=tag_mappings.get(path))
            for path in self.audio_files()
        ]

    def image_requests(self, edge_sizes=COVER_EDGE_SIZES) -> list[ImageRequest]:
        return [ImageRequest(source_path=path, edge_sizes=tuple(edge_sizes)) for path in self.cover_images()]

    def archive_requests(self, formats, tag_mappings: Optional[dict[Path, TagMapping]] = None) -> list[ArchiveRequest]:
        """
        One release archive per directory that holds audio files.

        The archive is named after the directory (the catalog itself for
        files at the root) and includes the first cover image found there.
        """
        tag_mappings = tag_mappings or {}

        releases: dict[Path, list[Path]] = {}
        for path in self.audio_files():
            releases.setdefault(path.parent, []).append(path)

        covers: dict[Path, Path] = {}
        for path in self.cover_images():
            covers.setdefault(path.parent, path)

        return [
            ArchiveRequest(
                name=directory.name or self.catalog_dir.name,
                tracks=tracks,
                formats=list(formats),
                cover_path=covers.get(directory),
                tag_mappings=[tag_mappings.get(path) for path in tracks],
            )
            for directory, tracks in releases.items()
        ]
