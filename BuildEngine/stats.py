"""Build statistics, accumulated by the build executor and passed explicitly."""

from dataclasses import dataclass


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string (B, KB, MB, GB)."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    if size < 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    return f"{size / (1024 * 1024 * 1024):.1f} GB"


@dataclass
class BuildStats:
    tracks: int = 0
    metadata_extracted: int = 0
    transcodes: int = 0
    transcode_bytes: int = 0
    images: int = 0
    image_bytes: int = 0
    archives: int = 0
    archive_bytes: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    reclaimed_assets: int = 0
    reclaimed_bytes: int = 0
    stale_assets: int = 0
    stale_bytes: int = 0

    def add_transcode(self, size: int) -> None:
        self.transcodes += 1
        self.transcode_bytes += size

    def add_image(self, size: int) -> None:
        self.images += 1
        self.image_bytes += size

    def add_archive(self, size: int) -> None:
        self.archives += 1
        self.archive_bytes += size

    @property
    def summary(self) -> str:
        lines = [f"  {self.tracks} tracks ({self.cache_hits} cache hits, {self.cache_misses} misses)"]
        if self.metadata_extracted:
            lines.append(f"  Extracted metadata for {self.metadata_extracted} files")
        if self.transcodes:
            lines.append(f"  Transcoded {self.transcodes} files ({format_bytes(self.transcode_bytes)})")
        if self.images:
            lines.append(f"  Rendered {self.images} cover images ({format_bytes(self.image_bytes)})")
        if self.archives:
            lines.append(f"  Zipped {self.archives} release archives ({format_bytes(self.archive_bytes)})")
        if self.reclaimed_assets:
            lines.append(f"  Reclaimed {self.reclaimed_assets} cached assets ({format_bytes(self.reclaimed_bytes)})")
        if self.stale_assets:
            lines.append(f"  {self.stale_assets} stale cached assets ({format_bytes(self.stale_bytes)}) left in place")
        return "\n".join(lines)
