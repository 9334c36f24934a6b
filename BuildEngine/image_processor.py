"""
Cover image renditions.

Covers are centre-cropped to a square and scaled down to each requested
edge size. Sources are never upscaled: edge sizes larger than the source are
skipped, except the smallest one, which is always produced (at the source's
size if need be).
"""

import logging
from pathlib import Path

from PIL import Image

logger = logging.getLogger(__name__)

COVER_EDGE_SIZES = (160, 320, 480, 800)
JPEG_QUALITY = 85


def open_rgb(path: str | Path) -> Image.Image:
    """
    Open an image, dropping any alpha channel (renditions are JPEG).

    Raises:
        OSError: The file is missing or not an image Pillow can read
    """
    with Image.open(path) as img:
        img.load()
        if img.mode != "RGB":
            return img.convert("RGB")
        return img.copy()


def crop_square(img: Image.Image) -> Image.Image:
    width, height = img.size
    if width == height:
        return img
    edge = min(width, height)
    left = (width - edge) // 2
    top = (height - edge) // 2
    return img.crop((left, top, left + edge, top + edge))


def plan_edge_sizes(source_edge: int, edge_sizes=COVER_EDGE_SIZES) -> list[int]:
    """Edge sizes that can be produced without upscaling (smallest always kept)."""
    sizes = sorted(set(edge_sizes))
    if not sizes:
        return []
    planned = [s for s in sizes if s <= source_edge]
    if not planned:
        planned = [sizes[0]]
    return planned


def render_cover(img: Image.Image, edge_size: int, output_path: str | Path) -> int:
    """
    Write one square JPEG rendition.

    Returns:
        The edge size actually written (smaller than requested if the source is)
    """
    square = crop_square(img)
    if square.width > edge_size:
        square = square.resize((edge_size, edge_size), Image.Resampling.LANCZOS)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    square.save(output_path, "JPEG", quality=JPEG_QUALITY)
    logger.debug(f"Rendered cover {output_path.name} at {square.width}px")
    return square.width
