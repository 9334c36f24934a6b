"""
WAV decoder - RIFF/WAVE PCM and IEEE float.

Supports PCM (8-bit unsigned, 16/24/32-bit signed), IEEE float (32/64-bit)
and WAVE_FORMAT_EXTENSIBLE wrapping either of those.
"""

import logging
import struct
from pathlib import Path
from typing import Optional

from .chunk_parser import parse_container
from .decode_result import DecodeResult, float_pcm, pcm_to_float

logger = logging.getLogger(__name__)

WAVE_FORMAT_PCM = 0x0001
WAVE_FORMAT_IEEE_FLOAT = 0x0003
WAVE_FORMAT_EXTENSIBLE = 0xFFFE


def decode(path: str | Path) -> Optional[DecodeResult]:
    try:
        data = Path(path).read_bytes()
        return decode_bytes(data)
    except (OSError, ValueError, struct.error) as e:
        logger.debug(f"WAV decode failed for {path}: {e}")
        return None


def decode_bytes(data: bytes) -> DecodeResult:
    chunks = parse_container(data, b"RIFF", (b"WAVE",))

    if "fmt " not in chunks or "data" not in chunks:
        raise ValueError("Missing fmt or data chunk")

    fmt_offset, fmt_length = chunks["fmt "]
    if fmt_length < 16:
        raise ValueError("fmt chunk too short")

    format_tag, channels, sample_rate, _byte_rate, block_align, bits = struct.unpack(
        "<HHIIHH", data[fmt_offset:fmt_offset + 16]
    )

    if format_tag == WAVE_FORMAT_EXTENSIBLE and fmt_length >= 40:
        # The first two bytes of the SubFormat GUID carry the actual format tag
        format_tag = struct.unpack("<H", data[fmt_offset + 24:fmt_offset + 26])[0]

    if channels == 0 or sample_rate == 0 or block_align == 0:
        raise ValueError("Invalid stream header")

    data_offset, data_length = chunks["data"]
    frame_count = data_length // block_align
    container_bytes = block_align // channels
    raw = data[data_offset:data_offset + frame_count * block_align]

    if format_tag == WAVE_FORMAT_PCM:
        # Samples narrower than their container are left-justified, so the
        # container width is the effective bit depth
        samples = pcm_to_float(raw, container_bytes * 8, unsigned_8bit=True)
    elif format_tag == WAVE_FORMAT_IEEE_FLOAT:
        samples = float_pcm(raw, bits)
    else:
        raise ValueError(f"Unsupported WAV format tag: {format_tag:#06x}")

    return DecodeResult.from_samples(samples, channels, sample_rate)
