"""
AIFF/AIFC decoder.

AIFF stores big-endian signed PCM. AIFC adds a compression type; only the
uncompressed variants are handled: NONE, sowt (little-endian PCM) and
fl32/fl64 (IEEE float).
"""

import logging
import math
import struct
from pathlib import Path
from typing import Optional

from .chunk_parser import parse_container
from .decode_result import DecodeResult, float_pcm, pcm_to_float

logger = logging.getLogger(__name__)


def decode(path: str | Path) -> Optional[DecodeResult]:
    try:
        data = Path(path).read_bytes()
        return decode_bytes(data)
    except (OSError, ValueError, ArithmeticError, struct.error) as e:
        logger.debug(f"AIFF decode failed for {path}: {e}")
        return None


def parse_extended(raw: bytes) -> float:
    """Parse an 80-bit IEEE 754 extended precision float (AIFF sample rate)."""
    sign_exponent, mantissa = struct.unpack(">HQ", raw[:10])
    if sign_exponent == 0 and mantissa == 0:
        return 0.0
    exponent = (sign_exponent & 0x7FFF) - 16383 - 63
    value = math.ldexp(mantissa, exponent)
    return -value if sign_exponent & 0x8000 else value


def decode_bytes(data: bytes) -> DecodeResult:
    chunks = parse_container(data, b"FORM", (b"AIFF", b"AIFC"), big_endian=True)
    is_aifc = data[8:12] == b"AIFC"

    if "COMM" not in chunks or "SSND" not in chunks:
        raise ValueError("Missing COMM or SSND chunk")

    comm_offset, comm_length = chunks["COMM"]
    if comm_length < 18:
        raise ValueError("COMM chunk too short")

    channels, frame_count, bits = struct.unpack(">hIh", data[comm_offset:comm_offset + 8])
    sample_rate = int(round(parse_extended(data[comm_offset + 8:comm_offset + 18])))

    compression = b"NONE"
    if is_aifc and comm_length >= 22:
        compression = data[comm_offset + 18:comm_offset + 22]

    if channels <= 0 or sample_rate <= 0:
        raise ValueError("Invalid stream header")
    if not 0 < bits <= 64:
        raise ValueError(f"Invalid sample size: {bits}")

    ssnd_offset, ssnd_length = chunks["SSND"]
    data_offset = struct.unpack(">I", data[ssnd_offset:ssnd_offset + 4])[0]
    start = ssnd_offset + 8 + data_offset
    end = ssnd_offset + ssnd_length

    container_bytes = (bits + 7) // 8
    block_align = container_bytes * channels
    available_frames = max(0, end - start) // block_align
    frame_count = min(frame_count, available_frames)
    raw = data[start:start + frame_count * block_align]

    match compression:
        case b"NONE":
            samples = pcm_to_float(raw, container_bytes * 8, big_endian=True)
        case b"sowt":
            samples = pcm_to_float(raw, container_bytes * 8, big_endian=False)
        case b"fl32" | b"FL32":
            samples = float_pcm(raw, 32, big_endian=True)
        case b"fl64" | b"FL64":
            samples = float_pcm(raw, 64, big_endian=True)
        case _:
            raise ValueError(f"Unsupported AIFC compression: {compression!r}")

    return DecodeResult.from_samples(samples, channels, sample_rate)
