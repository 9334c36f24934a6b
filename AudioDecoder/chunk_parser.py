import struct
from typing import Iterator


def iter_chunks(data, offset, end, big_endian=False) -> Iterator[tuple[str, int, int]]:
    """Walk IFF-style chunks, yielding (chunk_id, body_offset, body_length)."""
    size_format = ">I" if big_endian else "<I"

    while offset + 8 <= end:
        chunk_id = data[offset:offset + 4].decode("latin-1")
        body_length = struct.unpack(size_format, data[offset + 4:offset + 8])[0]
        body_offset = offset + 8

        # Truncated files: clamp the final chunk to what is actually there
        body_length = min(body_length, end - body_offset)
        yield chunk_id, body_offset, body_length

        # Chunks are padded to even length
        offset = body_offset + body_length + (body_length & 1)


def parse_container(data, magic, form_types, big_endian=False) -> dict[str, tuple[int, int]]:
    """
    Read a RIFF/FORM header and index its top-level chunks.

    Returns a dict chunk_id → (body_offset, body_length), first occurrence
    wins. Raises ValueError if the header does not match.
    """
    if len(data) < 12 or data[0:4] != magic:
        raise ValueError(f"Not a {magic.decode()} container")

    form_type = data[8:12]
    if form_type not in form_types:
        raise ValueError(f"Unexpected form type: {form_type!r}")

    size_format = ">I" if big_endian else "<I"
    declared = struct.unpack(size_format, data[4:8])[0]
    end = min(len(data), 8 + declared)

    chunks: dict[str, tuple[int, int]] = {}
    for chunk_id, body_offset, body_length in iter_chunks(data, 12, end, big_endian):
        chunks.setdefault(chunk_id, (body_offset, body_length))
    return chunks
