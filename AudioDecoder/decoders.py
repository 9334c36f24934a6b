"""Codec dispatch: one stateless decode function per source format."""

import logging
from pathlib import Path
from typing import Callable, Optional

from . import aiff_decoder, alac_decoder, flac_decoder, mp3_decoder, opus_decoder, vorbis_decoder, wav_decoder
from .decode_result import DecodeResult
from .formats import SourceFormat, detect_format

logger = logging.getLogger(__name__)

DecodeFn = Callable[..., Optional[DecodeResult]]

DECODERS: dict[SourceFormat, DecodeFn] = {
    SourceFormat.AIFF: aiff_decoder.decode,
    SourceFormat.ALAC: alac_decoder.decode,
    SourceFormat.FLAC: flac_decoder.decode,
    SourceFormat.MP3: mp3_decoder.decode,
    SourceFormat.OGG_VORBIS: vorbis_decoder.decode,
    SourceFormat.OPUS: opus_decoder.decode,
    SourceFormat.WAV: wav_decoder.decode,
}

# Decoders that shell out to ffmpeg and accept an explicit binary path
FFMPEG_DECODED = {SourceFormat.ALAC}


def decode(
    path: str | Path,
    source_format: Optional[SourceFormat] = None,
    ffmpeg_path: Optional[str] = None,
) -> Optional[DecodeResult]:
    """
    Decode any supported file into a DecodeResult.

    Returns None for unsupported formats and for files the codec cannot
    parse; never raises.
    """
    if source_format is None:
        source_format = detect_format(path)
    if source_format is None:
        logger.debug(f"No decoder for {path}")
        return None

    if source_format in FFMPEG_DECODED:
        result = DECODERS[source_format](path, ffmpeg_path=ffmpeg_path)
    else:
        result = DECODERS[source_format](path)
    if result is None:
        logger.warning(f"Could not decode {Path(path).name} as {source_format.value}")
    return result
