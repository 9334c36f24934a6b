"""
AudioDecoder - Codec-agnostic decoding into normalized float samples

Core components:
- SourceFormat / detect_format: extension gate plus header sniffing
- decode: dispatches to the per-codec decoder for a file
- DecodeResult: interleaved float32 samples with channel/rate/duration info
- compute_peaks: fixed-resolution waveform envelope
"""

from .decode_result import DecodeResult
from .formats import SourceFormat, AUDIO_EXTENSIONS, detect_format, sniff_format, is_audio_file
from .decoders import DECODERS, decode
from .peaks import compute_peaks, DEFAULT_RESOLUTION
from .ffmpeg import find_ffmpeg, is_ffmpeg_available

__all__ = [
    "DecodeResult",
    # Format detection
    "SourceFormat",
    "AUDIO_EXTENSIONS",
    "detect_format",
    "sniff_format",
    "is_audio_file",
    # Decoding
    "DECODERS",
    "decode",
    # Peaks
    "compute_peaks",
    "DEFAULT_RESOLUTION",
    # ffmpeg
    "find_ffmpeg",
    "is_ffmpeg_available",
]
