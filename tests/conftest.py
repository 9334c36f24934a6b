"""Shared pytest fixtures: temporary catalogs, synthetic audio writers and an ffmpeg stand-in."""

import struct
import wave
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import numpy as np
import pytest

from BuildEngine import Build, CacheOptimization, TranscodeError, TranscodeFailure

BUILD_BEGIN = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# Audio writers
# ============================================================================


def write_wav(path: Path, frames: np.ndarray, sample_rate: int = 44100, sampwidth: int = 2) -> Path:
    """Write integer PCM frames shaped (n, channels) as a WAV file."""
    frames = np.asarray(frames)
    if frames.ndim == 1:
        frames = frames.reshape(-1, 1)

    match sampwidth:
        case 1:
            raw = (frames.astype(np.int16) + 128).astype(np.uint8).tobytes()
        case 2:
            raw = frames.astype("<i2").tobytes()
        case 3:
            as_int = frames.astype("<i4").reshape(-1)
            raw = b"".join(int(v).to_bytes(3, "little", signed=True) for v in as_int)
        case _:
            raw = frames.astype("<i4").tobytes()

    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as w:
        w.setnchannels(frames.shape[1])
        w.setsampwidth(sampwidth)
        w.setframerate(sample_rate)
        w.writeframes(raw)
    return path


def write_float_wav(path: Path, frames: np.ndarray, sample_rate: int = 48000) -> Path:
    """Write IEEE float32 frames shaped (n, channels) as a WAV file (format tag 3)."""
    frames = np.asarray(frames, dtype="<f4")
    channels = frames.shape[1]
    data = frames.tobytes()
    fmt = struct.pack("<HHIIHH", 3, channels, sample_rate, sample_rate * channels * 4, channels * 4, 32)
    body = b"WAVE" + b"fmt " + struct.pack("<I", len(fmt)) + fmt + b"data" + struct.pack("<I", len(data)) + data
    path.write_bytes(b"RIFF" + struct.pack("<I", len(body)) + body)
    return path


def extended_80(value: int) -> bytes:
    """Encode a positive integer as an 80-bit IEEE extended float (AIFF sample rate)."""
    exponent = value.bit_length() - 1
    mantissa = value << (63 - exponent)
    return struct.pack(">HQ", 16383 + exponent, mantissa)


def write_aiff(
    path: Path,
    frames: np.ndarray,
    sample_rate: int = 44100,
    sample_size: int = 16,
    rate_field: Optional[bytes] = None,
) -> Path:
    """
    Write 16-bit frames shaped (n, channels) as a big-endian AIFF file.

    sample_size and rate_field override what the COMM chunk declares, so
    damaged headers can be produced; the sample data is always 16-bit.
    """
    frames = np.asarray(frames)
    channels = frames.shape[1]
    data = frames.astype(">i2").tobytes()

    if rate_field is None:
        rate_field = extended_80(sample_rate)
    comm = struct.pack(">hIh", channels, frames.shape[0], sample_size) + rate_field
    ssnd = struct.pack(">II", 0, 0) + data
    body = b"AIFF"
    body += b"COMM" + struct.pack(">I", len(comm)) + comm
    body += b"SSND" + struct.pack(">I", len(ssnd)) + ssnd
    if len(ssnd) & 1:
        body += b"\x00"
    path.write_bytes(b"FORM" + struct.pack(">I", len(body)) + body)
    return path


def sine_frames(count: int = 4410, channels: int = 2, amplitude: int = 16000) -> np.ndarray:
    t = np.arange(count)
    mono = (amplitude * np.sin(2 * np.pi * 440 * t / 44100)).astype(np.int16)
    return np.stack([mono] * channels, axis=1)


# ============================================================================
# Path / build fixtures
# ============================================================================


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    path = tmp_path / "catalog"
    path.mkdir()
    return path


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def make_build(catalog_dir: Path, cache_dir: Path):
    """Factory for Build contexts over the temporary catalog."""

    def _make(
        optimization: CacheOptimization = CacheOptimization.DEFAULT,
        build_begin: datetime = BUILD_BEGIN,
        **kwargs,
    ) -> Build:
        return Build(
            catalog_dir=catalog_dir,
            cache_dir=cache_dir,
            build_begin=build_begin,
            cache_optimization=optimization,
            max_workers=kwargs.pop("max_workers", 2),
            **kwargs,
        )

    return _make


# ============================================================================
# ffmpeg stand-in
# ============================================================================


class FakeTranscoder:
    """Stands in for ffmpeg: writes a small file and records each call."""

    def __init__(self, fail_formats=()):
        self.calls = []
        self.fail_formats = set(fail_formats)

    def __call__(self, input_path, output_path, target_format, tag_mapping=None, source_format=None, ffmpeg_path=None):
        self.calls.append((Path(input_path).name, target_format, tag_mapping))
        if target_format in self.fail_formats:
            raise TranscodeError(TranscodeFailure.EXIT, "ffmpeg exited with code 1", returncode=1, stderr="bad input")
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        Path(output_path).write_bytes(b"encoded-" + target_format.key.encode())
