"""
Decode Result - The uniform representation every codec decoder produces.

Samples are interleaved (frame by frame, channel by channel) 32-bit floats
normalized to [-1.0, 1.0]. sample_count counts frames, i.e. samples per
channel, so duration is always sample_count / sample_rate.
"""

from dataclasses import dataclass, field

import numpy as np

I8_MAX = 127
I16_MAX = 32767
I24_MAX = 8388607
I32_MAX = 2147483647

# Bit depth → positive maximum used as the normalization divisor
INT_MAX_FOR_BITS = {
    8: I8_MAX,
    16: I16_MAX,
    24: I24_MAX,
    32: I32_MAX,
}


@dataclass
class DecodeResult:
    """Decoded audio, independent of the source codec."""

    channels: int
    sample_rate: int
    sample_count: int = 0  # Frames (per channel)
    duration: float = 0.0  # Seconds
    samples: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.float32))

    @classmethod
    def from_samples(cls, samples: np.ndarray, channels: int, sample_rate: int) -> "DecodeResult":
        """Build a result from an interleaved float buffer, deriving counts and duration."""
        samples = np.ascontiguousarray(samples, dtype=np.float32).reshape(-1)
        sample_count = len(samples) // channels if channels else 0
        duration = sample_count / sample_rate if sample_rate else 0.0
        return cls(
            channels=channels,
            sample_rate=sample_rate,
            sample_count=sample_count,
            duration=duration,
            samples=samples[:sample_count * channels],
        )

    def frames(self) -> np.ndarray:
        """Samples reshaped to (sample_count, channels)."""
        return self.samples[:self.sample_count * self.channels].reshape(-1, self.channels)


def normalize_int(raw: np.ndarray, bits: int) -> np.ndarray:
    """Divide integer PCM by the maximum magnitude of its bit depth."""
    divisor = INT_MAX_FOR_BITS.get(bits)
    if divisor is None:
        raise ValueError(f"Unsupported bit depth: {bits}")
    return (raw.astype(np.float64) / divisor).astype(np.float32)


def pcm_to_float(data: bytes, bits: int, big_endian: bool = False, unsigned_8bit: bool = False) -> np.ndarray:
    """
    Convert packed integer PCM bytes into normalized floats.

    Args:
        data: Raw sample bytes (whole frames only)
        bits: Bits per sample (8, 16, 24 or 32)
        big_endian: Byte order of multi-byte samples
        unsigned_8bit: 8-bit samples are offset binary (WAV) rather than signed (AIFF)

    Returns:
        1-D float32 array of normalized samples
    """
    order = ">" if big_endian else "<"

    if bits == 8:
        if unsigned_8bit:
            raw = np.frombuffer(data, dtype=np.uint8).astype(np.int16) - 128
        else:
            raw = np.frombuffer(data, dtype=np.int8)
    elif bits == 16:
        raw = np.frombuffer(data, dtype=f"{order}i2")
    elif bits == 24:
        # Widen each 3-byte sample to 4 bytes and sign-extend
        triplets = np.frombuffer(data[:len(data) - len(data) % 3], dtype=np.uint8).reshape(-1, 3)
        if big_endian:
            triplets = triplets[:, ::-1]
        widened = (
            triplets[:, 0].astype(np.int32)
            | (triplets[:, 1].astype(np.int32) << 8)
            | (triplets[:, 2].astype(np.int32) << 16)
        )
        raw = np.where(widened & 0x800000, widened - 0x1000000, widened)
    elif bits == 32:
        raw = np.frombuffer(data, dtype=f"{order}i4")
    else:
        raise ValueError(f"Unsupported bit depth: {bits}")

    return normalize_int(raw, bits)


def float_pcm(data: bytes, bits: int, big_endian: bool = False) -> np.ndarray:
    """Interpret IEEE float PCM bytes; values pass through unchanged."""
    order = ">" if big_endian else "<"
    if bits == 32:
        return np.frombuffer(data, dtype=f"{order}f4").astype(np.float32)
    if bits == 64:
        return np.frombuffer(data, dtype=f"{order}f8").astype(np.float32)
    raise ValueError(f"Unsupported float bit depth: {bits}")
