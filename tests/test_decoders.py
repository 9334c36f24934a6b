import struct
import sys
from types import SimpleNamespace

import numpy as np
import pytest
import soundfile as sf

from AudioDecoder import SourceFormat, decode, detect_format, sniff_format
from AudioDecoder import aiff_decoder, alac_decoder, flac_decoder, mp3_decoder, opus_decoder, vorbis_decoder, wav_decoder
from AudioDecoder.aiff_decoder import parse_extended

from conftest import extended_80, sine_frames, write_aiff, write_float_wav, write_wav


# ============================================================================
# WAV
# ============================================================================


def test_wav_16bit_stereo(tmp_path):
    frames = np.array([[0, 32767], [-32767, 16384], [1, -1]], dtype=np.int16)
    path = write_wav(tmp_path / "a.wav", frames, sample_rate=22050)

    result = wav_decoder.decode(path)

    assert result.channels == 2
    assert result.sample_rate == 22050
    assert result.sample_count == 3
    assert result.duration == pytest.approx(3 / 22050)
    np.testing.assert_allclose(result.samples, frames.reshape(-1) / 32767, rtol=1e-6)


def test_wav_8bit_is_unsigned(tmp_path):
    frames = np.array([[0], [127], [-128]], dtype=np.int16)
    path = write_wav(tmp_path / "a.wav", frames, sampwidth=1)

    result = wav_decoder.decode(path)

    np.testing.assert_allclose(result.samples, [0.0, 1.0, -128 / 127], rtol=1e-6)


def test_wav_24bit(tmp_path):
    frames = np.array([[8388607], [-8388607], [0], [4194304]])
    path = write_wav(tmp_path / "a.wav", frames, sampwidth=3)

    result = wav_decoder.decode(path)

    assert result.sample_count == 4
    np.testing.assert_allclose(result.samples, [1.0, -1.0, 0.0, 4194304 / 8388607], rtol=1e-6)


def test_wav_float_passes_through(tmp_path):
    frames = np.array([[0.25, -0.5], [1.0, -1.0]], dtype=np.float32)
    path = write_float_wav(tmp_path / "f.wav", frames)

    result = wav_decoder.decode(path)

    assert result.sample_rate == 48000
    np.testing.assert_array_equal(result.samples, frames.reshape(-1))


def test_wav_truncated_header_returns_none(tmp_path):
    path = tmp_path / "broken.wav"
    path.write_bytes(b"RIFF\x10\x00\x00\x00WAVEfmt ")

    assert wav_decoder.decode(path) is None


def test_wav_missing_file_returns_none(tmp_path):
    assert wav_decoder.decode(tmp_path / "missing.wav") is None


# ============================================================================
# AIFF
# ============================================================================


def test_extended_sample_rates():
    for rate in (8000, 22050, 44100, 48000, 96000):
        assert parse_extended(extended_80(rate)) == rate


def test_aiff_16bit_big_endian(tmp_path):
    frames = np.array([[32767, -32767], [100, -100], [0, 0]], dtype=np.int16)
    path = write_aiff(tmp_path / "a.aiff", frames, sample_rate=44100)

    result = aiff_decoder.decode(path)

    assert result.channels == 2
    assert result.sample_rate == 44100
    assert result.sample_count == 3
    np.testing.assert_allclose(result.samples, frames.reshape(-1) / 32767, rtol=1e-6)


def test_aiff_garbage_returns_none(tmp_path):
    path = tmp_path / "a.aiff"
    path.write_bytes(b"FORM\x00\x00\x00\x04AIFF")

    assert aiff_decoder.decode(path) is None


@pytest.mark.parametrize("sample_size", [0, -16, 65])
def test_aiff_invalid_sample_size_returns_none(tmp_path, sample_size):
    path = write_aiff(tmp_path / "a.aiff", sine_frames(16), sample_size=sample_size)

    assert aiff_decoder.decode(path) is None


def test_aiff_out_of_range_sample_rate_returns_none(tmp_path):
    huge_rate = struct.pack(">HQ", 0x7FFE, 1 << 63)
    path = write_aiff(tmp_path / "a.aiff", sine_frames(16), rate_field=huge_rate)

    assert aiff_decoder.decode(path) is None
    assert decode(path) is None


# ============================================================================
# libsndfile-backed codecs
# ============================================================================


def test_flac_normalizes_by_bit_depth(tmp_path):
    frames = np.array([[32767, -32767], [1000, -1000], [0, 5]], dtype=np.int16)
    path = tmp_path / "a.flac"
    sf.write(str(path), frames, 44100, format="FLAC", subtype="PCM_16")

    result = flac_decoder.decode(path)

    assert result.channels == 2
    assert result.sample_count == 3
    np.testing.assert_allclose(result.samples, frames.reshape(-1) / 32767, rtol=1e-6)


def test_flac_24bit(tmp_path):
    frames = np.array([[8388607 << 8], [-(8388607 << 8)]], dtype=np.int32)
    path = tmp_path / "a.flac"
    sf.write(str(path), frames, 48000, format="FLAC", subtype="PCM_24")

    result = flac_decoder.decode(path)

    np.testing.assert_allclose(result.samples, [1.0, -1.0], rtol=1e-6)


def test_flac_garbage_returns_none(tmp_path):
    path = tmp_path / "a.flac"
    path.write_bytes(b"fLaC" + b"\x00" * 20)

    assert flac_decoder.decode(path) is None


@pytest.mark.skipif("OGG" not in sf.available_formats(), reason="libsndfile built without Ogg")
def test_vorbis_decodes_to_normalized_floats(tmp_path):
    frames = sine_frames(count=44100, channels=2)
    path = tmp_path / "a.ogg"
    sf.write(str(path), frames, 44100, format="OGG", subtype="VORBIS")

    result = vorbis_decoder.decode(path)

    assert result.channels == 2
    assert result.sample_rate == 44100
    assert result.duration == pytest.approx(1.0, abs=0.05)
    assert np.abs(result.samples).max() <= 1.0
    assert np.abs(result.samples).max() == pytest.approx(16000 / 32767, abs=0.05)


@pytest.mark.skipif("MP3" not in sf.available_formats(), reason="libsndfile built without MP3 encoding")
def test_mp3_decodes_through_16bit_pcm(tmp_path):
    frames = sine_frames(count=44100, channels=2)
    path = tmp_path / "a.mp3"
    sf.write(str(path), frames, 44100, format="MP3")

    result = mp3_decoder.decode(path)

    assert result.channels == 2
    assert result.sample_rate == 44100
    assert result.duration == pytest.approx(result.sample_count / result.sample_rate)
    assert result.duration == pytest.approx(1.0, abs=0.1)
    assert np.abs(result.samples).max() <= 1.0
    # Every sample is a whole 16-bit step
    scaled = result.samples.astype(np.float64) * 32767
    np.testing.assert_allclose(scaled, np.round(scaled), atol=1e-2)


@pytest.mark.skipif(
    "OGG" not in sf.available_formats() or "OPUS" not in sf.available_subtypes("OGG"),
    reason="libsndfile built without Opus",
)
@pytest.mark.parametrize("channels, sample_rate", [(2, 48000), (1, 16000)])
def test_opus_uses_header_channels_and_rate(tmp_path, channels, sample_rate):
    frames = (sine_frames(count=sample_rate, channels=channels) / 32768).astype(np.float32)
    path = tmp_path / "a.opus"
    sf.write(str(path), frames, sample_rate, format="OGG", subtype="OPUS")

    result = opus_decoder.decode(path)

    assert result.channels == channels
    assert result.sample_rate == sample_rate
    assert result.duration == pytest.approx(result.sample_count / sample_rate)
    assert result.duration == pytest.approx(1.0, abs=0.1)
    assert np.abs(result.samples).max() <= 1.0
    assert result.samples.dtype == np.float32


def test_lossy_decoders_return_none_on_garbage(tmp_path):
    path = tmp_path / "a.mp3"
    path.write_bytes(b"ID3" + b"\x00" * 7)

    assert mp3_decoder.decode(path) is None
    assert opus_decoder.decode(tmp_path / "missing.opus") is None


# ============================================================================
# ALAC (ffmpeg pipe)
# ============================================================================


@pytest.fixture
def stub_ffmpeg(tmp_path, monkeypatch):
    """A shell script that prints two stereo s32le frames at half scale, in place of ffmpeg."""
    stub = tmp_path / "bin" / "ffmpeg"
    stub.parent.mkdir()
    stub.write_text(
        "#!/bin/sh\n"
        "printf '\\000\\000\\000\\100\\000\\000\\000\\100\\000\\000\\000\\300\\000\\000\\000\\300'\n"
    )
    stub.chmod(0o755)

    info = SimpleNamespace(codec="alac", channels=2, sample_rate=44100)
    monkeypatch.setattr(alac_decoder, "MP4", lambda path: SimpleNamespace(info=info))
    monkeypatch.setattr(alac_decoder, "find_ffmpeg", lambda: None)
    return stub


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
def test_alac_uses_configured_ffmpeg(tmp_path, stub_ffmpeg):
    path = tmp_path / "a.m4a"
    path.write_bytes(b"")

    result = alac_decoder.decode(path, ffmpeg_path=str(stub_ffmpeg))

    assert result.channels == 2
    assert result.sample_rate == 44100
    assert result.sample_count == 2
    np.testing.assert_allclose(result.samples, [0.5, 0.5, -0.5, -0.5], atol=1e-6)


@pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")
def test_decode_forwards_ffmpeg_path_to_alac(tmp_path, stub_ffmpeg):
    path = tmp_path / "a.m4a"
    path.write_bytes(b"")

    assert alac_decoder.decode(path) is None
    assert decode(path, SourceFormat.ALAC) is None
    assert decode(path, SourceFormat.ALAC, ffmpeg_path=str(stub_ffmpeg)).sample_count == 2


def test_alac_rejects_other_mp4_codecs(tmp_path, monkeypatch):
    info = SimpleNamespace(codec="mp4a.40.2", channels=2, sample_rate=44100)
    monkeypatch.setattr(alac_decoder, "MP4", lambda path: SimpleNamespace(info=info))

    assert alac_decoder.decode(tmp_path / "a.m4a", ffmpeg_path="/bin/false") is None


# ============================================================================
# Format detection and dispatch
# ============================================================================


@pytest.mark.parametrize(
    "header, expected",
    [
        (b"RIFF\x00\x00\x00\x00WAVEfmt ", SourceFormat.WAV),
        (b"FORM\x00\x00\x00\x00AIFFCOMM", SourceFormat.AIFF),
        (b"FORM\x00\x00\x00\x00AIFCFVER", SourceFormat.AIFF),
        (b"fLaC\x00\x00\x00\x22", SourceFormat.FLAC),
        (b"OggS\x00\x02" + b"\x00" * 22 + b"\x01\x13OpusHead", SourceFormat.OPUS),
        (b"OggS\x00\x02" + b"\x00" * 22 + b"\x01\x1e\x01vorbis", SourceFormat.OGG_VORBIS),
        (b"\x00\x00\x00\x20ftypM4A ", SourceFormat.ALAC),
        (b"ID3\x04\x00\x00\x00\x00\x00\x00", SourceFormat.MP3),
        (b"\xff\xfb\x90\x00", SourceFormat.MP3),
        (b"OggS\x00\x02" + b"\x00" * 22 + b"\x01\x1eSpeex", None),
        (b"RIFF\x00\x00\x00\x00AVI ", None),
        (b"hello world", None),
        (b"", None),
    ],
)
def test_sniff_format(header, expected):
    assert sniff_format(header) == expected


def test_detect_format_header_wins_over_extension(tmp_path):
    path = tmp_path / "mislabeled.wav"
    sf.write(str(path), np.zeros((10, 1), dtype=np.int16), 44100, format="FLAC", subtype="PCM_16")

    assert detect_format(path) == SourceFormat.FLAC
    assert decode(path).sample_count == 10


def test_detect_format_fails_closed(tmp_path):
    unknown_ext = write_wav(tmp_path / "track.xyz", sine_frames(10))
    bad_header = tmp_path / "track.mp3"
    bad_header.write_bytes(b"definitely not audio")

    assert detect_format(unknown_ext) is None
    assert detect_format(bad_header) is None
    assert detect_format(tmp_path / "missing.flac") is None
    assert decode(bad_header) is None


def test_decode_dispatches_by_detected_format(tmp_path):
    wav = write_wav(tmp_path / "a.wav", sine_frames(100, channels=1))
    aiff = write_aiff(tmp_path / "a.aif", sine_frames(100, channels=2))

    assert decode(wav).channels == 1
    assert decode(aiff).channels == 2
