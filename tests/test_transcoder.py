import sys

import pytest

from AudioDecoder import SourceFormat
from BuildEngine import AudioFormat, StreamingQuality, TagMapping, TranscodeError, TranscodeFailure, build_command, transcode


def test_copy_tags_plain_encode():
    cmd = build_command("ffmpeg", "in.flac", "out.mp3", AudioFormat.MP3_VBR_V0, source_format=SourceFormat.FLAC)

    assert cmd == ["ffmpeg", "-y", "-i", "in.flac", "-codec:a", "libmp3lame", "-qscale:a", "0", "out.mp3"]


@pytest.mark.parametrize("source", [SourceFormat.OGG_VORBIS, SourceFormat.OPUS])
def test_stream_tagged_sources_map_metadata_across_families(source):
    to_flac = build_command("ffmpeg", "in", "out.flac", AudioFormat.FLAC, source_format=source)
    to_opus = build_command("ffmpeg", "in", "out.opus", AudioFormat.OPUS_96, source_format=source)

    assert to_flac == ["ffmpeg", "-y", "-i", "in", "-map_metadata", "0:s:a:0", "out.flac"]
    assert "-map_metadata" not in to_opus


def test_tag_mapping_replaces_source_tags():
    mapping = TagMapping(album="LP", album_artist="Band", artist="Singer", title="Song", track=4)

    cmd = build_command("ffmpeg", "in.wav", "out.opus", AudioFormat.OPUS_128, mapping, SourceFormat.WAV)

    assert cmd == [
        "ffmpeg", "-y", "-i", "in.wav",
        "-map_metadata", "-1",
        "-metadata", "album=LP",
        "-metadata", "album_artist=Band",
        "-metadata", "artist=Singer",
        "-vn",
        "-metadata", "title=Song",
        "-metadata", "track=4",
        "-codec:a", "libopus", "-b:a", "128k",
        "out.opus",
    ]


def test_empty_mapping_strips_tags():
    cmd = build_command("ffmpeg", "in.wav", "out.wav", AudioFormat.WAV, TagMapping())

    assert cmd == ["ffmpeg", "-y", "-i", "in.wav", "-map_metadata", "-1", "-vn", "out.wav"]


@pytest.mark.parametrize("target", [AudioFormat.AAC, AudioFormat.AIFF])
def test_id3_opt_in_muxers(target):
    copy = build_command("ffmpeg", "in.flac", "out", target, source_format=SourceFormat.FLAC)
    mapped = build_command("ffmpeg", "in.flac", "out", target, TagMapping(title="T"))

    assert copy[4:6] == ["-write_id3v2", "1"]
    assert mapped[-3:-1] == ["-write_id3v2", "1"]


def test_alac_encoder_args():
    cmd = build_command("ffmpeg", "in.flac", "out.m4a", AudioFormat.ALAC)

    assert cmd[-4:] == ["-vn", "-codec:a", "alac", "out.m4a"]


def test_missing_binary_is_launch_failure(tmp_path):
    with pytest.raises(TranscodeError) as excinfo:
        transcode(tmp_path / "in.wav", tmp_path / "out.opus", AudioFormat.OPUS_96,
                  ffmpeg_path=str(tmp_path / "no-such-ffmpeg"))

    assert excinfo.value.failure == TranscodeFailure.LAUNCH
    assert excinfo.value.returncode is None


def test_nonzero_exit_is_exit_failure(tmp_path):
    # The Python interpreter rejects ffmpeg's arguments with a non-zero exit code
    with pytest.raises(TranscodeError) as excinfo:
        transcode(tmp_path / "in.wav", tmp_path / "out.opus", AudioFormat.OPUS_96, ffmpeg_path=sys.executable)

    error = excinfo.value
    assert error.failure == TranscodeFailure.EXIT
    assert error.returncode != 0
    assert error.stderr
    assert "stderr:" in error.details()


def test_format_keys():
    assert AudioFormat.from_key("mp3") == AudioFormat.MP3_VBR_V0
    assert AudioFormat.from_key("opus") == AudioFormat.OPUS_128
    assert AudioFormat.from_key("OPUS_48") == AudioFormat.OPUS_48
    assert AudioFormat.from_key("wma") is None
    assert str(AudioFormat.MP3_VBR_V5) == "MP3 V5"


def test_streaming_quality_formats():
    assert StreamingQuality.STANDARD.formats == (AudioFormat.OPUS_96, AudioFormat.MP3_VBR_V5)
    assert StreamingQuality.FRUGAL.formats == (AudioFormat.OPUS_48, AudioFormat.MP3_VBR_V7)


def test_tag_mapping_hash_key():
    a = TagMapping(title="Song", track=1)

    assert a.hash_key() == TagMapping(title="Song", track=1).hash_key()
    assert a.hash_key() != TagMapping(title="Song", track=2).hash_key()
    assert a.hash_key() != TagMapping().hash_key()
