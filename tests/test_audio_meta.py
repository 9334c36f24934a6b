from dataclasses import replace

import numpy as np
import pytest
import soundfile as sf
from mutagen.flac import FLAC
from mutagen.id3 import TALB, TIT2, TPE1, TPE2, TRCK
from mutagen.wave import WAVE

from AudioDecoder import SourceFormat
from AudioTags import CODECS, AudioMeta, TagFields, extract_audio_meta, parse_track_number

from conftest import sine_frames, write_wav


# ============================================================================
# Tag rules
# ============================================================================


@pytest.mark.parametrize(
    "value, expected",
    [
        ("3", 3),
        (" 07 ", 7),
        ("3/12", 3),
        (" 4 / 10", 4),
        ("A1", None),
        ("1a", None),
        ("-2", None),
        ("", None),
        ("   ", None),
        ("/12", None),
        (None, None),
    ],
)
def test_parse_track_number(value, expected):
    assert parse_track_number(value) == expected


def test_tag_fields_rules():
    fields = TagFields()
    for value in ["First", "   ", "Second", ""]:
        fields.set_album(value)
        fields.add_artist(value)
    for value in ["5", "x", "6/9", "junk"]:
        fields.set_track_number(value)

    assert fields.album == "Second"
    assert fields.artists == ["First", "Second"]
    assert fields.track_number == 6


def test_whitespace_only_title_is_absent():
    fields = TagFields()
    fields.set_title("   ")

    assert fields.title is None


def test_lossless_flags_are_static():
    lossless = {fmt for fmt, codec in CODECS.items() if codec.lossless}

    assert lossless == {SourceFormat.FLAC, SourceFormat.ALAC, SourceFormat.AIFF, SourceFormat.WAV}
    assert set(CODECS) == set(SourceFormat)


# ============================================================================
# Extraction from real files
# ============================================================================


def tagged_wav(path, v2_version=4, **frames):
    write_wav(path, sine_frames(4410, channels=2))
    audio = WAVE(str(path))
    audio.add_tags()
    for frame in frames.values():
        audio.tags.add(frame)
    if v2_version == 3:
        audio.save(v2_version=3, v23_sep=None)
    else:
        audio.save()
    return path


def test_wav_with_id3_tags(tmp_path):
    path = tagged_wav(
        tmp_path / "song.wav",
        album=TALB(encoding=3, text=["  Album  "]),
        album_artist=TPE2(encoding=3, text=["Band"]),
        artist=TPE1(encoding=3, text=["Singer", "Guest"]),
        title=TIT2(encoding=3, text=["  Song  "]),
        track=TRCK(encoding=3, text=["3/12"]),
    )

    meta = extract_audio_meta(path)

    assert meta.album == "Album"
    assert meta.album_artists == ["Band"]
    assert meta.artists == ["Singer", "Guest"]
    assert meta.title == "Song"
    assert meta.track_number == 3
    assert meta.lossless is True
    assert meta.duration_seconds == pytest.approx(0.1)
    assert len(meta.peaks) == 320


def test_id3v23_null_separator_means_slash(tmp_path):
    path = tagged_wav(
        tmp_path / "acdc.wav",
        v2_version=3,
        artist=TPE1(encoding=1, text=["AC", "DC"]),
        title=TIT2(encoding=1, text=["Either", "Or"]),
    )

    meta = extract_audio_meta(path)

    assert meta.artists == ["AC/DC"]
    assert meta.title == "Either/Or"


def test_flac_vorbis_comments(tmp_path):
    path = tmp_path / "track.flac"
    sf.write(str(path), sine_frames(4410, channels=1), 44100, format="FLAC", subtype="PCM_16")
    audio = FLAC(str(path))
    audio["album"] = ["Old", "  New  "]
    audio["album artist"] = ["Fallback Band"]
    audio["artist"] = ["One", "   ", "Two"]
    audio["title"] = ["Title"]
    audio["tracknumber"] = ["07"]
    audio.save()

    meta = extract_audio_meta(path)

    assert meta.album == "New"
    assert meta.album_artists == ["Fallback Band"]
    assert meta.artists == ["One", "Two"]
    assert meta.title == "Title"
    assert meta.track_number == 7
    assert meta.lossless is True
    assert meta.duration_seconds == pytest.approx(0.1)


def test_albumartist_key_takes_precedence(tmp_path):
    path = tmp_path / "track.flac"
    sf.write(str(path), np.zeros((100, 1), dtype=np.int16), 44100, format="FLAC", subtype="PCM_16")
    audio = FLAC(str(path))
    audio["albumartist"] = ["Primary"]
    audio["album artist"] = ["Secondary"]
    audio.save()

    assert extract_audio_meta(path).album_artists == ["Primary"]


def test_untagged_file_has_empty_fields(tmp_path):
    path = write_wav(tmp_path / "plain.wav", sine_frames(100, channels=1))

    meta = extract_audio_meta(path)

    assert meta.album is None
    assert meta.artists == []
    assert meta.track_number is None
    assert meta.peaks is not None


def test_unsupported_file_yields_empty_meta(tmp_path):
    path = tmp_path / "notes.mp3"
    path.write_text("not audio at all", encoding="utf-8")

    meta = extract_audio_meta(path)

    assert meta == AudioMeta()
    assert meta.lossless is False
    assert meta.peaks is None


def test_ffmpeg_path_reaches_ffmpeg_decoded_codecs(tmp_path, monkeypatch):
    seen = []

    def recording_decode(path, ffmpeg_path=None):
        seen.append(ffmpeg_path)
        return None

    alac = replace(CODECS[SourceFormat.ALAC], decode=recording_decode, read_tags=lambda path: TagFields())
    monkeypatch.setitem(CODECS, SourceFormat.ALAC, alac)
    path = tmp_path / "song.m4a"
    path.write_bytes(b"")

    meta = extract_audio_meta(path, SourceFormat.ALAC, ffmpeg_path="/opt/ffmpeg/bin/ffmpeg")

    assert seen == ["/opt/ffmpeg/bin/ffmpeg"]
    assert meta.lossless is True
    assert meta.duration_seconds == 0.0
    assert meta.peaks is None


def test_only_ffmpeg_decoded_codecs_take_a_binary_path():
    assert {fmt for fmt, codec in CODECS.items() if codec.uses_ffmpeg} == {SourceFormat.ALAC}


def test_audio_meta_dict_form():
    meta = AudioMeta(album="A", artists=["B"], track_number=2, lossless=True, duration_seconds=1.5, peaks=[0.1, 0.2])

    assert AudioMeta.from_dict(meta.to_dict()) == meta
    assert AudioMeta.from_dict(AudioMeta().to_dict()).peaks is None
