import os

import pytest

from BuildEngine import SourceFileSignature


def test_capture_is_stable_for_unchanged_file(catalog_dir):
    (catalog_dir / "album").mkdir()
    (catalog_dir / "album" / "track.wav").write_bytes(b"x" * 100)

    first = SourceFileSignature.capture(catalog_dir, "album/track.wav")
    second = SourceFileSignature.capture(catalog_dir, "album/track.wav")

    assert first == second
    assert hash(first) == hash(second)
    assert first.path == "album/track.wav"
    assert first.size == 100


def test_size_change_changes_signature(catalog_dir):
    path = catalog_dir / "track.wav"
    path.write_bytes(b"x" * 100)
    before = SourceFileSignature.capture(catalog_dir, "track.wav")

    stat = path.stat()
    path.write_bytes(b"x" * 101)
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns))
    after = SourceFileSignature.capture(catalog_dir, "track.wav")

    assert before.modified == after.modified
    assert before != after


def test_mtime_change_changes_signature(catalog_dir):
    path = catalog_dir / "track.wav"
    path.write_bytes(b"x" * 100)
    before = SourceFileSignature.capture(catalog_dir, "track.wav")

    os.utime(path, ns=(before.modified, before.modified + 1_000_000_000))
    after = SourceFileSignature.capture(catalog_dir, "track.wav")

    assert before.size == after.size
    assert before != after


def test_missing_file_raises(catalog_dir):
    with pytest.raises(FileNotFoundError):
        SourceFileSignature.capture(catalog_dir, "nope.flac")


def test_dict_form_restores_equal_signature(catalog_dir):
    (catalog_dir / "a.mp3").write_bytes(b"abc")
    signature = SourceFileSignature.capture(catalog_dir, "a.mp3")

    assert SourceFileSignature.from_dict(signature.to_dict()) == signature


def test_hash_key_is_deterministic_and_url_safe():
    a = SourceFileSignature("a/b.flac", 10, 123)
    b = SourceFileSignature("a/b.flac", 10, 123)
    c = SourceFileSignature("a/b.flac", 11, 123)

    assert a.hash_key() == b.hash_key()
    assert a.hash_key() != c.hash_key()
    assert all(ch.isalnum() or ch in "-_" for ch in a.hash_key())
