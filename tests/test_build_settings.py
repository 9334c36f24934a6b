import json

import pytest

from BuildEngine import AudioFormat, Build, BuildSettings, CacheOptimization, DownloadGranularity, StreamingQuality


def test_missing_file_gives_defaults(tmp_path):
    settings = BuildSettings.load(tmp_path / "nope.json")
    assert settings == BuildSettings()


def test_save_and_load(tmp_path):
    path = tmp_path / "conf" / "settings.json"
    settings = BuildSettings(catalog_dir="/music", cache_optimization="manual", download_formats=["flac", "mp3"])
    settings.save(path)

    assert BuildSettings.load(path) == settings
    assert not path.with_name("settings.json.tmp").exists()


def test_load_ignores_unknown_and_mistyped_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"catalog_dir": "/music", "max_workers": "four", "theme": "dark"}), encoding="utf-8")

    settings = BuildSettings.load(path)

    assert settings.catalog_dir == "/music"
    assert settings.max_workers == 0
    assert not hasattr(settings, "theme")


def test_load_corrupt_json_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert BuildSettings.load(path) == BuildSettings()


def test_download_formats_resolved_in_order():
    settings = BuildSettings(download_formats=["flac", "opus", "flac", "mp3"])
    assert settings.resolved_download_formats() == [AudioFormat.FLAC, AudioFormat.OPUS_128, AudioFormat.MP3_VBR_V0]


def test_unknown_download_format():
    with pytest.raises(ValueError):
        BuildSettings(download_formats=["wma"]).resolved_download_formats()


def test_build_from_settings(tmp_path):
    build = Build.from_settings(
        BuildSettings(catalog_dir=str(tmp_path), cache_optimization="immediate", streaming_quality="frugal", max_workers=3)
    )

    assert build.cache_dir == tmp_path.resolve() / ".catalog_cache"
    assert build.cache_optimization == CacheOptimization.IMMEDIATE
    assert build.streaming_quality == StreamingQuality.FRUGAL
    assert build.max_workers == 3
    assert build.ffmpeg_path is None
    assert build.download_granularity == DownloadGranularity.ENTIRE_RELEASE


def test_auto_workers_capped():
    build = Build(catalog_dir=".", cache_dir="cache")
    assert 1 <= build.max_workers <= 8


def test_build_requires_catalog_and_valid_policy(tmp_path):
    with pytest.raises(ValueError):
        Build.from_settings(BuildSettings())
    with pytest.raises(ValueError):
        Build.from_settings(BuildSettings(catalog_dir=str(tmp_path), cache_optimization="sometimes"))


@pytest.mark.parametrize(
    "key, archives, single_files",
    [
        ("entire_release", True, False),
        ("single_files", False, True),
        (" All_Options ", True, True),
    ],
)
def test_download_granularity(tmp_path, key, archives, single_files):
    build = Build.from_settings(BuildSettings(catalog_dir=str(tmp_path), download_granularity=key))

    assert build.download_granularity.archives is archives
    assert build.download_granularity.single_files is single_files


def test_unknown_download_granularity(tmp_path):
    with pytest.raises(ValueError, match="granularity"):
        Build.from_settings(BuildSettings(catalog_dir=str(tmp_path), download_granularity="per_track"))
