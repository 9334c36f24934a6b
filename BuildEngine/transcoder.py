"""
Transcoder - Drive ffmpeg to produce delivery formats.

Command layout:
  ffmpeg -y -i <input> [tag flags] [encoder args] <output>

Tag flags depend on whether the transcode copies the source's tags or
writes an explicit TagMapping:
- copy: Ogg Vorbis and Opus sources keep their tags on the audio stream, so
  they need -map_metadata 0:s:a:0 when going to any other family
- mapping: all source tags are dropped (-map_metadata -1), the mapped fields
  are written with -metadata, and embedded pictures are dropped (-vn)
- AAC and AIFF muxers only write ID3v2 tags when asked (-write_id3v2 1)

Transcodes block their worker until ffmpeg exits; there is no timeout.
"""

import logging
import subprocess
from enum import Enum
from pathlib import Path
from typing import Optional

from AudioDecoder import SourceFormat, find_ffmpeg

from .audio_format import AudioFormat, AudioFormatFamily
from .tag_mapping import TagMapping

logger = logging.getLogger(__name__)

# Families that keep tags on the stream rather than the container
STREAM_TAG_FAMILIES = {AudioFormatFamily.OGG_VORBIS, AudioFormatFamily.OPUS}

# Muxers that need an explicit request to write ID3v2 tags
ID3V2_OPT_IN_FAMILIES = {AudioFormatFamily.AAC, AudioFormatFamily.AIFF}


class TranscodeFailure(Enum):
    LAUNCH = "launch"  # ffmpeg could not be started
    EXIT = "exit"  # ffmpeg ran and returned a non-zero exit code


class TranscodeError(Exception):
    """A transcode failed. Carries whatever ffmpeg printed."""

    def __init__(
        self,
        failure: TranscodeFailure,
        message: str,
        returncode: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ):
        super().__init__(message)
        self.failure = failure
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    def details(self) -> str:
        """Message plus captured output, for build error reports."""
        if self.failure == TranscodeFailure.LAUNCH:
            return str(self)
        return f"{self}\n\nstderr: {self.stderr}\n\nstdout: {self.stdout}"


def build_command(
    ffmpeg: str,
    input_path: str | Path,
    output_path: str | Path,
    target_format: AudioFormat,
    tag_mapping: Optional[TagMapping] = None,
    source_format: Optional[SourceFormat] = None,
) -> list[str]:
    """Assemble the ffmpeg argument list for one transcode."""
    cmd = [ffmpeg, "-y", "-i", str(input_path)]
    target_family = target_format.family

    if tag_mapping is None:
        if source_format is not None:
            source_family = AudioFormatFamily.of_source(source_format)
            if source_family in STREAM_TAG_FAMILIES and target_family not in STREAM_TAG_FAMILIES:
                cmd += ["-map_metadata", "0:s:a:0"]
    else:
        cmd += ["-map_metadata", "-1"]
        if tag_mapping.album is not None:
            cmd += ["-metadata", f"album={tag_mapping.album}"]
        if tag_mapping.album_artist is not None:
            cmd += ["-metadata", f"album_artist={tag_mapping.album_artist}"]
        if tag_mapping.artist is not None:
            cmd += ["-metadata", f"artist={tag_mapping.artist}"]
        cmd.append("-vn")
        if tag_mapping.title is not None:
            cmd += ["-metadata", f"title={tag_mapping.title}"]
        if tag_mapping.track is not None:
            cmd += ["-metadata", f"track={tag_mapping.track}"]

    if target_family in ID3V2_OPT_IN_FAMILIES:
        cmd += ["-write_id3v2", "1"]

    cmd += target_format.encoder_args
    cmd.append(str(output_path))
    return cmd


def transcode(
    input_path: str | Path,
    output_path: str | Path,
    target_format: AudioFormat,
    tag_mapping: Optional[TagMapping] = None,
    source_format: Optional[SourceFormat] = None,
    ffmpeg_path: Optional[str] = None,
) -> None:
    """
    Transcode one file, blocking until ffmpeg exits.

    Args:
        input_path: Source audio file
        output_path: File to write (overwritten if present)
        target_format: Delivery format
        tag_mapping: Tags to write, or None to copy the source's tags
        source_format: Source format, used to pick tag copy flags
        ffmpeg_path: Optional path to ffmpeg binary

    Raises:
        TranscodeError: ffmpeg could not be launched or exited with an error
    """
    ffmpeg = ffmpeg_path or find_ffmpeg() or "ffmpeg"
    output_path = Path(output_path)
    cmd = build_command(ffmpeg, input_path, output_path, target_format, tag_mapping, source_format)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",  # Handle non-UTF8 bytes gracefully
        )
    except OSError as e:
        raise TranscodeError(
            TranscodeFailure.LAUNCH,
            f"The ffmpeg child process could not be executed: {e}",
        ) from e

    if result.returncode != 0:
        raise TranscodeError(
            TranscodeFailure.EXIT,
            f"ffmpeg exited with code {result.returncode} transcoding {Path(input_path).name} to {target_format}",
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    logger.info(f"Transcoded {Path(input_path).name} → {output_path.name} ({target_format})")
