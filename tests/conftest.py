"""Shared pytest fixtures for MediaTidy tests."""

import json
from pathlib import Path
from typing import Optional, Sequence

import pytest

from mediatidy.config import Config, ExecutionConfig, LoggingConfig
from mediatidy.tools import ToolContext, ToolResult


class FakeInvoker:
    """ToolInvoker that records calls instead of running programs.

    Exit codes are scripted per program as a list consumed in call order;
    once a script runs out the program succeeds. Conversion commands write
    a small file at their output path, even when they fail, the way a tool
    interrupted halfway leaves a partial file behind.
    """

    def __init__(self):
        self.calls: list[tuple[str, list[str]]] = []
        self.exit_codes: dict[str, list[int]] = {}
        self.outputs: dict[str, str] = {}

    def script(self, program: str, *exit_codes: int) -> None:
        self.exit_codes.setdefault(program, []).extend(exit_codes)

    def respond(self, program: str, output: str) -> None:
        self.outputs[program] = output

    def programs(self) -> list[str]:
        return [program for program, _ in self.calls]

    def _output_path(self, program: str, args: list[str]) -> Optional[Path]:
        if "--output" in args:
            return Path(args[args.index("--output") + 1])
        if program == "ffmpeg" and args:
            return Path(args[-1])
        return None

    def run(self, program: str, args: Sequence[str]) -> ToolResult:
        args = list(args)
        self.calls.append((program, args))

        codes = self.exit_codes.get(program)
        exit_code = codes.pop(0) if codes else 0

        output_path = self._output_path(program, args)
        if output_path is not None:
            output_path.write_bytes(b"matroska")

        return ToolResult(exit_code=exit_code, output=self.outputs.get(program, ""))


@pytest.fixture
def default_config():
    """Create a default configuration for testing."""
    return Config(logging=LoggingConfig(output=""))


@pytest.fixture
def dry_run_config():
    """Create a dry run configuration."""
    return Config(logging=LoggingConfig(output=""), execution=ExecutionConfig(dry_run=True))


@pytest.fixture
def invoker():
    """Create a fake tool invoker."""
    return FakeInvoker()


@pytest.fixture
def tools(default_config, invoker):
    """Create a tool context backed by the fake invoker."""
    return ToolContext.from_config(default_config, invoker)


@pytest.fixture
def media_file(tmp_path):
    """Create a factory for placeholder media files."""

    def _make(name: str) -> Path:
        path = tmp_path / name
        path.write_bytes(b"\x1a\x45\xdf\xa3")
        return path

    return _make


def mkvmerge_track(track_id, track_type, codec, codec_id, language="eng", **properties):
    """Build one track entry of mkvmerge identification JSON."""
    return {
        "id": track_id,
        "type": track_type,
        "codec": codec,
        "properties": {
            "number": track_id + 1,
            "codec_id": codec_id,
            "language": language,
            **properties,
        },
    }


def mkvmerge_json(tracks, container_type="Matroska", duration=None, **extra) -> str:
    """Build mkvmerge identification JSON."""
    properties = {} if duration is None else {"duration": duration}
    document = {
        "container": {"type": container_type, "recognized": True, "properties": properties},
        "tracks": tracks,
        "attachments": [],
        "chapters": [],
        "global_tags": [],
        "track_tags": [],
    }
    document.update(extra)
    return json.dumps(document)


@pytest.fixture
def make_track():
    """Create a factory for mkvmerge track entries."""
    return mkvmerge_track


@pytest.fixture
def make_mkvmerge_json():
    """Create a factory for mkvmerge identification JSON."""
    return mkvmerge_json


@pytest.fixture
def sample_mkvmerge_json():
    """mkvmerge output for a movie with English, German and unknown tracks."""
    return mkvmerge_json(
        [
            mkvmerge_track(0, "video", "AVC/H.264/MPEG-4p10", "V_MPEG4/ISO/AVC", default_track=True),
            mkvmerge_track(1, "audio", "AC-3", "A_AC3", default_track=True),
            mkvmerge_track(2, "audio", "DTS", "A_DTS", language="ger"),
            mkvmerge_track(3, "subtitles", "SubRip/SRT", "S_TEXT/UTF8"),
            mkvmerge_track(4, "subtitles", "SubRip/SRT", "S_TEXT/UTF8", language="fre"),
            mkvmerge_track(5, "subtitles", "SubRip/SRT", "S_TEXT/UTF8", language="und"),
        ],
        duration=5_400_000_000_000,
    )


@pytest.fixture
def sample_ffprobe_json():
    """ffprobe output for an MP4 with cover art."""
    return json.dumps(
        {
            "streams": [
                {
                    "index": 0,
                    "codec_name": "h264",
                    "codec_long_name": "H.264 / AVC / MPEG-4 AVC / MPEG-4 part 10",
                    "codec_type": "video",
                    "disposition": {"default": 1, "attached_pic": 0},
                    "tags": {"language": "und", "handler_name": "VideoHandler"},
                },
                {
                    "index": 1,
                    "codec_name": "aac",
                    "codec_long_name": "AAC (Advanced Audio Coding)",
                    "codec_type": "audio",
                    "disposition": {"default": 1, "attached_pic": 0},
                    "tags": {"language": "eng", "title": "Stereo"},
                },
                {
                    "index": 2,
                    "codec_name": "mjpeg",
                    "codec_long_name": "Motion JPEG",
                    "codec_type": "video",
                    "disposition": {"default": 0, "attached_pic": 1},
                },
            ],
            "chapters": [{"id": 0}, {"id": 1}],
            "format": {
                "format_name": "mov,mp4,m4a,3gp,3g2,mj2",
                "duration": "1325.500000",
                "tags": {"major_brand": "isom", "encoder": "Lavf58.76.100"},
            },
        }
    )


@pytest.fixture
def sample_mediainfo_xml():
    """mediainfo output for an MKV with a VOBSUB subtitle."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<MediaInfo xmlns="https://mediaarea.net/mediainfo" version="2.0">
  <creatingLibrary version="23.04">MediaInfoLib</creatingLibrary>
  <media ref="/media/movie.mkv">
    <track type="General">
      <Format>Matroska</Format>
      <Duration>5400.000</Duration>
      <Title>Movie</Title>
    </track>
    <track type="Video">
      <StreamOrder>0</StreamOrder>
      <ID>1</ID>
      <Format>AVC</Format>
      <CodecID>V_MPEG4/ISO/AVC</CodecID>
      <Default>Yes</Default>
    </track>
    <track type="Audio">
      <StreamOrder>1</StreamOrder>
      <ID>2</ID>
      <Format>AC-3</Format>
      <CodecID>A_AC3</CodecID>
      <Language>en</Language>
      <Default>Yes</Default>
    </track>
    <track type="Audio">
      <ID>2-1</ID>
      <Format>AC-3</Format>
    </track>
    <track type="Text">
      <StreamOrder>2</StreamOrder>
      <ID>3</ID>
      <Format>VobSub</Format>
      <CodecID>S_VOBSUB</CodecID>
      <Language>de</Language>
      <Default>No</Default>
    </track>
    <track type="Menu">
      <extra><_00_00_00_000>Chapter 1</_00_00_00_000></extra>
    </track>
  </media>
</MediaInfo>
"""
