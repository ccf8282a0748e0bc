"""Probe output parsers.

Each parser turns one tool's raw text into a MediaInfo tagged with that
tool's ParserType. Parsers are pure functions and never run the tools.
"""

from typing import Callable

from mediatidy.models.media import MediaInfo
from mediatidy.models.track import ParserType
from mediatidy.parsers.ffprobe import parse_ffprobe_json
from mediatidy.parsers.mediainfo import parse_mediainfo_xml
from mediatidy.parsers.mkvmerge import parse_mkvmerge_json

PARSERS: dict[ParserType, Callable[[str], MediaInfo]] = {
    ParserType.MKVMERGE: parse_mkvmerge_json,
    ParserType.FFPROBE: parse_ffprobe_json,
    ParserType.MEDIAINFO: parse_mediainfo_xml,
}


def parse(parser: ParserType, text: str) -> MediaInfo:
    """Parse raw probe output with the parser for a tool."""
    return PARSERS[parser](text)


__all__ = [
    "PARSERS",
    "parse",
    "parse_ffprobe_json",
    "parse_mediainfo_xml",
    "parse_mkvmerge_json",
]
