"""Parser for ffprobe JSON output.

Produced by ``ffprobe -print_format json -show_streams -show_format
-show_chapters <file>``. The stream index is used for both ``id`` and
``number``; it is what ffmpeg's ``-map 0:<index>`` expects.
"""

import json
from datetime import timedelta
from typing import Any

from mediatidy.errors import ParseError
from mediatidy.models.media import MediaInfo
from mediatidy.models.track import ParserType, TrackInfo, TrackKind
from mediatidy.utils.language import normalize_language
from mediatidy.utils.logger import get_logger

logger = get_logger(__name__)

STREAM_TYPES = {
    "video": TrackKind.VIDEO,
    "audio": TrackKind.AUDIO,
    "subtitle": TrackKind.SUBTITLE,
}

# Placeholder language values seen in the wild
INVALID_LANGUAGES = {"???", "null"}

# Format tags written by muxers, not by users
MUXER_TAGS = {"encoder", "creation_time", "duration", "compatible_brands", "major_brand", "minor_version"}


def _parse_stream(stream: dict[str, Any]) -> TrackInfo:
    index = stream.get("index")
    if not isinstance(index, int):
        raise ParseError(f"Stream without integer index: {index!r}", ParserType.FFPROBE.value)

    codec_name = stream.get("codec_name")
    if not codec_name:
        raise ParseError(f"Stream {index} has no codec name", ParserType.FFPROBE.value)

    tags = stream.get("tags") or {}
    disposition = stream.get("disposition") or {}

    has_errors = False
    language = tags.get("language")
    if language and language.lower() in INVALID_LANGUAGES:
        has_errors = True
        logger.warning(
            "Invalid language", parser=ParserType.FFPROBE.value, stream=index, language=language
        )
        language = None
        code = "und"
    else:
        lookup = normalize_language(language)
        code = lookup.code
        if not lookup.valid:
            has_errors = True
            logger.warning(
                "Invalid language",
                parser=ParserType.FFPROBE.value,
                stream=index,
                language=language,
            )

    return TrackInfo(
        kind=STREAM_TYPES[stream["codec_type"]],
        parser=ParserType.FFPROBE,
        format=codec_name,
        codec=stream.get("codec_long_name") or codec_name,
        id=index,
        number=index,
        language=code,
        title=tags.get("title") or None,
        default=bool(disposition.get("default", 0)),
        has_errors=has_errors,
        has_tags=any(key.lower() not in ("language", "title") for key in tags),
    )


def _parse_duration(value: Any) -> timedelta:
    try:
        return timedelta(seconds=float(value))
    except (TypeError, ValueError, OverflowError):
        return timedelta(0)


def parse_ffprobe_json(text: str) -> MediaInfo:
    """Build a MediaInfo from ffprobe JSON.

    Args:
        text: Raw JSON printed by ffprobe

    Returns:
        MediaInfo tagged with ParserType.FFPROBE

    Raises:
        ParseError: If the JSON is malformed or contains no streams
    """
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise ParseError(f"Invalid JSON: {e}", ParserType.FFPROBE.value) from e

    if not isinstance(data, dict):
        raise ParseError("Unexpected JSON document", ParserType.FFPROBE.value)

    streams = data.get("streams") or []
    if not streams:
        raise ParseError("No streams found", ParserType.FFPROBE.value)

    media_info = MediaInfo(parser=ParserType.FFPROBE)
    try:
        for stream in streams:
            codec_type = stream.get("codec_type")
            disposition = stream.get("disposition") or {}

            # Cover art shows up as a video stream with attached_pic set
            if codec_type == "attachment" or disposition.get("attached_pic"):
                media_info.attachments += 1
                continue

            if codec_type not in STREAM_TYPES:
                logger.debug(
                    "Ignoring stream type", parser=ParserType.FFPROBE.value, codec_type=codec_type
                )
                continue

            media_info.add(_parse_stream(stream))

        format_info = data.get("format") or {}
        format_tags = format_info.get("tags") or {}
        container = format_info.get("format_name")
        media_info.container = str(container) if container else None
        media_info.chapters = len(data.get("chapters") or [])
        media_info.duration = _parse_duration(format_info.get("duration"))
        has_tags = any(str(key).lower() not in MUXER_TAGS for key in format_tags)
    except (AttributeError, TypeError, ValueError) as e:
        raise ParseError(f"Unexpected schema: {e}", ParserType.FFPROBE.value) from e

    media_info.roll_up_errors()
    media_info.has_tags = has_tags

    if not media_info.is_matroska():
        media_info.has_errors = True
        logger.warning(
            "Container type is not Matroska",
            parser=ParserType.FFPROBE.value,
            container=media_info.container,
        )

    return media_info
