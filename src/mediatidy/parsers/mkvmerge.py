"""Parser for mkvmerge JSON identification output.

Produced by ``mkvmerge --identify <file> --identification-format json``.
Track ``id`` is the value mkvmerge expects in ``--audio-tracks`` and friends;
``number`` is the Matroska track number mkvpropedit uses.
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

TRACK_TYPES = {
    "video": TrackKind.VIDEO,
    "audio": TrackKind.AUDIO,
    "subtitles": TrackKind.SUBTITLE,
}


def _parse_track(track: dict[str, Any], container_type: str) -> TrackInfo:
    properties = track.get("properties") or {}
    track_id = track.get("id")
    if not isinstance(track_id, int):
        raise ParseError(f"Track without integer id: {track_id!r}", ParserType.MKVMERGE.value)

    codec = properties.get("codec_id")
    if not codec:
        # Only Matroska guarantees a codec id
        if container_type.lower() == "matroska":
            raise ParseError(f"Track {track_id} has no codec id", ParserType.MKVMERGE.value)
        codec = "Unknown"

    track_format = track.get("codec")
    if not track_format:
        raise ParseError(f"Track {track_id} has no codec", ParserType.MKVMERGE.value)

    has_errors = False
    language = properties.get("language")
    tag_language = properties.get("tag_language")

    # ffprobe prefers the tag language over the track language
    if language and tag_language and language.lower() != tag_language.lower():
        has_errors = True
        logger.warning(
            "Tag and track language mismatch",
            parser=ParserType.MKVMERGE.value,
            track_id=track_id,
            tag_language=tag_language,
            language=language,
        )

    lookup = normalize_language(language)
    if not lookup.valid:
        has_errors = True
        logger.warning(
            "Invalid language",
            parser=ParserType.MKVMERGE.value,
            track_id=track_id,
            language=language,
        )

    return TrackInfo(
        kind=TRACK_TYPES[track["type"]],
        parser=ParserType.MKVMERGE,
        format=track_format,
        codec=codec,
        id=track_id,
        number=int(properties.get("number", track_id)),
        language=lookup.code,
        title=properties.get("track_name") or None,
        default=bool(properties.get("default_track", False)),
        has_errors=has_errors,
        has_tags=any(
            key.startswith("tag_") and key != "tag_language" for key in properties
        ),
    )


def parse_mkvmerge_json(text: str) -> MediaInfo:
    """Build a MediaInfo from mkvmerge identification JSON.

    Args:
        text: Raw JSON printed by mkvmerge

    Returns:
        MediaInfo tagged with ParserType.MKVMERGE

    Raises:
        ParseError: If the JSON is malformed or contains no tracks
    """
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise ParseError(f"Invalid JSON: {e}", ParserType.MKVMERGE.value) from e

    if not isinstance(data, dict):
        raise ParseError("Unexpected JSON document", ParserType.MKVMERGE.value)

    tracks = data.get("tracks") or []
    if not tracks:
        raise ParseError("No tracks found", ParserType.MKVMERGE.value)

    media_info = MediaInfo(parser=ParserType.MKVMERGE)
    try:
        container = data.get("container") or {}
        container_type = str(container.get("type") or "")
        container_properties = container.get("properties") or {}

        for track in tracks:
            if track.get("type") not in TRACK_TYPES:
                logger.debug(
                    "Ignoring track type",
                    parser=ParserType.MKVMERGE.value,
                    track_type=track.get("type"),
                )
                continue
            media_info.add(_parse_track(track, container_type))

        media_info.attachments = len(data.get("attachments") or [])
        media_info.chapters = len(data.get("chapters") or [])

        # Duration is reported in nanoseconds
        duration_ns = container_properties.get("duration") or 0
        media_info.duration = timedelta(microseconds=duration_ns / 1000)
        title = container_properties.get("title")
    except (AttributeError, TypeError, ValueError, OverflowError) as e:
        raise ParseError(f"Unexpected schema: {e}", ParserType.MKVMERGE.value) from e

    media_info.remove_cover_art()
    media_info.container = container_type or None

    media_info.roll_up_errors()
    media_info.has_tags = (
        bool(data.get("global_tags"))
        or bool(data.get("track_tags"))
        or media_info.attachments > 0
        or bool(title)
        or any(track.has_tags for track in media_info.all_tracks())
    )

    if container_type.lower() != "matroska":
        media_info.has_errors = True
        logger.warning(
            "Container type is not Matroska",
            parser=ParserType.MKVMERGE.value,
            container=container_type,
        )

    return media_info
