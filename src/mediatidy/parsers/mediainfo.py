"""Parser for MediaInfo XML output.

Produced by ``mediainfo --Output=XML <file>``. MediaInfo identifies tracks
by ``ID`` (the container track id, possibly suffixed, e.g. ``3-CC1``) and
``StreamOrder``; neither matches ffprobe or mkvmerge numbering.
"""

import re
import xml.etree.ElementTree as ET
from datetime import timedelta
from typing import Optional

from mediatidy.errors import ParseError
from mediatidy.models.media import MediaInfo
from mediatidy.models.track import ParserType, TrackInfo, TrackKind
from mediatidy.utils.language import normalize_language
from mediatidy.utils.logger import get_logger

logger = get_logger(__name__)

TRACK_TYPES = {
    "video": TrackKind.VIDEO,
    "audio": TrackKind.AUDIO,
    "text": TrackKind.SUBTITLE,
}

_LEADING_INT = re.compile(r"^\s*(\d+)")


def _strip_namespaces(root: ET.Element) -> None:
    for element in root.iter():
        if "}" in element.tag:
            element.tag = element.tag.split("}", 1)[1]


def _text(track: ET.Element, name: str) -> Optional[str]:
    element = track.find(name)
    if element is None or element.text is None:
        return None
    value = element.text.strip()
    return value or None


def _leading_int(value: Optional[str]) -> Optional[int]:
    """Integer prefix of values like '3' or '3-CC1'."""
    if not value:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def _parse_track(track: ET.Element, kind: TrackKind) -> TrackInfo:
    raw_id = _text(track, "ID")
    track_id = _leading_int(raw_id)
    if track_id is None:
        raise ParseError(f"{kind.value} track without ID: {raw_id!r}", ParserType.MEDIAINFO.value)

    track_format = _text(track, "Format")
    if not track_format:
        raise ParseError(f"Track {raw_id} has no format", ParserType.MEDIAINFO.value)
    codec = _text(track, "CodecID") or "Unknown"

    has_errors = False
    language = _text(track, "Language")
    lookup = normalize_language(language)
    if not lookup.valid:
        has_errors = True
        logger.warning(
            "Invalid language", parser=ParserType.MEDIAINFO.value, track_id=raw_id, language=language
        )

    if (
        kind is TrackKind.SUBTITLE
        and codec.upper() == "S_VOBSUB"
        and not _text(track, "MuxingMode")
    ):
        # Players hang on VOBSUB without zlib muxing mode, remuxing does not fix it
        has_errors = True
        logger.warning(
            "MuxingMode not specified for S_VOBSUB codec",
            parser=ParserType.MEDIAINFO.value,
            track_id=raw_id,
        )

    stream_order = _leading_int(_text(track, "StreamOrder"))

    return TrackInfo(
        kind=kind,
        parser=ParserType.MEDIAINFO,
        format=track_format,
        codec=codec,
        id=track_id,
        number=stream_order if stream_order is not None else track_id,
        language=lookup.code,
        title=_text(track, "Title"),
        default=(_text(track, "Default") or "").lower() == "yes",
        has_errors=has_errors,
        has_tags=track.find("extra") is not None,
    )


def _parse_duration(value: Optional[str]) -> timedelta:
    try:
        return timedelta(seconds=float(value)) if value else timedelta(0)
    except (ValueError, OverflowError):
        return timedelta(0)


def parse_mediainfo_xml(text: str) -> MediaInfo:
    """Build a MediaInfo from MediaInfo XML.

    Args:
        text: Raw XML printed by mediainfo

    Returns:
        MediaInfo tagged with ParserType.MEDIAINFO

    Raises:
        ParseError: If the XML is malformed or contains no tracks
    """
    try:
        root = ET.fromstring(text)
    except (TypeError, ET.ParseError) as e:
        raise ParseError(f"Invalid XML: {e}", ParserType.MEDIAINFO.value) from e

    _strip_namespaces(root)
    media = root.find("media")
    tracks = media.findall("track") if media is not None else []
    if not tracks:
        raise ParseError("No tracks found", ParserType.MEDIAINFO.value)

    media_info = MediaInfo(parser=ParserType.MEDIAINFO)
    general = None
    for track in tracks:
        track_type = (track.get("type") or "").lower()

        if track_type == "general":
            general = track
            continue
        if track_type == "menu":
            media_info.chapters += 1
            continue
        if track_type not in TRACK_TYPES:
            continue

        kind = TRACK_TYPES[track_type]
        raw_id = _text(track, "ID") or ""

        # Sub-streams of a parent audio track, e.g. 0-1
        if kind is TrackKind.AUDIO and "-" in raw_id and not _text(track, "CodecID"):
            logger.warning(
                "Skipping audio sub-track", parser=ParserType.MEDIAINFO.value, track_id=raw_id
            )
            continue

        media_info.add(_parse_track(track, kind))

    media_info.remove_cover_art()

    if media_info.count == 0:
        raise ParseError("No media tracks found", ParserType.MEDIAINFO.value)

    media_info.roll_up_errors()

    if general is not None:
        media_info.container = _text(general, "Format")
        media_info.duration = _parse_duration(_text(general, "Duration"))
        media_info.has_tags = general.find("extra") is not None or bool(_text(general, "Title"))

        if not media_info.is_matroska():
            media_info.has_errors = True
            logger.warning(
                "Container type is not Matroska",
                parser=ParserType.MEDIAINFO.value,
                container=media_info.container,
            )

    return media_info
