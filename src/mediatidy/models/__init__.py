"""Data models for MediaTidy."""

from mediatidy.models.file import ConversionResult, ProcessResult
from mediatidy.models.media import MediaInfo
from mediatidy.models.track import ParserType, TrackInfo, TrackKind, TrackState

__all__ = [
    "ConversionResult",
    "MediaInfo",
    "ParserType",
    "ProcessResult",
    "TrackInfo",
    "TrackKind",
    "TrackState",
]
