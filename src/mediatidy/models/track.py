"""Track data models."""

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

# Process-wide source of durable track identifiers
_uid_counter = itertools.count(1)


class TrackKind(Enum):
    """Track variants handled by MediaTidy."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"


class TrackState(Enum):
    """Disposition decided for a track."""

    NONE = "none"
    KEEP = "keep"
    REMOVE = "remove"
    REMUX = "remux"
    REENCODE = "reencode"
    DEINTERLACE = "deinterlace"


class ParserType(Enum):
    """Probing tool that produced a track or media model.

    Track ``id`` and ``number`` values are only meaningful to the commands of
    the tool family that produced them.
    """

    MKVMERGE = "mkvmerge"
    FFPROBE = "ffprobe"
    MEDIAINFO = "mediainfo"


@dataclass(eq=False)
class TrackInfo:
    """Represents one audio, video or subtitle track in a media file."""

    kind: TrackKind
    parser: ParserType
    format: str  # Display codec name (e.g., "AVC", "E-AC-3")
    codec: str  # Codec identifier (e.g., "V_MPEG4/ISO/AVC")
    id: int  # Index used by the producing tool's track selection
    number: int  # Secondary index used for in-place edits
    language: str = "und"  # ISO 639-2/B language code
    title: Optional[str] = None
    default: bool = False
    state: TrackState = TrackState.NONE
    has_errors: bool = False
    has_tags: bool = False
    uid: int = field(default_factory=lambda: next(_uid_counter), repr=False)

    def __post_init__(self):
        if not self.format or not self.codec:
            raise ValueError(f"Track {self.id} requires format and codec")

    def is_language_unknown(self) -> bool:
        """Return True when the language is missing or undetermined."""
        return not self.language or self.language.lower() == "und"

    def describe(self) -> dict[str, Any]:
        """Log-friendly representation."""
        return {
            "kind": self.kind.value,
            "format": self.format,
            "codec": self.codec,
            "language": self.language,
            "id": self.id,
            "number": self.number,
            "state": self.state.value,
            "title": self.title,
            "default": self.default,
            "has_errors": self.has_errors,
        }

    def __str__(self) -> str:
        """Human-readable representation."""
        default_marker = " [DEFAULT]" if self.default else ""
        title_part = f" ({self.title})" if self.title else ""
        error_marker = " [ERRORS]" if self.has_errors else ""
        return (
            f"{self.kind.value.capitalize()} {self.id}: {self.language} "
            f"{self.format} / {self.codec}{title_part}{default_marker}{error_marker}"
        )
