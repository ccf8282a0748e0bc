"""Canonical media model shared by all probe parsers."""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Iterator, Optional

from mediatidy.errors import PreconditionError
from mediatidy.models.track import ParserType, TrackInfo, TrackKind
from mediatidy.utils.logger import get_logger

logger = get_logger(__name__)

# Image codecs used for embedded cover art
COVER_ART_CODECS = ("MJPEG", "JPEG", "PNG", "BMP", "GIF", "WEBP")


@dataclass
class MediaInfo:
    """Tracks and container facts reported by one probing tool."""

    parser: ParserType
    video: list[TrackInfo] = field(default_factory=list)
    audio: list[TrackInfo] = field(default_factory=list)
    subtitle: list[TrackInfo] = field(default_factory=list)
    container: Optional[str] = None
    attachments: int = 0
    chapters: int = 0
    duration: timedelta = timedelta(0)
    has_errors: bool = False
    has_tags: bool = False

    def tracks(self, kind: TrackKind) -> list[TrackInfo]:
        """Return the track list for a variant."""
        match kind:
            case TrackKind.VIDEO:
                return self.video
            case TrackKind.AUDIO:
                return self.audio
            case TrackKind.SUBTITLE:
                return self.subtitle
        raise ValueError(f"Unknown track kind: {kind}")

    def all_tracks(self) -> Iterator[TrackInfo]:
        """Iterate over video, audio and subtitle tracks in that order."""
        for kind in TrackKind:
            yield from self.tracks(kind)

    def add(self, track: TrackInfo) -> None:
        """Append a track to the list of its variant.

        Raises:
            PreconditionError: If the track was produced by a different parser
        """
        if track.parser != self.parser:
            raise PreconditionError(
                f"Cannot add {track.parser.value} track to {self.parser.value} media info"
            )
        self.tracks(track.kind).append(track)

    @property
    def count(self) -> int:
        """Total number of tracks."""
        return len(self.video) + len(self.audio) + len(self.subtitle)

    def is_matroska(self) -> bool:
        """Whether the reported container is Matroska (or its WebM subset)."""
        if not self.container:
            return False
        return "matroska" in self.container.lower()

    def roll_up_errors(self) -> bool:
        """Set has_errors if any track has errors and return the result."""
        if any(track.has_errors for track in self.all_tracks()):
            self.has_errors = True
        return self.has_errors

    def remove_cover_art(self) -> int:
        """Drop image tracks that only carry cover art.

        Returns:
            Number of tracks removed
        """
        kept = []
        removed = 0
        for track in self.video:
            name = f"{track.format} {track.codec}".upper()
            if any(codec in name for codec in COVER_ART_CODECS):
                logger.debug(
                    "Removing cover art track",
                    parser=self.parser.value,
                    track_id=track.id,
                    codec=track.codec,
                )
                removed += 1
            else:
                kept.append(track)
        self.video = kept
        return removed

    def log_tracks(self, prefix: str) -> None:
        """Log every track with a common prefix."""
        for track in self.all_tracks():
            logger.info(prefix, parser=self.parser.value, **track.describe())

    def __str__(self) -> str:
        """Human-readable representation."""
        return (
            f"{self.parser.value}: {self.container or 'unknown'} container, "
            f"{len(self.video)} video, {len(self.audio)} audio, "
            f"{len(self.subtitle)} subtitle tracks"
        )
