"""Partition a file's tracks into selected and not selected sets."""

from typing import Callable, Iterable, Union

from mediatidy.errors import PreconditionError
from mediatidy.models.media import MediaInfo
from mediatidy.models.track import ParserType, TrackInfo, TrackState
from mediatidy.utils.logger import get_logger

logger = get_logger(__name__)

Selector = Union[bool, Callable[[TrackInfo], bool]]
TrackSource = Union[MediaInfo, TrackInfo, Iterable[TrackInfo]]


class SelectMediaInfo:
    """Two disjoint MediaInfo views over the tracks of one parser.

    Tracks are owned by an arena keyed by ``TrackInfo.uid``; the selected and
    not selected partitions are insertion-ordered key sets over the arena, so
    every known track is a member of exactly one partition.
    """

    def __init__(self, parser: ParserType, media_info: MediaInfo | None = None, select: Selector | None = None):
        """Initialize selection.

        Args:
            parser: Parser tag every added track must carry
            media_info: Optional source to add immediately
            select: Predicate or boolean for the initial add
        """
        self.parser = parser
        self._arena: dict[int, TrackInfo] = {}
        # dicts keep insertion order, values are unused
        self._selected: dict[int, None] = {}
        self._not_selected: dict[int, None] = {}

        if media_info is not None:
            if select is None:
                raise PreconditionError("A selector is required when a source is given")
            self.add(media_info, select)

    @classmethod
    def from_media_info(cls, media_info: MediaInfo, select: Selector) -> "SelectMediaInfo":
        """Create a selection over every track of a MediaInfo."""
        return cls(media_info.parser, media_info, select)

    def _check_parser(self, parser: ParserType) -> None:
        if parser != self.parser:
            raise PreconditionError(
                f"Cannot select {parser.value} tracks in a {self.parser.value} selection"
            )

    def _iter_tracks(self, source: TrackSource) -> Iterable[TrackInfo]:
        if isinstance(source, MediaInfo):
            self._check_parser(source.parser)
            return list(source.all_tracks())
        if isinstance(source, TrackInfo):
            return [source]
        return list(source)

    @staticmethod
    def _decide(track: TrackInfo, select: Selector) -> bool:
        if isinstance(select, bool):
            return select
        return bool(select(track))

    def _partition(self, select: bool) -> dict[int, None]:
        return self._selected if select else self._not_selected

    def add(self, source: TrackSource, select: Selector) -> None:
        """Add tracks to the partition chosen by a predicate or boolean.

        Adding a track that is already known re-assigns it.

        Raises:
            PreconditionError: If a track comes from a different parser
        """
        for track in self._iter_tracks(source):
            self._check_parser(track.parser)
            self._arena[track.uid] = track
            chosen = self._decide(track, select)
            self._partition(not chosen).pop(track.uid, None)
            self._partition(chosen)[track.uid] = None

    def move(self, source: TrackSource, select: Selector) -> None:
        """Re-assign tracks to the partition chosen by a predicate or boolean.

        Tracks not yet known are inserted.
        """
        for track in self._iter_tracks(source):
            self._check_parser(track.parser)
            if track.uid not in self._arena:
                logger.debug("Moving unknown track, inserting", track_id=track.id, kind=track.kind.value)
                self._arena[track.uid] = track
            self._selected.pop(track.uid, None)
            self._not_selected.pop(track.uid, None)
            self._partition(self._decide(track, select))[track.uid] = None

    def is_selected(self, track: TrackInfo) -> bool:
        """Whether a track is in the selected partition."""
        return track.uid in self._selected

    def _view(self, keys: dict[int, None]) -> MediaInfo:
        media_info = MediaInfo(parser=self.parser)
        for uid in keys:
            media_info.add(self._arena[uid])
        return media_info

    @property
    def selected(self) -> MediaInfo:
        """Selected tracks as a MediaInfo."""
        return self._view(self._selected)

    @property
    def not_selected(self) -> MediaInfo:
        """Not selected tracks as a MediaInfo."""
        return self._view(self._not_selected)

    def set_state(self, selected_state: TrackState, not_selected_state: TrackState) -> None:
        """Assign a disposition to every track of each partition."""
        for uid in self._selected:
            self._arena[uid].state = selected_state
        for uid in self._not_selected:
            self._arena[uid].state = not_selected_state

    def log_state(self, selected_label: str, not_selected_label: str) -> None:
        """Log the tracks of both partitions."""
        self.selected.log_tracks(selected_label)
        self.not_selected.log_tracks(not_selected_label)

    def __len__(self) -> int:
        return len(self._arena)
