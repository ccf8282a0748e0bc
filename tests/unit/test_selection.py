"""Unit tests for track selection partitions."""

import pytest

from mediatidy.core.selection import SelectMediaInfo
from mediatidy.errors import PreconditionError
from mediatidy.models.media import MediaInfo
from mediatidy.models.track import ParserType, TrackInfo, TrackKind, TrackState
from mediatidy.parsers import parse_ffprobe_json, parse_mkvmerge_json


def _track(kind, track_id, language="eng", parser=ParserType.MKVMERGE):
    return TrackInfo(
        kind=kind,
        parser=parser,
        format="AC-3",
        codec="A_AC3",
        id=track_id,
        number=track_id + 1,
        language=language,
    )


@pytest.fixture
def media_info(sample_mkvmerge_json):
    """Parsed mkvmerge sample with 1 video, 2 audio and 3 subtitle tracks."""
    return parse_mkvmerge_json(sample_mkvmerge_json)


def _is_english(track):
    return track.language == "eng"


class TestSelectMediaInfo:
    """Test SelectMediaInfo partitioning."""

    def test_every_track_in_exactly_one_partition(self, media_info):
        """Should split tracks into disjoint partitions covering all tracks."""
        selection = SelectMediaInfo.from_media_info(media_info, _is_english)

        selected = {track.uid for track in selection.selected.all_tracks()}
        not_selected = {track.uid for track in selection.not_selected.all_tracks()}

        assert selected.isdisjoint(not_selected)
        assert selected | not_selected == {track.uid for track in media_info.all_tracks()}
        assert len(selection) == media_info.count

    def test_partitions_keep_order(self, media_info):
        """Should keep the source order within each variant."""
        selection = SelectMediaInfo.from_media_info(media_info, _is_english)

        assert [track.id for track in selection.selected.video] == [0]
        assert [track.id for track in selection.selected.audio] == [1]
        assert [track.id for track in selection.selected.subtitle] == [3]
        assert [track.id for track in selection.not_selected.subtitle] == [4, 5]

    def test_boolean_selector(self, media_info):
        """Should place every track on one side for a boolean selector."""
        selection = SelectMediaInfo.from_media_info(media_info, True)

        assert selection.selected.count == media_info.count
        assert selection.not_selected.count == 0

    def test_move(self, media_info):
        """Should move tracks between partitions without duplicating them."""
        selection = SelectMediaInfo.from_media_info(media_info, _is_english)
        german = media_info.audio[1]

        selection.move(german, True)
        assert selection.is_selected(german)
        assert [track.id for track in selection.selected.audio] == [1, 2]
        assert selection.not_selected.audio == []

        selection.move(german, False)
        assert not selection.is_selected(german)
        assert [track.id for track in selection.not_selected.audio] == [2]
        assert len(selection) == media_info.count

    def test_add_known_track_reassigns_it(self, media_info):
        """Should keep partitions disjoint when a track is added again."""
        selection = SelectMediaInfo.from_media_info(media_info, False)
        english = media_info.audio[0]

        selection.add(english, True)
        selection.add(english, False)
        selection.move(english, True)

        selected = {track.uid for track in selection.selected.all_tracks()}
        not_selected = {track.uid for track in selection.not_selected.all_tracks()}
        assert selected == {english.uid}
        assert selected.isdisjoint(not_selected)
        assert len(selected) + len(not_selected) == len(selection) == media_info.count

        selection.set_state(TrackState.KEEP, TrackState.REMOVE)
        assert english.state == TrackState.KEEP

    def test_move_unknown_track_inserts_it(self, media_info):
        """Should insert a track moved before being added."""
        selection = SelectMediaInfo.from_media_info(media_info, True)
        extra = _track(TrackKind.AUDIO, 9, language="jpn")

        selection.move(extra, False)

        assert len(selection) == media_info.count + 1
        assert selection.not_selected.audio == [extra]

    def test_move_with_predicate(self, media_info):
        """Should re-evaluate a predicate per track."""
        selection = SelectMediaInfo.from_media_info(media_info, False)

        selection.move(media_info, lambda track: track.kind == TrackKind.VIDEO)

        assert [track.id for track in selection.selected.all_tracks()] == [0]
        assert selection.not_selected.count == media_info.count - 1

    def test_set_state(self, media_info):
        """Should set the state of every track in each partition."""
        selection = SelectMediaInfo.from_media_info(media_info, _is_english)

        selection.set_state(TrackState.KEEP, TrackState.REMOVE)

        assert {track.state for track in selection.selected.all_tracks()} == {TrackState.KEEP}
        assert {track.state for track in selection.not_selected.all_tracks()} == {TrackState.REMOVE}
        assert media_info.audio[1].state == TrackState.REMOVE

    def test_views_are_tagged_with_parser(self, media_info):
        """Should tag both views with the selection parser."""
        selection = SelectMediaInfo.from_media_info(media_info, _is_english)

        assert selection.selected.parser == ParserType.MKVMERGE
        assert selection.not_selected.parser == ParserType.MKVMERGE

    def test_rejects_other_parser(self, media_info, sample_ffprobe_json):
        """Should refuse tracks produced by a different parser."""
        selection = SelectMediaInfo.from_media_info(media_info, True)
        ffprobe_info = parse_ffprobe_json(sample_ffprobe_json)

        with pytest.raises(PreconditionError):
            selection.add(ffprobe_info, True)
        with pytest.raises(PreconditionError):
            selection.move(ffprobe_info.audio[0], False)

    def test_source_requires_selector(self, media_info):
        """Should refuse a source without a selector."""
        with pytest.raises(PreconditionError):
            SelectMediaInfo(ParserType.MKVMERGE, media_info)

    def test_empty_selection(self):
        """Should start with two empty partitions."""
        selection = SelectMediaInfo(ParserType.FFPROBE)

        assert len(selection) == 0
        assert selection.selected == MediaInfo(parser=ParserType.FFPROBE)
