"""Unit tests for track and media models."""

from pathlib import Path

import pytest

from mediatidy.errors import ParseError, PreconditionError
from mediatidy.models import ConversionResult, MediaInfo, ProcessResult
from mediatidy.models.track import ParserType, TrackInfo, TrackKind


def _track(kind=TrackKind.AUDIO, parser=ParserType.MKVMERGE, **fields):
    values = {"format": "AC-3", "codec": "A_AC3", "id": 1, "number": 2}
    values.update(fields)
    return TrackInfo(kind=kind, parser=parser, **values)


class TestTrackInfo:
    """Test TrackInfo."""

    def test_requires_format_and_codec(self):
        """Should reject tracks without format or codec."""
        with pytest.raises(ValueError):
            _track(format="")
        with pytest.raises(ValueError):
            _track(codec="")

    def test_uids_are_unique(self):
        """Should give identical tracks distinct identities."""
        first = _track()
        second = _track()

        assert first.uid != second.uid
        assert first != second

    @pytest.mark.parametrize("language,unknown", [("und", True), ("", True), ("UND", True), ("eng", False)])
    def test_is_language_unknown(self, language, unknown):
        """Should treat empty and und as unknown."""
        assert _track(language=language).is_language_unknown() is unknown

    def test_str(self):
        """Should render a readable summary."""
        track = _track(language="jpn", title="Commentary", default=True)

        assert str(track) == "Audio 1: jpn AC-3 / A_AC3 (Commentary) [DEFAULT]"


class TestMediaInfo:
    """Test MediaInfo."""

    def test_add_by_kind(self):
        """Should append tracks to the list of their variant."""
        media_info = MediaInfo(parser=ParserType.MKVMERGE)
        video = _track(kind=TrackKind.VIDEO, format="AVC", codec="V_MPEG4/ISO/AVC")
        audio = _track()

        media_info.add(audio)
        media_info.add(video)

        assert media_info.video == [video]
        assert media_info.audio == [audio]
        assert list(media_info.all_tracks()) == [video, audio]
        assert media_info.count == 2

    def test_add_rejects_other_parser(self):
        """Should refuse tracks from a different parser."""
        media_info = MediaInfo(parser=ParserType.FFPROBE)

        with pytest.raises(PreconditionError):
            media_info.add(_track())

    def test_precondition_error_is_assertion(self):
        """Should surface contract violations as assertion errors."""
        assert issubclass(PreconditionError, AssertionError)

    @pytest.mark.parametrize(
        "container,expected",
        [("Matroska", True), ("matroska,webm", True), ("MPEG-4", False), (None, False)],
    )
    def test_is_matroska(self, container, expected):
        """Should recognize Matroska container names."""
        assert MediaInfo(parser=ParserType.FFPROBE, container=container).is_matroska() is expected

    def test_roll_up_errors(self):
        """Should raise has_errors when any track has errors."""
        media_info = MediaInfo(parser=ParserType.MKVMERGE)
        media_info.add(_track())
        assert media_info.roll_up_errors() is False

        media_info.add(_track(has_errors=True))
        assert media_info.roll_up_errors() is True
        assert media_info.has_errors is True

    def test_remove_cover_art(self):
        """Should drop image video tracks only."""
        media_info = MediaInfo(parser=ParserType.MKVMERGE)
        movie = _track(kind=TrackKind.VIDEO, format="HEVC/H.265/MPEG-H", codec="V_MPEGH/ISO/HEVC")
        cover = _track(kind=TrackKind.VIDEO, format="PNG", codec="V_PNG")
        media_info.add(movie)
        media_info.add(cover)

        assert media_info.remove_cover_art() == 1
        assert media_info.video == [movie]


class TestResults:
    """Test result models and errors."""

    def test_conversion_result_truthiness(self):
        """Should be truthy only on success."""
        assert ConversionResult(success=True, output_path=Path("a.mkv"))
        assert not ConversionResult(success=False, output_path=Path("a.mkv"), reason="remux failed")

    def test_process_result_str(self):
        """Should describe applied actions."""
        result = ProcessResult(
            status="success",
            file_path=Path("/media/movie.avi"),
            output_path=Path("/media/movie.mkv"),
            actions=("remux", "remove 2 tracks"),
            changed=True,
        )

        assert str(result) == "movie.avi: remux, remove 2 tracks -> movie.mkv"

    def test_parse_error_names_parser(self):
        """Should prefix the message with the parser name."""
        assert str(ParseError("No tracks found", "mkvmerge")) == "mkvmerge: No tracks found"
        assert str(ParseError("No tracks found")) == "No tracks found"
