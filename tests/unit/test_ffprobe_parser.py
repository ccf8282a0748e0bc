"""Unit tests for the ffprobe JSON parser."""

import json
from datetime import timedelta

import pytest

from mediatidy.errors import ParseError
from mediatidy.models.track import ParserType
from mediatidy.parsers import parse_ffprobe_json


def _stream(index, codec_type, codec_name="aac", **fields):
    return {"index": index, "codec_type": codec_type, "codec_name": codec_name, **fields}


def _document(streams, format_name="matroska,webm", **format_fields):
    return json.dumps({"streams": streams, "format": {"format_name": format_name, **format_fields}})


class TestParseFfprobeJson:
    """Test ffprobe stream parsing."""

    def test_streams(self, sample_ffprobe_json):
        """Should use the stream index for id and number."""
        media_info = parse_ffprobe_json(sample_ffprobe_json)

        assert media_info.parser == ParserType.FFPROBE
        assert [(track.id, track.number) for track in media_info.video] == [(0, 0)]
        assert [(track.id, track.number) for track in media_info.audio] == [(1, 1)]
        assert media_info.audio[0].format == "aac"
        assert media_info.audio[0].codec == "AAC (Advanced Audio Coding)"
        assert media_info.audio[0].title == "Stereo"
        assert media_info.audio[0].default is True

    def test_attached_picture_counts_as_attachment(self, sample_ffprobe_json):
        """Should not report cover art as a video track."""
        media_info = parse_ffprobe_json(sample_ffprobe_json)

        assert len(media_info.video) == 1
        assert media_info.attachments == 1

    def test_container_facts(self, sample_ffprobe_json):
        """Should read container, chapters and duration in seconds."""
        media_info = parse_ffprobe_json(sample_ffprobe_json)

        assert media_info.container == "mov,mp4,m4a,3gp,3g2,mj2"
        assert media_info.chapters == 2
        assert media_info.duration == timedelta(seconds=1325.5)
        assert media_info.has_tags is False  # Only muxer tags
        assert media_info.has_errors is True  # Not Matroska

    def test_matroska_container(self):
        """Should accept the matroska,webm format name."""
        media_info = parse_ffprobe_json(_document([_stream(0, "audio")]))

        assert media_info.is_matroska()
        assert media_info.has_errors is False

    @pytest.mark.parametrize("language", ["???", "null"])
    def test_placeholder_language(self, language):
        """Should flag placeholder languages and use und."""
        stream = _stream(0, "audio", tags={"language": language})

        media_info = parse_ffprobe_json(_document([stream]))

        assert media_info.audio[0].language == "und"
        assert media_info.audio[0].has_errors is True
        assert media_info.has_errors is True

    def test_codec_name_as_fallback_codec(self):
        """Should use codec_name when the long name is missing."""
        media_info = parse_ffprobe_json(_document([_stream(0, "subtitle", "subrip")]))

        assert media_info.subtitle[0].codec == "subrip"

    def test_user_format_tags(self):
        """Should report non-muxer format tags."""
        text = _document([_stream(0, "audio")], tags={"title": "Home video", "encoder": "Lavf"})

        media_info = parse_ffprobe_json(text)

        assert media_info.has_tags is True

    def test_ignores_data_streams(self):
        """Should skip streams that are not audio, video or subtitles."""
        streams = [_stream(0, "audio"), _stream(1, "data", "bin_data")]

        media_info = parse_ffprobe_json(_document(streams))

        assert media_info.count == 1

    def test_no_streams(self):
        """Should reject a document without streams."""
        with pytest.raises(ParseError, match="No streams"):
            parse_ffprobe_json(_document([]))

    def test_stream_without_codec(self):
        """Should reject a stream without a codec name."""
        with pytest.raises(ParseError) as exc_info:
            parse_ffprobe_json(_document([_stream(0, "audio", codec_name=None)]))
        assert exc_info.value.parser == "ffprobe"

    @pytest.mark.parametrize(
        "document",
        [
            {"format": "x"},
            {"format": {"format_name": "mp4", "tags": 5}},
            {"format": {"format_name": "mp4"}, "chapters": 2},
        ],
    )
    def test_malformed_format_fields(self, document):
        """Should wrap unexpected format and chapter values in ParseError."""
        text = json.dumps({"streams": [_stream(0, "audio")], **document})

        with pytest.raises(ParseError) as exc_info:
            parse_ffprobe_json(text)
        assert exc_info.value.parser == "ffprobe"
