"""ffmpeg and ffprobe command builders and runners.

See https://ffmpeg.org/ffmpeg.html
"""

from pathlib import Path
from typing import Optional

from mediatidy.config import ConvertConfig, ExecutionConfig
from mediatidy.errors import PreconditionError
from mediatidy.models.media import MediaInfo
from mediatidy.models.track import ParserType, TrackInfo, TrackKind
from mediatidy.tools.base import MediaTool
from mediatidy.tools.invoker import ToolInvoker, ToolResult
from mediatidy.utils.logger import get_logger

logger = get_logger(__name__)

GLOBAL_OPTIONS = ["-hide_banner", "-nostats", "-loglevel", "error", "-y"]


def _require_ffprobe(media_info: Optional[MediaInfo], role: str) -> None:
    if media_info is not None and media_info.parser != ParserType.FFPROBE:
        raise PreconditionError(
            f"ffprobe stream indexes required for {role}, got {media_info.parser.value}"
        )


class FfProbeTool(MediaTool):
    """Inspect files with ffprobe."""

    name = "ffprobe"

    def probe(self, file_path: Path) -> ToolResult:
        """Print streams, format and chapters as JSON."""
        args = [
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_streams",
            "-show_format",
            "-show_chapters",
            str(file_path),
        ]
        return self.invoker.run(self.program, args)


class FfMpegTool(MediaTool):
    """Remux and re-encode files with ffmpeg."""

    name = "ffmpeg"

    def __init__(
        self,
        program: str,
        invoker: ToolInvoker,
        convert: Optional[ConvertConfig] = None,
        execution: Optional[ExecutionConfig] = None,
    ):
        super().__init__(program, invoker)
        self.convert = convert or ConvertConfig()
        self.execution = execution or ExecutionConfig()

    def _input_args(self, input_path: Path) -> list[str]:
        args = [*GLOBAL_OPTIONS, "-i", str(input_path)]
        if self.execution.test_snippets:
            args.extend(["-t", str(self.execution.snippet_seconds)])
        return args

    def _encoder_args(self, kind: TrackKind, stream: str) -> list[str]:
        match kind:
            case TrackKind.VIDEO:
                return [
                    f"-c:{stream}",
                    self.convert.video_codec,
                    f"-crf:{stream}",
                    str(self.convert.video_quality),
                    f"-preset:{stream}",
                    self.convert.video_preset,
                ]
            case TrackKind.AUDIO:
                return [f"-c:{stream}", self.convert.audio_codec]
            case TrackKind.SUBTITLE:
                return [f"-c:{stream}", "copy"]
        raise ValueError(f"Unknown track kind: {kind}")

    def build_remux_args(self, input_path: Path, output_path: Path) -> list[str]:
        """Copy every stream into a Matroska container."""
        return [
            *self._input_args(input_path),
            "-map",
            "0",
            "-c",
            "copy",
            "-f",
            "matroska",
            str(output_path),
        ]

    def build_convert_args(
        self,
        input_path: Path,
        output_path: Path,
        keep: Optional[MediaInfo] = None,
        reencode: Optional[MediaInfo] = None,
    ) -> list[str]:
        """Re-encode into Matroska.

        Without keep every stream is mapped and all video and audio is
        re-encoded. With keep only its streams are mapped; when reencode is
        also given, streams not in reencode are copied.
        """
        _require_ffprobe(keep, "keep")
        _require_ffprobe(reencode, "reencode")

        args = self._input_args(input_path)

        if keep is None:
            args.extend(["-map", "0"])
            args.extend(self._encoder_args(TrackKind.VIDEO, "v"))
            args.extend(self._encoder_args(TrackKind.AUDIO, "a"))
            args.extend(self._encoder_args(TrackKind.SUBTITLE, "s"))
        else:
            reencode_ids = (
                {track.id for track in reencode.all_tracks()} if reencode is not None else None
            )
            tracks: list[TrackInfo] = list(keep.all_tracks())
            for track in tracks:
                args.extend(["-map", f"0:{track.id}"])
            for output_index, track in enumerate(tracks):
                stream = str(output_index)
                if reencode_ids is None or track.id in reencode_ids:
                    args.extend(self._encoder_args(track.kind, stream))
                else:
                    args.extend([f"-c:{stream}", "copy"])

        args.extend(["-f", "matroska", str(output_path)])
        return args

    def remux(self, input_path: Path, output_path: Path) -> bool:
        """Copy all streams from input into a Matroska output."""
        logger.info("Remuxing with ffmpeg", file=str(input_path), output=str(output_path))
        return self.succeeded(self.execute(self.build_remux_args(input_path, output_path), input_path))

    def convert_to_mkv(
        self,
        input_path: Path,
        output_path: Path,
        keep: Optional[MediaInfo] = None,
        reencode: Optional[MediaInfo] = None,
    ) -> bool:
        """Re-encode input into a Matroska output."""
        args = self.build_convert_args(input_path, output_path, keep, reencode)
        logger.info(
            "Converting with ffmpeg",
            file=str(input_path),
            output=str(output_path),
            video_codec=self.convert.video_codec,
            audio_codec=self.convert.audio_codec,
        )
        return self.succeeded(self.execute(args, input_path))
