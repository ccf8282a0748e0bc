"""mkvmerge command builder and runner.

See https://mkvtoolnix.download/doc/mkvmerge.html
"""

from pathlib import Path
from typing import Optional

from mediatidy.config import ExecutionConfig
from mediatidy.errors import PreconditionError
from mediatidy.models.media import MediaInfo
from mediatidy.models.track import ParserType, TrackKind
from mediatidy.tools.base import MediaTool, format_duration
from mediatidy.tools.invoker import ToolInvoker, ToolResult
from mediatidy.utils.logger import get_logger

logger = get_logger(__name__)

MERGE_OPTIONS = [
    "--disable-track-statistics-tags",
    "--no-global-tags",
    "--no-track-tags",
    "--no-attachments",
    "--no-buttons",
    "--flush-on-close",
]

TRACK_FILTERS = {
    TrackKind.VIDEO: ("--video-tracks", "--no-video"),
    TrackKind.AUDIO: ("--audio-tracks", "--no-audio"),
    TrackKind.SUBTITLE: ("--subtitle-tracks", "--no-subtitles"),
}


def track_filter_args(keep: MediaInfo) -> list[str]:
    """Build per-variant track selection arguments.

    An empty variant list excludes the whole variant, otherwise only the
    listed mkvmerge track ids are included.

    Raises:
        PreconditionError: If keep was not produced by mkvmerge
    """
    if keep.parser != ParserType.MKVMERGE:
        raise PreconditionError(
            f"mkvmerge track ids required, got {keep.parser.value} selection"
        )

    args = []
    for kind in TrackKind:
        include_flag, exclude_flag = TRACK_FILTERS[kind]
        tracks = keep.tracks(kind)
        if tracks:
            args.extend([include_flag, ",".join(str(track.id) for track in tracks)])
        else:
            args.append(exclude_flag)
    return args


class MkvMergeTool(MediaTool):
    """Identify, remux and merge files with mkvmerge.

    Exit code 1 means success with warnings.
    """

    name = "mkvmerge"
    success_codes = frozenset({0, 1})

    def __init__(self, program: str, invoker: ToolInvoker, execution: Optional[ExecutionConfig] = None):
        super().__init__(program, invoker)
        self.execution = execution or ExecutionConfig()

    def _snippet_args(self) -> list[str]:
        if not self.execution.test_snippets:
            return []
        return ["--split", f"parts:00:00:00-{format_duration(self.execution.snippet_seconds)}"]

    def identify(self, file_path: Path) -> ToolResult:
        """Run mkvmerge identification with JSON output."""
        args = ["--identify", str(file_path), "--identification-format", "json"]
        return self.invoker.run(self.program, args)

    def build_remux_args(
        self, input_path: Path, output_path: Path, keep: Optional[MediaInfo] = None
    ) -> list[str]:
        """Arguments to remux all tracks, or only the tracks in keep."""
        args = [*MERGE_OPTIONS, *self._snippet_args(), "--output", str(output_path)]
        if keep is not None:
            args.extend(track_filter_args(keep))
        args.append(str(input_path))
        return args

    def build_merge_args(
        self, source_one: Path, keep_one: MediaInfo, source_two: Path, output_path: Path
    ) -> list[str]:
        """Arguments to merge selected tracks of one file with all of another."""
        return [
            *MERGE_OPTIONS,
            *self._snippet_args(),
            "--output",
            str(output_path),
            *track_filter_args(keep_one),
            "--no-chapters",
            str(source_one),
            str(source_two),
        ]

    def remux(self, input_path: Path, output_path: Path, keep: Optional[MediaInfo] = None) -> bool:
        """Remux input to output, optionally restricted to the tracks in keep."""
        args = self.build_remux_args(input_path, output_path, keep)
        logger.info(
            "Remuxing with mkvmerge",
            file=str(input_path),
            output=str(output_path),
            selective=keep is not None,
        )
        return self.succeeded(self.execute(args, input_path))

    def merge(self, source_one: Path, keep_one: MediaInfo, source_two: Path, output_path: Path) -> bool:
        """Merge selected tracks of source_one with every track of source_two."""
        args = self.build_merge_args(source_one, keep_one, source_two, output_path)
        logger.info(
            "Merging with mkvmerge",
            file=str(source_one),
            merge_with=str(source_two),
            output=str(output_path),
        )
        return self.succeeded(self.execute(args, source_one))
