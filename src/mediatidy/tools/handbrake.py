"""HandBrakeCLI command builder and runner.

See https://handbrake.fr/docs/en/latest/cli/command-line-reference.html
"""

import shlex
from pathlib import Path
from typing import Optional

from mediatidy.config import ConvertConfig, ExecutionConfig
from mediatidy.tools.base import MediaTool
from mediatidy.tools.invoker import ToolInvoker
from mediatidy.utils.logger import get_logger

logger = get_logger(__name__)


class HandBrakeTool(MediaTool):
    """Re-encode and de-interlace files with HandBrakeCLI."""

    name = "HandBrakeCLI"

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

    def build_convert_args(
        self,
        input_path: Path,
        output_path: Path,
        include_subtitles: bool = True,
        deinterlace: bool = False,
    ) -> list[str]:
        """Arguments to re-encode every track into Matroska."""
        args = ["--input", str(input_path)]
        if self.execution.test_snippets:
            args.extend(
                ["--start-at", "seconds:0", "--stop-at", f"seconds:{self.execution.snippet_seconds}"]
            )
        args.extend(["--output", str(output_path), "--format", "av_mkv"])

        # E.g. --encoder x264 --quality 20 --encoder-preset medium
        args.extend(["--encoder", *shlex.split(self.convert.handbrake_video)])

        if deinterlace:
            args.extend(["--comb-detect", "--decomb"])

        # E.g. --all-audio --aencoder copy --audio-fallback ac3
        args.extend(["--all-audio", "--aencoder", *shlex.split(self.convert.handbrake_audio)])

        if include_subtitles:
            args.append("--all-subtitles")
        else:
            args.extend(["--subtitle", "none"])
        return args

    def convert_to_mkv(
        self,
        input_path: Path,
        output_path: Path,
        include_subtitles: bool = True,
        deinterlace: bool = False,
    ) -> bool:
        """Re-encode input into a Matroska output, optionally de-interlacing."""
        args = self.build_convert_args(input_path, output_path, include_subtitles, deinterlace)
        logger.info(
            "Converting with HandBrake",
            file=str(input_path),
            output=str(output_path),
            deinterlace=deinterlace,
        )
        return self.succeeded(self.execute(args, input_path))
