"""External tool wrappers and the capability context that owns them."""

from dataclasses import dataclass
from typing import Optional

from mediatidy.config import Config
from mediatidy.tools.base import MediaTool, is_mkv_file
from mediatidy.tools.ffmpeg import FfMpegTool, FfProbeTool
from mediatidy.tools.handbrake import HandBrakeTool
from mediatidy.tools.invoker import SubprocessInvoker, ToolInvoker, ToolResult
from mediatidy.tools.mediainfo import MediaInfoTool
from mediatidy.tools.mkvmerge import MkvMergeTool


@dataclass
class ToolContext:
    """Every external tool the core may run, built once per process.

    Passed explicitly to the prober and the conversion orchestrator so tests
    can substitute a fake invoker.
    """

    mkvmerge: MkvMergeTool
    ffmpeg: FfMpegTool
    ffprobe: FfProbeTool
    mediainfo: MediaInfoTool
    handbrake: HandBrakeTool

    @classmethod
    def from_config(cls, config: Config, invoker: Optional[ToolInvoker] = None) -> "ToolContext":
        """Create tools from configuration.

        Args:
            config: Application configuration
            invoker: Process runner, defaults to SubprocessInvoker

        Returns:
            ToolContext instance
        """
        if invoker is None:
            invoker = SubprocessInvoker(timeout_seconds=config.tools.timeout_seconds)

        tools = config.tools
        return cls(
            mkvmerge=MkvMergeTool(tools.mkvmerge, invoker, config.execution),
            ffmpeg=FfMpegTool(tools.ffmpeg, invoker, config.convert, config.execution),
            ffprobe=FfProbeTool(tools.ffprobe, invoker),
            mediainfo=MediaInfoTool(tools.mediainfo, invoker),
            handbrake=HandBrakeTool(tools.handbrake, invoker, config.convert, config.execution),
        )


__all__ = [
    "FfMpegTool",
    "FfProbeTool",
    "HandBrakeTool",
    "MediaInfoTool",
    "MediaTool",
    "MkvMergeTool",
    "SubprocessInvoker",
    "ToolContext",
    "ToolInvoker",
    "ToolResult",
    "is_mkv_file",
]
