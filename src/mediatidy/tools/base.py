"""Common behavior of external media tools."""

from pathlib import Path
from typing import ClassVar, Sequence

from mediatidy.tools.invoker import ToolInvoker, ToolResult
from mediatidy.utils.logger import get_logger, truncate_output

logger = get_logger(__name__)


class MediaTool:
    """An external program with a family-specific exit code convention."""

    name: ClassVar[str] = "tool"
    success_codes: ClassVar[frozenset[int]] = frozenset({0})

    def __init__(self, program: str, invoker: ToolInvoker):
        """Initialize tool.

        Args:
            program: Executable name or path
            invoker: Capability used to run the executable
        """
        self.program = program
        self.invoker = invoker

    def succeeded(self, result: ToolResult) -> bool:
        """Whether an exit code counts as success for this tool family."""
        return result.exit_code in self.success_codes

    def execute(self, args: Sequence[str], file_path: Path) -> ToolResult:
        """Run the tool and log failures against a file."""
        result = self.invoker.run(self.program, list(args))
        if not self.succeeded(result):
            logger.error(
                f"{self.name} failed",
                file=str(file_path),
                returncode=result.exit_code,
                output=truncate_output(result.output),
            )
        elif result.exit_code != 0:
            logger.warning(
                f"{self.name} completed with warnings",
                file=str(file_path),
                returncode=result.exit_code,
                output=truncate_output(result.output),
            )
        return result


def is_mkv_file(path: Path) -> bool:
    """Whether a path has the Matroska extension (case-insensitive)."""
    return path.suffix.lower() == ".mkv"


def format_duration(seconds: int) -> str:
    """Format seconds as HH:MM:SS."""
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
