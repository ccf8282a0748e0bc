"""mediainfo runner."""

from pathlib import Path

from mediatidy.tools.base import MediaTool
from mediatidy.tools.invoker import ToolResult

# mediainfo exits 0 on missing files and prints an empty document of ~86 bytes
MIN_XML_LENGTH = 100


class MediaInfoTool(MediaTool):
    """Inspect files with mediainfo."""

    name = "mediainfo"

    def succeeded(self, result: ToolResult) -> bool:
        return super().succeeded(result) and len(result.output) >= MIN_XML_LENGTH

    def probe(self, file_path: Path) -> ToolResult:
        """Print media information as XML."""
        return self.invoker.run(self.program, ["--Output=XML", str(file_path)])
