"""Run probing tools and parse their output."""

from pathlib import Path

from mediatidy.errors import ParseError
from mediatidy.models.media import MediaInfo
from mediatidy.models.track import ParserType
from mediatidy.parsers import parse
from mediatidy.tools import ToolContext
from mediatidy.utils.logger import get_logger, truncate_output

logger = get_logger(__name__)


class MediaProber:
    """Inspect media files with mkvmerge, ffprobe or mediainfo."""

    def __init__(self, tools: ToolContext):
        """Initialize prober.

        Args:
            tools: External tool context
        """
        self.tools = tools

    def _run(self, file_path: Path, parser: ParserType) -> str:
        match parser:
            case ParserType.MKVMERGE:
                tool = self.tools.mkvmerge
                result = tool.identify(file_path)
            case ParserType.FFPROBE:
                tool = self.tools.ffprobe
                result = tool.probe(file_path)
            case ParserType.MEDIAINFO:
                tool = self.tools.mediainfo
                result = tool.probe(file_path)
            case _:
                raise ValueError(f"Unknown parser: {parser}")

        # Identification must not produce warnings, accept exit code 0 only
        if result.exit_code != 0 or not tool.succeeded(result):
            logger.error(
                "Probe failed",
                file=str(file_path),
                parser=parser.value,
                returncode=result.exit_code,
                output=truncate_output(result.output),
            )
            raise ParseError(f"{tool.name} exited with {result.exit_code}", parser.value)
        return result.output

    def probe(self, file_path: Path, parser: ParserType = ParserType.MKVMERGE) -> MediaInfo:
        """Probe a file with one tool.

        Args:
            file_path: Path to media file
            parser: Tool to use

        Returns:
            MediaInfo tagged with the parser

        Raises:
            FileNotFoundError: If file doesn't exist
            ParseError: If the tool fails or its output cannot be parsed
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        logger.debug("Probing file", file=str(file_path), parser=parser.value)
        media_info = parse(parser, self._run(file_path, parser))

        logger.info(
            "Media info parsed",
            file=str(file_path),
            parser=parser.value,
            container=media_info.container,
            video=len(media_info.video),
            audio=len(media_info.audio),
            subtitle=len(media_info.subtitle),
            languages=[track.language for track in media_info.audio],
            has_errors=media_info.has_errors,
        )
        return media_info

    def probe_all(self, file_path: Path) -> dict[ParserType, MediaInfo]:
        """Probe a file with every tool, skipping tools that fail."""
        results = {}
        for parser in ParserType:
            try:
                results[parser] = self.probe(file_path, parser)
            except ParseError as e:
                logger.warning("Skipping parser", file=str(file_path), parser=parser.value, error=str(e))
        return results
