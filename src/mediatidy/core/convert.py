"""Conversion and remux orchestration with crash-safe output replacement.

Every operation follows the same protocol:

1. The tool writes ``<input>.tmp`` next to the input.
2. On failure the temp file is deleted and the input is left untouched.
3. On success the temp file is renamed to ``<input>.mkv``; a failed rename
   is reported as a failure and leaves the temp file behind.
4. If the output name differs from the input name the input is deleted.

With ``execution.dry_run`` set nothing is run or touched and the input path
is reported as the output.
"""

import os
import threading
from pathlib import Path
from typing import Callable, Optional

from mediatidy.config import Config
from mediatidy.errors import PreconditionError
from mediatidy.models.file import ConversionResult
from mediatidy.models.media import MediaInfo
from mediatidy.models.track import ParserType
from mediatidy.tools import MediaTool, ToolContext, is_mkv_file
from mediatidy.utils.logger import get_logger

logger = get_logger(__name__)

OUTPUT_SUFFIX = ".mkv"
TEMP_SUFFIX = ".tmp"


def output_path_for(input_path: Path) -> Path:
    """Final output path for an input file.

    Files already carrying an MKV suffix in any case keep their own name, so
    the result replaces them in place.
    """
    if input_path.suffix.lower() == OUTPUT_SUFFIX:
        return input_path
    return input_path.with_suffix(OUTPUT_SUFFIX)


def temp_path_for(input_path: Path) -> Path:
    """Temporary output path for an input file."""
    return input_path.with_suffix(TEMP_SUFFIX)


def _require(value, name: str) -> None:
    if value is None:
        raise PreconditionError(f"{name} is required")


def _require_parser(media_info: Optional[MediaInfo], parser: ParserType, name: str) -> None:
    if media_info is not None and media_info.parser != parser:
        raise PreconditionError(
            f"{name} must come from {parser.value}, got {media_info.parser.value}"
        )


class ConversionOrchestrator:
    """Produce normalized MKV files through external tools."""

    def __init__(
        self,
        config: Config,
        tools: ToolContext,
        cancel: Optional[threading.Event] = None,
    ):
        """Initialize orchestrator.

        Args:
            config: Application configuration
            tools: External tool context
            cancel: Shared cancellation signal, polled between attempts
        """
        self.config = config
        self.tools = tools
        self.cancel = cancel or threading.Event()

    def _delete_file(self, file_path: Path) -> bool:
        try:
            file_path.unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.error("Failed to delete file", file=str(file_path), error=str(e))
            return False

    def _replace(
        self, input_path: Path, operation: str, attempt: Callable[[Path], bool]
    ) -> ConversionResult:
        """Run attempt against the temp path and swap the result into place."""
        if self.config.execution.dry_run:
            logger.info("DRY RUN: Would run operation", operation=operation, file=str(input_path))
            return ConversionResult(success=True, output_path=input_path)

        output_path = output_path_for(input_path)
        temp_path = temp_path_for(input_path)

        # Residue of an earlier failed rename
        if temp_path.exists():
            logger.warning("Removing stale temp file", file=str(temp_path))
            self._delete_file(temp_path)

        if not attempt(temp_path):
            self._delete_file(temp_path)
            logger.error("Operation failed", operation=operation, file=str(input_path))
            return ConversionResult(
                success=False, output_path=output_path, reason=f"{operation} failed"
            )

        try:
            os.replace(temp_path, output_path)
        except OSError as e:
            logger.error(
                "Failed to rename temp file",
                operation=operation,
                temp=str(temp_path),
                output=str(output_path),
                error=str(e),
            )
            return ConversionResult(success=False, output_path=output_path, reason="rename failed")

        if input_path != output_path and not self._delete_file(input_path):
            return ConversionResult(
                success=False, output_path=output_path, reason="failed to delete input"
            )

        logger.info(
            "Operation completed", operation=operation, file=str(input_path), output=str(output_path)
        )
        return ConversionResult(success=True, output_path=output_path)

    def convert_to_mkv(
        self,
        input_path: Path,
        keep: Optional[MediaInfo] = None,
        reencode: Optional[MediaInfo] = None,
    ) -> ConversionResult:
        """Re-encode with ffmpeg, all tracks or only the tracks in keep.

        Raises:
            PreconditionError: If keep or reencode did not come from ffprobe
        """
        _require(input_path, "input_path")
        _require_parser(keep, ParserType.FFPROBE, "keep")
        _require_parser(reencode, ParserType.FFPROBE, "reencode")

        return self._replace(
            input_path,
            "convert",
            lambda temp_path: self.tools.ffmpeg.convert_to_mkv(input_path, temp_path, keep, reencode),
        )

    def convert_to_mkv_handbrake(self, input_path: Path) -> ConversionResult:
        """Re-encode every track with HandBrake."""
        _require(input_path, "input_path")
        return self._replace(
            input_path,
            "convert_handbrake",
            lambda temp_path: self.tools.handbrake.convert_to_mkv(input_path, temp_path),
        )

    def deinterlace_to_mkv(self, input_path: Path) -> ConversionResult:
        """Re-encode every track with HandBrake's decomb filter."""
        _require(input_path, "input_path")
        return self._replace(
            input_path,
            "deinterlace",
            lambda temp_path: self.tools.handbrake.convert_to_mkv(
                input_path, temp_path, deinterlace=True
            ),
        )

    def remux_order(self, input_path: Path) -> list[MediaTool]:
        """Remux tools to try, in order.

        mkvmerge writes the most correct Matroska but rejects some legacy
        formats (e.g. WMV/ASF); ffmpeg reads more formats but mishandles some
        AVI files. MKV input tries mkvmerge first, anything else ffmpeg first.
        """
        if is_mkv_file(input_path):
            return [self.tools.mkvmerge, self.tools.ffmpeg]
        return [self.tools.ffmpeg, self.tools.mkvmerge]

    def _remux_with_fallback(self, input_path: Path, temp_path: Path) -> bool:
        for attempt, tool in enumerate(self.remux_order(input_path)):
            if attempt > 0:
                if self.cancel.is_set():
                    logger.info("Cancelled, skipping remux fallback", file=str(input_path))
                    return False
                logger.warning("Retrying remux", file=str(input_path), tool=tool.name)
                self._delete_file(temp_path)

            if tool.remux(input_path, temp_path):
                return True
        return False

    def remux_to_mkv(self, input_path: Path, keep: Optional[MediaInfo] = None) -> ConversionResult:
        """Remux to MKV without re-encoding.

        Without keep all tracks are remuxed with ordered tool fallback. With
        keep only its tracks are remuxed, with mkvmerge alone.

        Raises:
            PreconditionError: If keep did not come from mkvmerge
        """
        _require(input_path, "input_path")

        if keep is None:
            return self._replace(
                input_path,
                "remux",
                lambda temp_path: self._remux_with_fallback(input_path, temp_path),
            )

        _require_parser(keep, ParserType.MKVMERGE, "keep")
        return self._replace(
            input_path,
            "remux_selected",
            lambda temp_path: self.tools.mkvmerge.remux(input_path, temp_path, keep),
        )

    def merge_to_mkv(
        self, source_one: Path, keep_one: MediaInfo, source_two: Path
    ) -> ConversionResult:
        """Merge selected tracks of source_one with all tracks of source_two.

        The result replaces source_one; source_two is left for the caller.
        Chapters are dropped.

        Raises:
            PreconditionError: If an argument is missing or keep_one did not
                come from mkvmerge
        """
        _require(source_one, "source_one")
        _require(keep_one, "keep_one")
        _require(source_two, "source_two")
        _require_parser(keep_one, ParserType.MKVMERGE, "keep_one")

        return self._replace(
            source_one,
            "merge",
            lambda temp_path: self.tools.mkvmerge.merge(source_one, keep_one, source_two, temp_path),
        )
