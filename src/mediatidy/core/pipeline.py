"""Per-file processing pipeline."""

import asyncio
import threading
import time
from pathlib import Path
from typing import Optional

from mediatidy.config import Config
from mediatidy.core.convert import ConversionOrchestrator
from mediatidy.core.probe import MediaProber
from mediatidy.core.selection import SelectMediaInfo
from mediatidy.errors import ParseError, PreconditionError
from mediatidy.models.file import ProcessResult
from mediatidy.models.media import MediaInfo
from mediatidy.models.track import ParserType, TrackInfo, TrackKind, TrackState
from mediatidy.tools import ToolContext, is_mkv_file
from mediatidy.utils.logger import get_logger

logger = get_logger(__name__)


class TrackPolicy:
    """Decide which tracks of a file to keep."""

    def __init__(self, config: Config):
        """Initialize policy.

        Args:
            config: Application configuration
        """
        self.keep_languages = set(config.process.keep_languages)
        self.keep_undefined = config.process.keep_undefined

    def wants(self, track: TrackInfo) -> bool:
        """Whether a track should be kept on its own merits."""
        match track.kind:
            case TrackKind.VIDEO:
                return True
            case TrackKind.AUDIO | TrackKind.SUBTITLE:
                if track.is_language_unknown():
                    return self.keep_undefined
                return track.language in self.keep_languages
        raise ValueError(f"Unknown track kind: {track.kind}")

    def select(self, media_info: MediaInfo) -> SelectMediaInfo:
        """Partition tracks into keep and remove."""
        selection = SelectMediaInfo.from_media_info(media_info, self.wants)

        # Never leave a file without audio
        if media_info.audio and not selection.selected.audio:
            logger.warning(
                "No audio track matches keep languages, keeping all audio",
                languages=[track.language for track in media_info.audio],
            )
            selection.move(media_info.audio, True)

        selection.set_state(TrackState.KEEP, TrackState.REMOVE)
        return selection


class ProcessingPipeline:
    """Probe, select and convert a single file, one stage at a time."""

    def __init__(
        self,
        config: Config,
        tools: Optional[ToolContext] = None,
        cancel: Optional[threading.Event] = None,
    ):
        """Initialize the pipeline with configuration.

        Args:
            config: Application configuration
            tools: External tool context, built from config when omitted
            cancel: Shared cancellation signal
        """
        self.config = config
        self.tools = tools or ToolContext.from_config(config)
        self.cancel = cancel or threading.Event()
        self.prober = MediaProber(self.tools)
        self.orchestrator = ConversionOrchestrator(config, self.tools, self.cancel)
        self.policy = TrackPolicy(config)

    def _cancelled(self, file_path: Path, actions: list[str]) -> Optional[ProcessResult]:
        if not self.cancel.is_set():
            return None
        logger.info("Processing cancelled", file=str(file_path))
        return ProcessResult(
            status="skipped",
            file_path=file_path,
            output_path=file_path,
            actions=tuple(actions),
            changed=bool(actions),
            reason="cancelled",
        )

    def _failed(self, file_path: Path, actions: list[str], reason: str) -> ProcessResult:
        return ProcessResult(
            status="failed",
            file_path=file_path,
            output_path=file_path,
            actions=tuple(actions),
            changed=bool(actions),
            reason=reason,
        )

    def run(self, file_path: Path) -> ProcessResult:
        """Process a single file through the complete pipeline.

        Pipeline steps:
        1. Validation (file exists, is a file)
        2. Remux non-MKV files to MKV
        3. Probe tracks with mkvmerge
        4. Select tracks to keep by language
        5. Remux dropping unwanted tracks
        6. De-interlace (optional)

        Cancellation is checked between steps; a running tool is never
        interrupted.

        Args:
            file_path: Path to the file to process

        Returns:
            ProcessResult with status and details
        """
        start_time = time.time()
        dry_run = self.config.execution.dry_run
        actions: list[str] = []
        current = file_path

        logger.info("Processing file", file=str(file_path))

        if not file_path.exists():
            logger.error("File not found", file=str(file_path))
            return ProcessResult(status="error", file_path=file_path, error="File not found")

        if not file_path.is_file():
            logger.error("Not a regular file", file=str(file_path))
            return ProcessResult(status="error", file_path=file_path, error="Not a regular file")

        try:
            # Step 2: Container
            if not is_mkv_file(current) and self.config.process.remux_non_mkv:
                result = self.orchestrator.remux_to_mkv(current)
                if not result:
                    return self._failed(file_path, actions, result.reason or "remux failed")
                actions.append("remux")
                current = result.output_path

            if cancelled := self._cancelled(file_path, actions):
                return cancelled

            # Dry run never produced an MKV to inspect
            if not is_mkv_file(current):
                if dry_run and actions:
                    return ProcessResult(
                        status="dry_run", file_path=file_path, output_path=current, actions=tuple(actions)
                    )
                logger.info("Skipping non-MKV file", file=str(current))
                return ProcessResult(status="skipped", file_path=file_path, reason="not_mkv")

            # Step 3: Probe
            try:
                media_info = self.prober.probe(current, ParserType.MKVMERGE)
            except ParseError as e:
                logger.error("Probe failed", file=str(current), error=str(e))
                return self._failed(file_path, actions, "probe_failed")

            if cancelled := self._cancelled(file_path, actions):
                return cancelled

            # Step 4: Select
            selection = self.policy.select(media_info)
            selection.log_state("Keep", "Remove")
            removable = selection.not_selected

            # Step 5: Drop unwanted tracks
            if removable.count and self.config.process.remove_unwanted_tracks:
                result = self.orchestrator.remux_to_mkv(current, keep=selection.selected)
                if not result:
                    return self._failed(file_path, actions, result.reason or "remux failed")
                actions.append(f"remove {removable.count} tracks")
                current = result.output_path

            if cancelled := self._cancelled(file_path, actions):
                return cancelled

            # Step 6: De-interlace
            if self.config.process.deinterlace:
                result = self.orchestrator.deinterlace_to_mkv(current)
                if not result:
                    return self._failed(file_path, actions, result.reason or "deinterlace failed")
                actions.append("deinterlace")
                current = result.output_path

        except PreconditionError:
            raise
        except Exception as e:
            logger.exception("Pipeline error", file=str(file_path), error=str(e))
            return ProcessResult(status="error", file_path=file_path, error=str(e))

        duration_ms = int((time.time() - start_time) * 1000)

        if not actions:
            logger.info("File already clean", file=str(file_path), duration_ms=duration_ms)
            return ProcessResult(
                status="skipped", file_path=file_path, output_path=current, reason="already_clean"
            )

        if dry_run:
            return ProcessResult(
                status="dry_run", file_path=file_path, output_path=current, actions=tuple(actions)
            )

        logger.info(
            "File processed successfully",
            file=str(file_path),
            output=str(current),
            actions=actions,
            duration_ms=duration_ms,
        )
        return ProcessResult(
            status="success",
            file_path=file_path,
            output_path=current,
            actions=tuple(actions),
            changed=True,
        )

    async def process(self, file_path: Path) -> ProcessResult:
        """Process a file without blocking the event loop."""
        return await asyncio.to_thread(self.run, file_path)
