"""Concurrent batch processing over a list of files."""

import asyncio
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from mediatidy.config import Config
from mediatidy.core.pipeline import ProcessingPipeline
from mediatidy.errors import PreconditionError
from mediatidy.models.file import ProcessResult
from mediatidy.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class BatchSummary:
    """Results of a batch run, in completion order."""

    results: list[ProcessResult] = field(default_factory=list)
    not_started: list[Path] = field(default_factory=list)

    @property
    def counts(self) -> Counter:
        """Number of results per status."""
        return Counter(result.status for result in self.results)

    @property
    def ok(self) -> bool:
        """Whether no file failed or errored."""
        counts = self.counts
        return counts["failed"] == 0 and counts["error"] == 0


class BatchProcessor:
    """Run the processing pipeline over many files with a fixed worker count."""

    def __init__(self, config: Config, pipeline: ProcessingPipeline):
        """Initialize batch processor.

        Args:
            config: Application configuration
            pipeline: Processing pipeline shared by every worker
        """
        self.config = config
        self.pipeline = pipeline

    @property
    def cancelled(self) -> bool:
        return self.pipeline.cancel.is_set()

    async def _worker(self, worker_id: int, queue: asyncio.Queue, summary: BatchSummary) -> None:
        logger.debug("Worker started", worker_id=worker_id)

        while True:
            try:
                file_path = queue.get_nowait()
            except asyncio.QueueEmpty:
                break

            try:
                # Files not yet started are left alone once cancelled
                if self.cancelled:
                    summary.not_started.append(file_path)
                    continue

                result = await self.pipeline.process(file_path)
                summary.results.append(result)
                logger.info(
                    "File finished",
                    worker_id=worker_id,
                    file=str(file_path),
                    status=result.status,
                )
            except PreconditionError:
                raise
            except Exception as e:
                logger.error(
                    "Worker error",
                    worker_id=worker_id,
                    file=str(file_path),
                    error=str(e),
                    exc_info=True,
                )
                summary.results.append(
                    ProcessResult(status="error", file_path=file_path, error=str(e))
                )
            finally:
                queue.task_done()

        logger.debug("Worker stopped", worker_id=worker_id)

    async def run(self, files: list[Path], worker_count: Optional[int] = None) -> BatchSummary:
        """Process files concurrently.

        Args:
            files: Files to process
            worker_count: Number of workers, defaults to processing.worker_count

        Returns:
            BatchSummary with a result for every started file
        """
        worker_count = worker_count or self.config.processing.worker_count
        queue: asyncio.Queue = asyncio.Queue()
        for file_path in files:
            queue.put_nowait(file_path)

        summary = BatchSummary()
        logger.info("Starting batch", total_files=len(files), worker_count=worker_count)

        workers = [
            asyncio.create_task(self._worker(i, queue, summary))
            for i in range(min(worker_count, len(files)) or 1)
        ]
        try:
            await asyncio.gather(*workers)
        finally:
            for task in workers:
                task.cancel()

        counts = summary.counts
        logger.info(
            "Batch complete",
            total_files=len(files),
            not_started=len(summary.not_started),
            **{status: count for status, count in counts.items()},
        )
        return summary
