"""Probing, track selection, conversion and per-file processing."""

from mediatidy.core.batch import BatchProcessor, BatchSummary
from mediatidy.core.convert import ConversionOrchestrator
from mediatidy.core.pipeline import ProcessingPipeline, TrackPolicy
from mediatidy.core.probe import MediaProber
from mediatidy.core.scanner import FileScanner
from mediatidy.core.selection import SelectMediaInfo

__all__ = [
    "BatchProcessor",
    "BatchSummary",
    "ConversionOrchestrator",
    "FileScanner",
    "MediaProber",
    "ProcessingPipeline",
    "SelectMediaInfo",
    "TrackPolicy",
]
