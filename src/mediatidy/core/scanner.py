"""Discover media files to process."""

from pathlib import Path
from typing import Iterable, List, Optional

from mediatidy.utils.logger import get_logger

logger = get_logger(__name__)

MEDIA_EXTENSIONS = frozenset(
    {
        ".mkv",
        ".mp4",
        ".m4v",
        ".avi",
        ".mov",
        ".wmv",
        ".asf",
        ".ts",
        ".m2ts",
        ".mpg",
        ".mpeg",
        ".vob",
        ".webm",
    }
)


def _normalize_extensions(extensions: Iterable[str]) -> set[str]:
    return {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}


class FileScanner:
    """Scan paths for media files."""

    def __init__(self, extensions: Optional[Iterable[str]] = None):
        """Initialize scanner.

        Args:
            extensions: File extensions to include, defaults to MEDIA_EXTENSIONS
        """
        self.extensions = _normalize_extensions(extensions or MEDIA_EXTENSIONS)

    def matches(self, path: Path) -> bool:
        """Whether a file has a supported extension (case-insensitive)."""
        return path.suffix.lower() in self.extensions

    def scan(self, path: Path, recursive: bool = True) -> List[Path]:
        """Scan a path for media files.

        Args:
            path: Path to scan (file or directory)
            recursive: If True, scan subdirectories recursively

        Returns:
            List of media file paths, sorted by path

        Raises:
            FileNotFoundError: If path doesn't exist
            ValueError: If path is not a file or directory
        """
        if not path.exists():
            raise FileNotFoundError(f"Path not found: {path}")

        if path.is_file():
            if self.matches(path):
                logger.debug("Single file matched", file=str(path))
                return [path]
            logger.warning(
                "File extension not supported",
                file=str(path),
                extension=path.suffix,
                supported=sorted(self.extensions),
            )
            return []

        if path.is_dir():
            candidates = path.rglob("*") if recursive else path.glob("*")
            files = sorted(p for p in candidates if p.is_file() and self.matches(p))

            logger.info(
                "Directory scan complete",
                directory=str(path),
                recursive=recursive,
                total_files=len(files),
            )
            return files

        raise ValueError(f"Path is neither a file nor a directory: {path}")
