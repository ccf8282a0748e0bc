"""Media file processing result models."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional


@dataclass
class ConversionResult:
    """Outcome of a single conversion or remux operation."""

    success: bool
    output_path: Path
    reason: Optional[str] = None  # Reason for failure

    def __bool__(self) -> bool:
        return self.success


@dataclass
class ProcessResult:
    """Result of processing a single file."""

    status: Literal["success", "skipped", "failed", "error", "dry_run"]
    file_path: Optional[Path] = None
    output_path: Optional[Path] = None
    actions: tuple[str, ...] = ()  # Operations applied, in order
    changed: bool = False
    reason: Optional[str] = None  # Reason for skip/failure
    error: Optional[str] = None  # Error message if failed

    def __str__(self) -> str:
        """Human-readable representation."""
        name = self.file_path.name if self.file_path else "<unknown>"
        action_part = ", ".join(self.actions) if self.actions else "no changes"
        if self.status == "success":
            target = self.output_path.name if self.output_path else name
            return f"{name}: {action_part} -> {target}"
        elif self.status == "skipped":
            return f"{name}: Skipped ({self.reason})"
        elif self.status == "dry_run":
            return f"{name}: Would apply {action_part} (dry run)"
        else:
            return f"{name}: Failed ({self.error or self.reason})"
