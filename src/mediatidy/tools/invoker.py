"""Blocking execution of external programs."""

import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from mediatidy.utils.logger import get_logger, truncate_output

logger = get_logger(__name__)


@dataclass(frozen=True)
class ToolResult:
    """Exit code and captured output of one tool run."""

    exit_code: int
    output: str = ""


class ToolInvoker(Protocol):
    """Capability to run an external program to completion."""

    def run(self, program: str, args: Sequence[str]) -> ToolResult:
        """Run program with args and return its exit code and output."""
        ...


class SubprocessInvoker:
    """Run tools with subprocess, capturing stdout and stderr.

    A started process always runs to completion unless a timeout is
    configured; cancellation is only observed between tool runs.
    """

    def __init__(self, timeout_seconds: Optional[int] = None):
        """Initialize invoker.

        Args:
            timeout_seconds: Maximum run time per process, None to wait forever
        """
        self.timeout_seconds = timeout_seconds

    def run(self, program: str, args: Sequence[str]) -> ToolResult:
        """Run a program and capture its output.

        Launch failures and timeouts are reported as exit code -1.
        """
        cmd = [program, *args]
        logger.debug("Executing tool", command=cmd)

        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            logger.error("Tool timeout", program=program, timeout=self.timeout_seconds)
            return ToolResult(exit_code=-1, output=f"Timed out after {self.timeout_seconds}s")
        except OSError as e:
            logger.error("Failed to start tool", program=program, error=str(e))
            return ToolResult(exit_code=-1, output=str(e))

        # Probe tools print their document on stdout, diagnostics on stderr
        output = result.stdout if result.returncode == 0 else result.stdout + result.stderr
        logger.debug(
            "Tool finished",
            program=program,
            returncode=result.returncode,
            stderr=truncate_output(result.stderr),
        )
        return ToolResult(exit_code=result.returncode, output=output)
