"""
Still capture through the ``rpicam-still`` command line tool.

Each capture spawns the tool once and waits for it to exit. The tool's own
``--timeout`` argument bounds how long it runs; this module adds no timeout
of its own.
"""

import asyncio
import contextlib
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Union

from agrimonitor.core.constants import CAPTURE_COMMAND, WARMUP_CAPTURE_CONFIG, WARMUP_FILENAME
from agrimonitor.core.exceptions import CaptureError
from agrimonitor.core.logging_utils import get_module_logger

logger = get_module_logger("Camera")

_STDERR_TAIL_CHARS = 400


class CaptureStatus(Enum):
    OK = "ok"
    EXIT_CODE = "exit_code"
    SPAWN_ERROR = "spawn_error"
    MISSING_OUTPUT = "missing_output"


@dataclass(frozen=True)
class CaptureResult:
    """Outcome of one capture process.

    ``returncode`` is set whenever the process ran; ``error`` holds the
    stderr tail for EXIT_CODE and the OS error text for SPAWN_ERROR.
    MISSING_OUTPUT marks a zero exit that left no image behind.
    """
    status: CaptureStatus
    command: str
    returncode: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is CaptureStatus.OK

    @property
    def message(self) -> str:
        if self.status is CaptureStatus.OK:
            return f"{self.command} completed"
        if self.status is CaptureStatus.EXIT_CODE:
            return f"{self.command} exited with code {self.returncode}"
        if self.status is CaptureStatus.MISSING_OUTPUT:
            return "Photo capture failed - file not created"
        return f"{self.command} could not be started: {self.error}"

    def missing_output(self) -> "CaptureResult":
        """Downgrade a successful run whose output file never appeared."""
        return CaptureResult(CaptureStatus.MISSING_OUTPUT, self.command, returncode=self.returncode)

    def raise_for_status(self) -> None:
        if not self.ok:
            raise CaptureError(self.message)


def build_arguments(output_path: Union[str, Path], preset: Sequence[str]) -> List[str]:
    """Argument list writing one still to ``output_path`` with ``preset``."""
    return ["-o", str(output_path), *preset]


class StillCamera:
    """Runs the still capture executable.

    Args:
        command: Executable name or path (default ``rpicam-still``).
    """

    def __init__(self, command: str = CAPTURE_COMMAND):
        self.command = command

    async def run(self, args: Sequence[str]) -> CaptureResult:
        """Spawn the executable with ``args`` and wait for it to exit."""
        logger.debug("Running %s %s", self.command, " ".join(args))
        try:
            process = await asyncio.create_subprocess_exec(
                self.command,
                *args,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Failed to start %s: %s", self.command, e)
            return CaptureResult(CaptureStatus.SPAWN_ERROR, self.command, error=str(e))

        try:
            _, stderr = await process.communicate()
        except asyncio.CancelledError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise

        if process.returncode == 0:
            return CaptureResult(CaptureStatus.OK, self.command, returncode=0)

        tail = (stderr or b"").decode("utf-8", errors="replace").strip()[-_STDERR_TAIL_CHARS:]
        logger.error("%s exited with code %s: %s", self.command, process.returncode, tail)
        return CaptureResult(
            CaptureStatus.EXIT_CODE,
            self.command,
            returncode=process.returncode,
            error=tail or None,
        )

    async def capture(self, output_path: Union[str, Path], preset: Sequence[str]) -> CaptureResult:
        """Capture one still to ``output_path`` using ``preset`` arguments."""
        return await self.run(build_arguments(output_path, preset))

    async def warmup(self, scratch_dir: Optional[Path] = None) -> bool:
        """Take a tiny throwaway still so the first real capture starts faster.

        Failures are logged, never raised.
        """
        logger.info("Warming up camera...")
        scratch = (scratch_dir or Path(tempfile.gettempdir())) / WARMUP_FILENAME
        try:
            result = await self.capture(scratch, WARMUP_CAPTURE_CONFIG)
        finally:
            await asyncio.to_thread(scratch.unlink, missing_ok=True)

        if result.ok:
            logger.info("Camera warmed up successfully")
        else:
            logger.warning("Camera warmup failed: %s", result.message)
        return result.ok
