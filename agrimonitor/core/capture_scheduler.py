"""
Periodic still capture.

Keeps a single "latest" image on disk up to date by capturing on a fixed
wall-clock cadence. Failed captures are logged and the schedule carries on;
nothing is raised to the caller.
"""

import asyncio
import os
from pathlib import Path
from typing import Optional, Sequence

from agrimonitor.core.asyncio_utils import cancel_and_wait, create_logged_task
from agrimonitor.core.constants import PERIODIC_CAPTURE_CONFIG
from agrimonitor.core.devices.rpicam import CaptureResult, StillCamera
from agrimonitor.core.logging_utils import get_module_logger

logger = get_module_logger("CaptureScheduler")


class PeriodicCapture:
    """
    Handle for a running periodic capture.

    The first capture fires as soon as :meth:`start` is called, then one every
    ``interval_ms``. A tick whose previous capture is still running is skipped
    so the camera never gets two interval captures at once. Each capture is
    written next to ``output_path`` and renamed over it, so readers never see
    a half-written file.
    """

    def __init__(
        self,
        camera: StillCamera,
        interval_ms: int,
        output_path: Path,
        preset: Sequence[str] = PERIODIC_CAPTURE_CONFIG,
    ):
        if interval_ms <= 0:
            raise ValueError(f"Capture interval must be positive, got {interval_ms} ms")

        self._camera = camera
        self._interval_ms = interval_ms
        self._output_path = Path(output_path)
        self._preset = tuple(preset)

        self._loop_task: Optional[asyncio.Task] = None
        self._tick_task: Optional[asyncio.Task] = None
        self._running = False

        self.tick_count = 0
        self.skipped_count = 0
        self.failure_count = 0
        self.last_result: Optional[CaptureResult] = None

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def output_path(self) -> Path:
        return self._output_path

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def partial_path(self) -> Path:
        path = self._output_path
        return path.with_name(f".{path.stem}.partial{path.suffix}")

    async def start(self) -> None:
        """Fire the first capture and start the interval loop."""
        if self._running:
            logger.warning("Periodic capture already running")
            return

        self._running = True
        self._fire()
        self._loop_task = create_logged_task(
            self._run_loop(), logger=logger, name="periodic-capture-loop"
        )
        logger.info(
            "Periodic capture started: every %d ms to %s", self._interval_ms, self._output_path
        )

    async def stop(self) -> None:
        """Stop the loop and cancel any capture still in flight."""
        if not self._running:
            return

        self._running = False
        await cancel_and_wait(self._loop_task)
        await cancel_and_wait(self._tick_task)
        self._loop_task = None
        self._tick_task = None

        await asyncio.to_thread(self.partial_path.unlink, missing_ok=True)
        logger.info("Periodic capture stopped after %d ticks", self.tick_count)

    async def _run_loop(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self._interval_ms / 1000.0
        next_tick = loop.time()

        while self._running:
            next_tick += interval
            delay = next_tick - loop.time()
            if delay < -interval:
                # Fell more than a whole interval behind (host suspended); resync.
                next_tick = loop.time()
                delay = 0.0
            await asyncio.sleep(max(0.0, delay))
            if self._running:
                self._fire()

    def _fire(self) -> None:
        if self._tick_task is not None and not self._tick_task.done():
            self.skipped_count += 1
            logger.warning("Previous capture still running, skipping tick")
            return

        self.tick_count += 1
        self._tick_task = create_logged_task(
            self._capture_once(), logger=logger, name=f"periodic-capture-{self.tick_count}"
        )

    async def _capture_once(self) -> Optional[CaptureResult]:
        partial = self.partial_path
        try:
            await asyncio.to_thread(partial.parent.mkdir, parents=True, exist_ok=True)
            result = await self._camera.capture(partial, self._preset)

            if result.ok and not await asyncio.to_thread(partial.exists):
                result = result.missing_output()

            if result.ok:
                await asyncio.to_thread(os.replace, partial, self._output_path)
                logger.debug("Updated %s", self._output_path)
            else:
                self.failure_count += 1
                logger.error("Periodic capture failed: %s", result.message)
                await asyncio.to_thread(partial.unlink, missing_ok=True)

            self.last_result = result
            return result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failure_count += 1
            logger.error("Periodic capture error: %s", e)
            return None


async def start_periodic_capture(
    camera: StillCamera,
    interval_ms: int,
    output_path: Path,
    preset: Sequence[str] = PERIODIC_CAPTURE_CONFIG,
) -> PeriodicCapture:
    """Start capturing every ``interval_ms`` and return the owning handle."""
    handle = PeriodicCapture(camera, interval_ms, output_path, preset)
    await handle.start()
    return handle
