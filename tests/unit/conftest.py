"""Unit test fixtures: fake hardware for isolated, fast test execution.

The fakes stand in for the two hardware collaborators:
- FakeStillCamera replaces the rpicam-still subprocess
- FakeDriver replaces the Adafruit_DHT read call
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from agrimonitor.core.devices.dht_sensor import DriverResult
from agrimonitor.core.devices.rpicam import CaptureResult, CaptureStatus, StillCamera


FAKE_JPEG = b"\xff\xd8\xff\xe0fake-jpeg-payload\xff\xd9"


class FakeStillCamera(StillCamera):
    """StillCamera whose ``run`` writes a file instead of spawning a process."""

    def __init__(
        self,
        returncode: int = 0,
        write_file: bool = True,
        payload: bytes = FAKE_JPEG,
        delay: float = 0.0,
        spawn_error: Optional[str] = None,
    ):
        super().__init__("fake-still")
        self.returncode = returncode
        self.write_file = write_file
        self.payload = payload
        self.delay = delay
        self.spawn_error = spawn_error

        self.calls: List[List[str]] = []
        self.active = 0
        self.max_active = 0

    async def run(self, args: Sequence[str]) -> CaptureResult:
        self.calls.append(list(args))
        if self.spawn_error:
            return CaptureResult(CaptureStatus.SPAWN_ERROR, self.command, error=self.spawn_error)

        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            output = Path(args[list(args).index("-o") + 1])
            if self.write_file:
                output.write_bytes(self.payload)
        finally:
            self.active -= 1

        if self.returncode == 0:
            return CaptureResult(CaptureStatus.OK, self.command, returncode=0)
        return CaptureResult(
            CaptureStatus.EXIT_CODE, self.command, returncode=self.returncode, error="ERROR: no cameras available"
        )


class FakeDriver:
    """Callable DHT driver returning a fixed result and recording calls."""

    def __init__(self, temperature=21.34, humidity=55.6, is_valid=True, error: Optional[Exception] = None):
        self.result = DriverResult(temperature=temperature, humidity=humidity, is_valid=is_valid)
        self.error = error
        self.calls: List[tuple] = []

    def __call__(self, sensor_kind: int, pin: int) -> DriverResult:
        self.calls.append((sensor_kind, pin))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fake_camera() -> FakeStillCamera:
    """A camera that succeeds and writes a small JPEG payload."""
    return FakeStillCamera()


@pytest.fixture
def fake_driver() -> FakeDriver:
    """A DHT driver returning 21.34 C / 55.6 %."""
    return FakeDriver()


@pytest.fixture
def photo_dir(tmp_path: Path) -> Path:
    """Directory for temporary photo files."""
    path = tmp_path / "photos"
    path.mkdir()
    return path


@pytest.fixture
def camera_factory():
    """Build a FakeStillCamera with custom behavior."""
    return FakeStillCamera


@pytest.fixture
def driver_factory():
    """Build a FakeDriver with custom behavior."""
    return FakeDriver
