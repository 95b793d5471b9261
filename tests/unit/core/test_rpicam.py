"""Unit tests for the rpicam-still capture runner.

Process-level behavior is exercised with the Python interpreter standing in
for the capture executable, so no camera is needed.
"""

import asyncio
import sys

import pytest

from agrimonitor.core.constants import CAPTURE_CONFIG, WARMUP_CAPTURE_CONFIG
from agrimonitor.core.devices.rpicam import (
    CaptureResult,
    CaptureStatus,
    StillCamera,
    build_arguments,
)
from agrimonitor.core.exceptions import CaptureError


class TestBuildArguments:
    def test_output_first_then_preset(self, tmp_path):
        target = tmp_path / "shot.jpg"

        args = build_arguments(target, CAPTURE_CONFIG)

        assert args[:2] == ["-o", str(target)]
        assert args[2:] == list(CAPTURE_CONFIG)
        assert "--timeout" in args
        assert "--nopreview" in args


class TestStillCameraRun:
    """Tests for StillCamera.run() against real subprocesses."""

    @pytest.mark.asyncio
    async def test_exit_zero_is_ok(self):
        camera = StillCamera(command=sys.executable)

        result = await camera.run(["-c", "pass"])

        assert result.ok
        assert result.status is CaptureStatus.OK
        assert result.returncode == 0

    @pytest.mark.asyncio
    async def test_nonzero_exit_reports_code_and_stderr(self):
        camera = StillCamera(command=sys.executable)

        result = await camera.run(
            ["-c", "import sys; sys.stderr.write('ERROR: no cameras available'); sys.exit(3)"]
        )

        assert not result.ok
        assert result.status is CaptureStatus.EXIT_CODE
        assert result.returncode == 3
        assert "no cameras available" in result.error
        assert result.message.endswith("exited with code 3")

    @pytest.mark.asyncio
    async def test_missing_executable_is_spawn_error(self, tmp_path):
        camera = StillCamera(command=str(tmp_path / "no-such-rpicam-still"))

        result = await camera.run(["-o", str(tmp_path / "x.jpg")])

        assert result.status is CaptureStatus.SPAWN_ERROR
        assert result.returncode is None
        assert "could not be started" in result.message

    @pytest.mark.asyncio
    async def test_cancel_kills_process(self):
        camera = StillCamera(command=sys.executable)
        task = asyncio.create_task(camera.run(["-c", "import time; time.sleep(30)"]))
        await asyncio.sleep(0.3)

        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(task, timeout=10)

    @pytest.mark.asyncio
    async def test_capture_passes_output_path(self, tmp_path):
        script = "import sys; open(sys.argv[sys.argv.index('-o') + 1], 'wb').write(b'jpeg')"
        camera = StillCamera(command=sys.executable)
        target = tmp_path / "out.jpg"

        result = await camera.run(["-c", script, *build_arguments(target, ())])

        assert result.ok
        assert target.read_bytes() == b"jpeg"


class TestCaptureResult:
    def test_raise_for_status(self):
        failed = CaptureResult(CaptureStatus.EXIT_CODE, "rpicam-still", returncode=255)

        with pytest.raises(CaptureError, match="exited with code 255"):
            failed.raise_for_status()

        CaptureResult(CaptureStatus.OK, "rpicam-still", returncode=0).raise_for_status()

    def test_missing_output_message(self):
        ok = CaptureResult(CaptureStatus.OK, "rpicam-still", returncode=0)

        missing = ok.missing_output()

        assert not missing.ok
        assert missing.status is CaptureStatus.MISSING_OUTPUT
        assert "file not created" in missing.message


class TestWarmup:
    @pytest.mark.asyncio
    async def test_warmup_success_removes_scratch_file(self, fake_camera, tmp_path):
        assert await fake_camera.warmup(scratch_dir=tmp_path) is True

        assert fake_camera.calls[0][2:] == list(WARMUP_CAPTURE_CONFIG)
        assert not (tmp_path / "warmup.jpg").exists()

    @pytest.mark.asyncio
    async def test_warmup_failure_is_not_raised(self, camera_factory, tmp_path):
        camera = camera_factory(returncode=1)

        assert await camera.warmup(scratch_dir=tmp_path) is False
        assert not (tmp_path / "warmup.jpg").exists()
