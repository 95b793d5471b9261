"""Pytest fixtures for API unit tests.

Provides a mock API controller and an app factory so the HTTP routes can be
exercised with aiohttp's test client, without a camera or DHT sensor.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import pytest
from aiohttp import web

from agrimonitor.core.api.controller import APIController
from agrimonitor.core.api.server import create_app
from agrimonitor.core.document_store import JSONDocumentStore
from agrimonitor.core.exceptions import CaptureError
from agrimonitor.core.settings import Settings


SENSOR_READING = {
    "datetime": "2024/05/01 12:00:00",
    "unixtime": 1714564800,
    "temperature": "21.3",
    "humidity": "55.6",
}


class MockAPIController(APIController):
    """APIController with stubbed sensor and camera operations.

    Document operations go to a real JSONDocumentStore in a temp directory.
    """

    def __init__(self, tmp_path: Path):
        super().__init__(
            settings=Settings(data_file=tmp_path / "db.json"),
            sensor=None,
            camera=None,
            documents=JSONDocumentStore(tmp_path / "db.json"),
            photo_dir=tmp_path,
        )
        self.sensor_reading: Dict[str, Any] = dict(SENSOR_READING)
        self.sensor_error: Optional[Exception] = None

        self.photo_bytes = b"\xff\xd8\xff\xe0mock-photo\xff\xd9"
        self.capture_error: Optional[str] = None
        self.capture_presets: list = []
        self.captured_paths: list = []

    async def read_sensor(self) -> Dict[str, Any]:
        if self.sensor_error is not None:
            raise self.sensor_error
        return dict(self.sensor_reading)

    async def capture_photo(self, preset: str = "default") -> Path:
        self.capture_presets.append(preset)
        if self.capture_error is not None:
            raise CaptureError(self.capture_error)

        path = self.new_photo_path()
        path.write_bytes(self.photo_bytes)
        self.captured_paths.append(path)
        return path


@pytest.fixture
def mock_controller(tmp_path: Path) -> MockAPIController:
    """Create a mock API controller backed by a temp directory."""
    return MockAPIController(tmp_path)


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """A static directory holding a single latest.jpg."""
    path = tmp_path / "public"
    path.mkdir()
    (path / "latest.jpg").write_bytes(b"\xff\xd8latest\xff\xd9")
    return path


@pytest.fixture
def app_factory(mock_controller: MockAPIController, public_dir: Path):
    """Build an aiohttp app around the mock controller."""

    def create_test_app(controller: Optional[APIController] = None, debug: bool = False) -> web.Application:
        return create_app(controller or mock_controller, public_dir=public_dir, debug=debug)

    return create_test_app
