"""
API Controller - Thin async facade over the sensor, camera and document store.

Routes call into this class instead of touching hardware wrappers directly,
which keeps the handlers free of business logic and lets tests swap in a
mock controller.
"""

import asyncio
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, Optional

from agrimonitor.core.constants import CAPTURE_PRESETS, PHOTO_TMP_PREFIX
from agrimonitor.core.devices.dht_sensor import SensorReader
from agrimonitor.core.devices.rpicam import StillCamera
from agrimonitor.core.document_store import JSONDocumentStore
from agrimonitor.core.logging_utils import get_module_logger
from agrimonitor.core.settings import Settings


logger = get_module_logger("APIController")


class APIController:
    """
    API controller providing the operations behind each HTTP route.

    Sensor reads are blocking driver calls and run in a worker thread;
    captures run as subprocesses awaited on the event loop. Captures are not
    serialized: concurrent photo requests each get their own temporary file.
    """

    def __init__(
        self,
        settings: Settings,
        sensor: SensorReader,
        camera: StillCamera,
        documents: JSONDocumentStore,
        photo_dir: Optional[Path] = None,
    ):
        self.settings = settings
        self.sensor = sensor
        self.camera = camera
        self.documents = documents
        self.photo_dir = Path(photo_dir or tempfile.gettempdir())
        self._last_stamp_ms = 0

    # =========================================================================
    # Sensor
    # =========================================================================

    async def read_sensor(self) -> Dict[str, Any]:
        """Read the DHT sensor once. Driver exceptions propagate."""
        reading = await asyncio.to_thread(
            self.sensor.read, self.settings.sensor_type, self.settings.gpio_pin
        )
        return reading.to_dict()

    # =========================================================================
    # Camera
    # =========================================================================

    def _unique_stamp_ms(self) -> int:
        # Strictly increasing, so two requests in the same millisecond differ.
        stamp = max(time.time_ns() // 1_000_000, self._last_stamp_ms + 1)
        self._last_stamp_ms = stamp
        return stamp

    def new_photo_path(self) -> Path:
        return self.photo_dir / f"{PHOTO_TMP_PREFIX}{self._unique_stamp_ms()}.jpg"

    async def capture_photo(self, preset: str = "default") -> Path:
        """Capture one still to a new temporary file and return its path.

        The caller owns the returned file and must delete it. On failure the
        temporary file is removed and :class:`CaptureError` is raised.
        """
        args = CAPTURE_PRESETS[preset]
        path = self.new_photo_path()

        try:
            result = await self.camera.capture(path, args)
            if result.ok and not await asyncio.to_thread(path.exists):
                result = result.missing_output()
            result.raise_for_status()
        except BaseException:
            # Also on cancellation: the caller never receives the path.
            path.unlink(missing_ok=True)
            raise

        logger.debug("Captured %s with preset '%s'", path, preset)
        return path

    # =========================================================================
    # Documents
    # =========================================================================

    async def get_database(self) -> Dict[str, Any]:
        return await self.documents.get_db()

    async def list_documents(self, collection: str) -> Any:
        return await self.documents.get_collection(collection)

    async def get_document(self, collection: str, doc_id: str) -> Dict[str, Any]:
        return await self.documents.get(collection, doc_id)

    async def create_document(self, collection: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self.documents.create(collection, body)

    async def replace_document(self, collection: str, doc_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self.documents.replace(collection, doc_id, body)

    async def update_document(self, collection: str, doc_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return await self.documents.update(collection, doc_id, body)

    async def delete_document(self, collection: str, doc_id: str) -> None:
        await self.documents.delete(collection, doc_id)

