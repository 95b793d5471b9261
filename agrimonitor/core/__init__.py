from .capture_scheduler import PeriodicCapture, start_periodic_capture
from .document_store import JSONDocumentStore
from .exceptions import (
    AgriMonitorError,
    CaptureError,
    DocumentNotFoundError,
    DocumentStoreError,
    SensorError,
    SensorUnavailableError,
)
from .settings import Settings, settings_from_config

__all__ = [
    'PeriodicCapture',
    'start_periodic_capture',
    'JSONDocumentStore',
    'AgriMonitorError',
    'CaptureError',
    'DocumentNotFoundError',
    'DocumentStoreError',
    'SensorError',
    'SensorUnavailableError',
    'Settings',
    'settings_from_config',
]
