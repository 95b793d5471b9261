"""Hardware wrappers: the DHT sensor and the still camera."""

from .dht_sensor import (
    DHT_AVAILABLE,
    DriverResult,
    SensorReader,
    SensorReading,
    adafruit_driver,
    format_datetime,
    format_measurement,
)
from .rpicam import CaptureResult, CaptureStatus, StillCamera, build_arguments

__all__ = [
    "DHT_AVAILABLE",
    "DriverResult",
    "SensorReader",
    "SensorReading",
    "adafruit_driver",
    "format_datetime",
    "format_measurement",
    "CaptureResult",
    "CaptureStatus",
    "StillCamera",
    "build_arguments",
]
