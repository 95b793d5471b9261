"""Fixed defaults for the AgriMonitor service.

Every value here can be overridden from ``config.txt`` or the command line;
see :mod:`agrimonitor.core.settings`.
"""

from typing import Dict, Tuple

# Server
DEFAULT_HOST = "0.0.0.0"
PORT = 3000

# DHT sensor (Adafruit_DHT sensor codes: 11, 22, 2302)
SENSOR_TYPE = 22
GPIO_PIN = 2
SENSOR_ERROR_VALUE = "[error]"
DATETIME_FORMAT = "%Y/%m/%d %H:%M:%S"

# Camera
CAPTURE_COMMAND = "rpicam-still"
CAPTURE_INTERVAL_MS = 60_000
LATEST_PHOTO_PATH = "public/latest.jpg"
PHOTO_TMP_PREFIX = "photo_"
WARMUP_FILENAME = "warmup.jpg"

CapturePreset = Tuple[str, ...]

# Full-resolution still for GET /photo
CAPTURE_CONFIG: CapturePreset = (
    "--quality", "90",
    "--timeout", "2000",
    "--width", "2304",
    "--height", "1296",
    "--nopreview",
)

# Quick still for GET /photo/fast: skip the AE/AWB settle delay
FAST_CAPTURE_CONFIG: CapturePreset = (
    "--quality", "80",
    "--timeout", "1",
    "--width", "1280",
    "--height", "720",
    "--nopreview",
    "--immediate",
)

# Interval capture written to LATEST_PHOTO_PATH
PERIODIC_CAPTURE_CONFIG: CapturePreset = (
    "--quality", "85",
    "--timeout", "1000",
    "--width", "1920",
    "--height", "1080",
    "--nopreview",
)

WARMUP_CAPTURE_CONFIG: CapturePreset = (
    "--timeout", "100",
    "--nopreview",
    "--width", "320",
    "--height", "240",
)

CAPTURE_PRESETS: Dict[str, CapturePreset] = {
    "default": CAPTURE_CONFIG,
    "fast": FAST_CAPTURE_CONFIG,
    "periodic": PERIODIC_CAPTURE_CONFIG,
    "warmup": WARMUP_CAPTURE_CONFIG,
}

# Static files and the JSON document store
PUBLIC_DIR = "public"
DATA_FILE = "json/db.json"

STREAM_CHUNK_SIZE = 64 * 1024
