"""
DHT temperature/humidity sensor reader.

Reads a DHT11/DHT22/AM2302 sensor through the Adafruit_DHT driver and turns
the result into the JSON shape served by ``GET /sensor``. An invalid reading
(the sensor missed its timing window, which DHT parts do regularly) does not
raise: temperature and humidity are replaced by the ``"[error]"`` sentinel so
consumers still receive a timestamped 200 response.
"""

import math
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Optional, Union

from agrimonitor.core.constants import DATETIME_FORMAT, SENSOR_ERROR_VALUE
from agrimonitor.core.exceptions import SensorUnavailableError
from agrimonitor.core.logging_utils import get_module_logger

logger = get_module_logger("DHTSensor")

try:
    import Adafruit_DHT  # type: ignore
    DHT_AVAILABLE = True
except ImportError:
    Adafruit_DHT = None
    DHT_AVAILABLE = False
    logger.debug("Adafruit_DHT not available - sensor reads will fail")

SUPPORTED_SENSOR_KINDS = (11, 22, 2302)


@dataclass(frozen=True)
class DriverResult:
    """Raw result of one driver read."""
    temperature: Optional[float]
    humidity: Optional[float]
    is_valid: bool


@dataclass(frozen=True)
class SensorReading:
    """One timestamped reading, formatted for the HTTP API."""
    datetime: str
    unixtime: int
    temperature: str
    humidity: str

    def to_dict(self) -> Dict[str, Union[str, int]]:
        return asdict(self)


SensorDriver = Callable[[int, int], DriverResult]


def adafruit_driver(sensor_kind: int, pin: int) -> DriverResult:
    """Single read through Adafruit_DHT (never ``read_retry``)."""
    if sensor_kind not in SUPPORTED_SENSOR_KINDS:
        raise ValueError(f"Unsupported DHT sensor type: {sensor_kind}")
    if not DHT_AVAILABLE:
        raise SensorUnavailableError("Adafruit_DHT library is not installed")

    # The library knows AM2302 by the DHT22 code.
    library_kind = {
        11: Adafruit_DHT.DHT11,
        22: Adafruit_DHT.DHT22,
        2302: Adafruit_DHT.AM2302,
    }[sensor_kind]
    humidity, temperature = Adafruit_DHT.read(library_kind, pin)
    return DriverResult(
        temperature=temperature,
        humidity=humidity,
        is_valid=temperature is not None and humidity is not None,
    )


def format_datetime(moment: datetime) -> str:
    """Format as ``YYYY/MM/DD HH:mm:ss`` with zero padded fields."""
    return moment.strftime(DATETIME_FORMAT)


def format_measurement(value: float) -> str:
    """Format ``value`` with exactly one decimal, rounding half away from zero.

    The exact binary value is rounded, so an exact tie such as 0.25 becomes
    "0.3" where ``f"{0.25:.1f}"`` would give "0.2".
    """
    return str(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _is_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _epoch_ms() -> int:
    return time.time_ns() // 1_000_000


class SensorReader:
    """Blocking reader for one DHT sensor.

    Args:
        driver: Callable performing the hardware read. Defaults to
            :func:`adafruit_driver`.
        clock: Returns the current time as epoch milliseconds.
    """

    def __init__(
        self,
        driver: Optional[SensorDriver] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self._driver = driver or adafruit_driver
        self._clock = clock or _epoch_ms

    def read(self, sensor_kind: int, pin: int) -> SensorReading:
        """Read the sensor once.

        Driver exceptions propagate; an invalid reading does not.
        """
        result = self._driver(sensor_kind, pin)

        now_ms = self._clock()
        moment = datetime.fromtimestamp(now_ms / 1000)

        valid = result.is_valid and _is_number(result.temperature) and _is_number(result.humidity)
        if valid:
            temperature = format_measurement(result.temperature)
            humidity = format_measurement(result.humidity)
        else:
            logger.warning("Invalid reading from DHT%d on GPIO %d", sensor_kind, pin)
            temperature = SENSOR_ERROR_VALUE
            humidity = SENSOR_ERROR_VALUE

        return SensorReading(
            datetime=format_datetime(moment),
            unixtime=now_ms // 1000,
            temperature=temperature,
            humidity=humidity,
        )
