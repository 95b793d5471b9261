"""Runtime settings assembled from constants, config file and CLI flags."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from . import constants
from .config_manager import ConfigManager, get_config_manager
from .paths import resolve_path


@dataclass(frozen=True)
class Settings:
    host: str = constants.DEFAULT_HOST
    port: int = constants.PORT
    sensor_type: int = constants.SENSOR_TYPE
    gpio_pin: int = constants.GPIO_PIN
    capture_command: str = constants.CAPTURE_COMMAND
    capture_interval_ms: int = constants.CAPTURE_INTERVAL_MS
    latest_photo_path: Path = field(default_factory=lambda: resolve_path(constants.LATEST_PHOTO_PATH))
    public_dir: Path = field(default_factory=lambda: resolve_path(constants.PUBLIC_DIR))
    data_file: Path = field(default_factory=lambda: resolve_path(constants.DATA_FILE))
    periodic_capture: bool = True
    warmup_camera: bool = True
    log_level: str = "info"
    log_file: Optional[Path] = None

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def settings_from_config(
    config: Mapping[str, str],
    config_manager: Optional[ConfigManager] = None,
) -> Settings:
    """Build :class:`Settings` from a parsed ``key = value`` mapping."""
    cm = config_manager or get_config_manager()
    cfg: Dict[str, str] = dict(config)
    base = Settings()

    log_file = cm.get_str(cfg, "log_file", "")

    return Settings(
        host=cm.get_str(cfg, "host", base.host),
        port=cm.get_int(cfg, "port", base.port),
        sensor_type=cm.get_int(cfg, "sensor_type", base.sensor_type),
        gpio_pin=cm.get_int(cfg, "gpio_pin", base.gpio_pin),
        capture_command=cm.get_str(cfg, "capture_command", base.capture_command),
        capture_interval_ms=cm.get_int(cfg, "capture_interval_ms", base.capture_interval_ms),
        latest_photo_path=resolve_path(cm.get_str(cfg, "latest_photo_path", constants.LATEST_PHOTO_PATH)),
        public_dir=resolve_path(cm.get_str(cfg, "public_dir", constants.PUBLIC_DIR)),
        data_file=resolve_path(cm.get_str(cfg, "data_file", constants.DATA_FILE)),
        periodic_capture=cm.get_bool(cfg, "periodic_capture", base.periodic_capture),
        warmup_camera=cm.get_bool(cfg, "warmup_camera", base.warmup_camera),
        log_level=cm.get_str(cfg, "log_level", base.log_level).lower(),
        log_file=resolve_path(log_file) if log_file else None,
    )


__all__ = ["Settings", "settings_from_config"]
