import asyncio
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import aiofiles

from agrimonitor.core.logging_utils import get_module_logger


logger = get_module_logger("ConfigManager")

TRUE_VALUES = frozenset({'true', '1', 'yes', 'on'})


class ConfigManager:
    """Reader for the flat ``key = value`` config file.

    Blank lines and ``#`` comments are ignored, inline comments are
    stripped, and matching single or double quotes around a value are
    removed. All values come back as strings; use the typed getters to
    convert them.
    """

    # ------------------------------------------------------------------
    # Parsing

    @staticmethod
    def _parse_line(raw_line: str) -> Optional[Tuple[str, str]]:
        line = raw_line.split('#', 1)[0].strip()
        if '=' not in line:
            return None

        key, _, value = line.partition('=')
        key, value = key.strip(), value.strip()
        if not key:
            return None

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]
        return key, value

    def parse_config_lines(self, lines: Iterable[str]) -> Dict[str, str]:
        pairs = (self._parse_line(line) for line in lines)
        return dict(pair for pair in pairs if pair is not None)

    async def read_config_async(self, config_path: Path) -> Dict[str, str]:
        """Read a config file without blocking the event loop."""
        if not await asyncio.to_thread(config_path.is_file):
            logger.debug("No config file at %s, using defaults", config_path)
            return {}

        try:
            async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                text = await f.read()
        except OSError as e:
            logger.error("Could not read %s: %s", config_path, e)
            return {}

        config = self.parse_config_lines(text.splitlines())
        logger.info("Loaded %d settings from %s", len(config), config_path)
        return config

    # ------------------------------------------------------------------
    # Typed getters

    def get_bool(self, config: Dict[str, str], key: str, default: bool = False) -> bool:
        if key not in config:
            return default
        return config[key].strip().lower() in TRUE_VALUES

    def get_int(self, config: Dict[str, str], key: str, default: int = 0) -> int:
        raw = config.get(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            logger.warning("%s = %r is not an integer, falling back to %d", key, raw, default)
            return default

    def get_str(self, config: Dict[str, str], key: str, default: str = "") -> str:
        return config.get(key, default)


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager
