"""Centralized path constants for the AgriMonitor service."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT = PACKAGE_ROOT.parent

# Configuration
CONFIG_PATH = PROJECT_ROOT / "config.txt"


def resolve_path(value: Union[str, Path], base: Optional[Path] = None) -> Path:
    """Return ``value`` as an absolute path, anchoring relative paths at ``base``.

    ``base`` defaults to the current working directory, which is where the
    service expects its ``public/`` and ``json/`` directories to live.
    """
    path = Path(value).expanduser()
    if path.is_absolute():
        return path
    return (base or Path.cwd()) / path


__all__ = [
    'PACKAGE_ROOT',
    'PROJECT_ROOT',
    'CONFIG_PATH',
    'resolve_path',
]
