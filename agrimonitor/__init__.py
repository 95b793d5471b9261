"""AgriMonitor: DHT sensor readings and Raspberry Pi camera stills over HTTP."""

from __future__ import annotations

from importlib import metadata
from typing import Optional, Sequence

try:
    __version__ = metadata.version("agrimonitor")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Run the service until interrupted and return its exit code."""
    from .app.master import run as _run

    return _run(list(argv) if argv is not None else None)


__all__ = ["__version__", "run"]
