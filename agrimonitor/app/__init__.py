"""Application entry point for the AgriMonitor service."""

from .master import main, parse_args, run

__all__ = ["main", "parse_args", "run"]
