"""
HTTP API for AgriMonitor.

Usage:
    python -m agrimonitor --port 3000
"""

from .server import APIServer, create_app
from .controller import APIController

__all__ = ["APIServer", "APIController", "create_app"]
