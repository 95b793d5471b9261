"""Allow ``python -m agrimonitor`` to launch the service."""

from __future__ import annotations

import sys

from agrimonitor.app.master import run


if __name__ == "__main__":
    sys.exit(run(sys.argv[1:]))
