#!/usr/bin/env python3
"""Rain alert job for production deployment.

Runs via systemd timer (every 10 minutes) and notifies push subscribers
whose area is about to get rain.

Usage:
    ./scripts/run_rain_alerts.py

In development the same job runs in a background thread started by the app
(src/notifications/scheduler.py).
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.utils.logging import setup_logging


def main() -> int:
    """Run one rain alert pass."""
    from src.notifications.rain_alerts import check_rain_alerts

    setup_logging()
    result = check_rain_alerts()
    return 1 if result.fetch_errors and result.fetch_errors == result.groups else 0


if __name__ == "__main__":
    sys.exit(main())
