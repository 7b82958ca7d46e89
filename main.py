#!/usr/bin/env python3
"""
ShieldFlow VPN - simulated VPN client dashboard
"""

import sys
import signal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from shieldflow.cli.interface import main as cli_main


def signal_handler(signum, frame):
    """Turn SIGTERM into a normal exit so running sessions are torn down"""
    print(f"\nReceived signal {signum}, shutting down...")
    sys.exit(0)


def main():
    """Main entry point"""
    signal.signal(signal.SIGTERM, signal_handler)
    sys.exit(cli_main())


if __name__ == "__main__":
    main()
