#!/usr/bin/env -S uv run python
"""
dla CLI Tool

Merged, color-tagged logs of many Docker containers in one terminal.
"""

import sys

from dla_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
