#!/usr/bin/env python3
"""
Whitted - a recursive ray tracer.

Main entry point for rendering scene files:

    python main.py scene.txt
"""

import sys

from whitted.cli import main


if __name__ == '__main__':
    sys.exit(main())
