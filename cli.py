#!/usr/bin/env python
"""
webperf CLI entry point.

Usage:
    python cli.py analyze https://example.com
    python cli.py throttle https://example.com --preset slow-3g
    python cli.py load https://example.com -c 2 -n 3 --delay 1000
    python cli.py mobile https://example.com
    python cli.py --json compare https://a.example https://b.example
"""

from src.cli.app import main

if __name__ == "__main__":
    main()
