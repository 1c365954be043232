"""
webperf CLI - command-line front end of the performance engine.

Commands: analyze, throttle, load, mobile and compare, each rendered as
rich tables or as JSON with --json.
"""

from .app import main
from .output import ResultRenderer

__all__ = [
    "main",
    "ResultRenderer",
]
