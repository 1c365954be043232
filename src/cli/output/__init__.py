"""CLI output module."""

from .renderer import ResultRenderer

__all__ = [
    "ResultRenderer",
]
