"""
Database models for the shortener.

`urls` holds the code -> url mappings; `clicks` is the append-only
click log used for per-day statistics.
"""

from .url import UrlMapping
from .click import Click

__all__ = ["UrlMapping", "Click"]
