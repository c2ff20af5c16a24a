"""
Durable storage for url mappings and click events.

Implements the Strategy Pattern so services only see the UrlStore interface.
"""

from .strategies import UrlStore, SQLAlchemyUrlStore

__all__ = [
    "UrlStore",
    "SQLAlchemyUrlStore",
]
