"""Data access repositories for the songs catalogue."""

from .songs import SongRepository

__all__ = [
    "SongRepository",
]
