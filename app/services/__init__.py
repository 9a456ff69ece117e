"""Service layer helpers for job processing."""

from . import text_transform

__all__ = [
    "text_transform",
]
