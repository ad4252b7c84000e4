"""
Data models shared across the package.
"""

from .documents import NamedDocument

__all__ = ["NamedDocument"]
