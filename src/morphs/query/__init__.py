"""Expose query-building primitives used by morphs models"""

from .builder import Query

__all__ = ["Query"]
