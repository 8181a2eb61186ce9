"""Adapter base classes"""

from .source_adapter import ComparablesSource, HttpSourceAdapter, SourceAdapter

__all__ = ['ComparablesSource', 'HttpSourceAdapter', 'SourceAdapter']
