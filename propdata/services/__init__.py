"""Resolution services: orchestrator, integrity guard, cache and result assembly."""

from .integrity_guard import IntegrityGuard
from .lookup_cache import LookupCache
from .result_composer import compose_result
from .property_resolver import PropertyDataResolver, resolve

__all__ = [
    'IntegrityGuard',
    'LookupCache',
    'compose_result',
    'PropertyDataResolver',
    'resolve',
]
