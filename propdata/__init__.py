"""
propdata - BC property data resolution

Resolves a street address and city into an assessed-property record and
comparable sales from listing feeds, municipal open data, the government
assessment search and GIS parcel services.
"""

from .errors import (
    ConfigurationError,
    IntegrityViolation,
    InvalidInputError,
    PropertyDataError,
    SourceUnavailableError,
)
from .models import (
    AssessmentRecord,
    ComparableSale,
    MarketStatistics,
    MarketTrend,
    PropertyDataResult,
    Provenance,
    RawRecord,
    SourceKind,
    SourceOutcome,
    TraceEntry,
)
from .services.property_resolver import PropertyDataResolver, resolve

__version__ = "1.0.0"

__all__ = [
    'PropertyDataResolver',
    'resolve',
    # Models
    'AssessmentRecord',
    'ComparableSale',
    'MarketStatistics',
    'MarketTrend',
    'PropertyDataResult',
    'Provenance',
    'RawRecord',
    'SourceKind',
    'SourceOutcome',
    'TraceEntry',
    # Errors
    'PropertyDataError',
    'InvalidInputError',
    'ConfigurationError',
    'SourceUnavailableError',
    'IntegrityViolation',
]
