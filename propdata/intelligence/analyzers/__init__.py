"""
Intelligence Analyzers

Analysis components that turn normalized property records into
summary statistics.
"""

from .market_analyzer import MarketAnalyzer

__all__ = [
    'MarketAnalyzer',
]
