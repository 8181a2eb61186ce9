"""Assemble the immutable PropertyDataResult returned to callers."""
from typing import Iterable, Optional

from ..models import (
    AssessmentRecord,
    ComparableSale,
    MarketStatistics,
    PropertyDataResult,
    TraceEntry,
)


def compose_result(
    assessment: Optional[AssessmentRecord],
    comparables: Iterable[ComparableSale],
    market: Optional[MarketStatistics] = None,
    trace: Iterable[TraceEntry] = ()
) -> PropertyDataResult:
    """
    Pure assembly, no business rules. A partial (GIS-only) assessment
    stays a record with zeroed values; a missing one stays None.
    """
    return PropertyDataResult(
        assessment=assessment,
        comparables=tuple(comparables),
        market=market if market is not None else MarketStatistics.empty(),
        trace=tuple(trace),
    )
