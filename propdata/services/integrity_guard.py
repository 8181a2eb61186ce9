"""
Integrity Guard

Single checkpoint every assessment candidate passes through before the
resolver may return it. Assessed values must come from an assessment
authority; a listing price or a GIS estimate shown as an assessment is
exactly the fabrication this module exists to stop.
"""
import structlog

from ..errors import IntegrityViolation
from ..models import AssessmentRecord, SourceKind

logger = structlog.get_logger(__name__)

GIS_ONLY_NOTE = "monetary fields withheld: parcel/zoning data only"


class IntegrityGuard:
    """
    Accept, downgrade or reject assessment candidates by source kind

    - listing-derived: always rejected
    - government-assessment / municipal-open-data: passed through unchanged
    - gis-parcel-only: passed through with monetary values zeroed
    """

    def accept(self, candidate: AssessmentRecord, source_kind: SourceKind) -> AssessmentRecord:
        """
        Args:
            candidate: Normalized record built from an adapter hit
            source_kind: Kind of the adapter that produced it

        Returns:
            The record to present, possibly with monetary values removed

        Raises:
            IntegrityViolation: the record may not be presented as an assessment
        """
        source = candidate.provenance.source

        if source_kind == SourceKind.LISTING_DERIVED:
            self._reject(candidate, source_kind, "listing data is not an assessment")

        if source_kind == SourceKind.GIS_PARCEL_ONLY:
            return candidate.without_monetary_values(GIS_ONLY_NOTE)

        if source_kind.is_assessment_grade and candidate.provenance.kind.is_assessment_grade:
            return candidate

        if not candidate.is_partial:
            self._reject(candidate, source_kind, "monetary values without assessment-grade provenance")

        logger.debug("assessment_candidate_accepted", source=source, kind=source_kind.value)
        return candidate

    def _reject(self, candidate: AssessmentRecord, source_kind: SourceKind, reason: str) -> None:
        logger.warning(
            "assessment_candidate_rejected",
            source=candidate.provenance.source,
            kind=source_kind.value,
            parcel_id=candidate.parcel_id or None,
            total_assessed_value=candidate.total_assessed_value,
            reason=reason
        )
        raise IntegrityViolation(
            candidate.provenance.source,
            source_kind.value,
            reason,
            parcel_id=candidate.parcel_id or None
        )
