"""
Domain models for property data resolution.

Everything here is a frozen dataclass: a resolution builds these once and
hands them to the caller, nothing mutates them afterwards.
"""
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class SourceKind(str, Enum):
    """What kind of source produced a record."""
    LISTING_DERIVED = "listing-derived"
    GOVERNMENT_ASSESSMENT = "government-assessment"
    MUNICIPAL_OPEN_DATA = "municipal-open-data"
    GIS_PARCEL_ONLY = "gis-parcel-only"

    @property
    def is_assessment_grade(self) -> bool:
        return self in (SourceKind.GOVERNMENT_ASSESSMENT, SourceKind.MUNICIPAL_OPEN_DATA)


class MarketTrend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


class SourceOutcome(str, Enum):
    """Outcome of consulting one adapter during a resolution."""
    HIT = "hit"
    ABSENT = "absent"
    UNAVAILABLE = "unavailable"
    REJECTED = "rejected"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Provenance:
    source: str
    kind: SourceKind
    note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {'source': self.source, 'kind': self.kind.value, 'note': self.note}


@dataclass(frozen=True)
class RawRecord:
    """Adapter output before normalization. `fields` is treated as read-only."""
    source: str
    kind: SourceKind
    fields: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)


@dataclass(frozen=True)
class AssessmentRecord:
    """
    Parcel assessment as reported by a source.

    total_assessed_value == 0 means "unknown/unassessed". A non-zero value
    is only legitimate when provenance.kind is assessment-grade; the
    integrity guard enforces that before a record leaves the resolver.
    """
    parcel_id: str
    address: str
    land_value: float
    improvement_value: float
    total_assessed_value: float
    lot_size: float
    zoning: str
    property_type: str
    provenance: Provenance
    year_built: Optional[int] = None
    building_area: Optional[float] = None
    legal_description: Optional[str] = None

    @property
    def is_partial(self) -> bool:
        """Record exists but carries no monetary values (e.g. GIS parcel only)."""
        return (
            self.land_value == 0
            and self.improvement_value == 0
            and self.total_assessed_value == 0
        )

    def without_monetary_values(self, note: str) -> "AssessmentRecord":
        provenance = replace(self.provenance, note=note)
        return replace(
            self,
            land_value=0.0,
            improvement_value=0.0,
            total_assessed_value=0.0,
            provenance=provenance,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'parcel_id': self.parcel_id,
            'address': self.address,
            'land_value': self.land_value,
            'improvement_value': self.improvement_value,
            'total_assessed_value': self.total_assessed_value,
            'lot_size': self.lot_size,
            'zoning': self.zoning,
            'property_type': self.property_type,
            'year_built': self.year_built,
            'building_area': self.building_area,
            'legal_description': self.legal_description,
            'provenance': self.provenance.to_dict(),
        }


@dataclass(frozen=True)
class ComparableSale:
    property_type: str = "Residential"
    mls_number: Optional[str] = None
    address: Optional[str] = None
    list_price: Optional[float] = None
    sold_price: Optional[float] = None
    days_on_market: Optional[int] = None
    list_date: Optional[date] = None
    sold_date: Optional[date] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    floor_area: Optional[float] = None

    @property
    def usable_price(self) -> Optional[float]:
        if self.sold_price and self.sold_price > 0:
            return self.sold_price
        if self.list_price and self.list_price > 0:
            return self.list_price
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mls_number': self.mls_number,
            'address': self.address,
            'list_price': self.list_price,
            'sold_price': self.sold_price,
            'days_on_market': self.days_on_market,
            'list_date': self.list_date.isoformat() if self.list_date else None,
            'sold_date': self.sold_date.isoformat() if self.sold_date else None,
            'property_type': self.property_type,
            'bedrooms': self.bedrooms,
            'bathrooms': self.bathrooms,
            'floor_area': self.floor_area,
        }


@dataclass(frozen=True)
class MarketStatistics:
    average_price_per_area: float = 0.0
    trend: MarketTrend = MarketTrend.STABLE
    average_days_on_market: float = 0.0
    price_range: Tuple[float, float] = (0.0, 0.0)

    @classmethod
    def empty(cls) -> "MarketStatistics":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'average_price_per_area': self.average_price_per_area,
            'trend': self.trend.value,
            'average_days_on_market': self.average_days_on_market,
            'price_range': {'min': self.price_range[0], 'max': self.price_range[1]},
        }


@dataclass(frozen=True)
class TraceEntry:
    """One adapter consulted during a resolution, and what came of it."""
    source: str
    chain: str
    outcome: SourceOutcome
    detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'source': self.source,
            'chain': self.chain,
            'outcome': self.outcome.value,
            'detail': self.detail,
        }


@dataclass(frozen=True)
class PropertyDataResult:
    assessment: Optional[AssessmentRecord]
    comparables: Tuple[ComparableSale, ...]
    market: MarketStatistics
    trace: Tuple[TraceEntry, ...] = ()

    @property
    def has_assessment(self) -> bool:
        return self.assessment is not None

    @property
    def needs_manual_entry(self) -> bool:
        """True when the user has to type assessed values in themselves."""
        return self.assessment is None or self.assessment.is_partial

    def to_dict(self) -> Dict[str, Any]:
        return {
            'assessment': self.assessment.to_dict() if self.assessment else None,
            'comparables': [comp.to_dict() for comp in self.comparables],
            'market': self.market.to_dict(),
            'needs_manual_entry': self.needs_manual_entry,
            'trace': [entry.to_dict() for entry in self.trace],
        }
