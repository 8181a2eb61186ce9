"""
Field Normalizer

Pure functions turning noisy source values (lot size text, currency text,
epoch timestamps, half-filled JSON) into canonical numbers and records.

The parse_* functions are total: any input yields a number >= 0, and
"could not parse" is 0 rather than None so callers can do arithmetic
without guarding every field.
"""
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

from ..models import AssessmentRecord, ComparableSale, Provenance, RawRecord

SQFT_PER_SQM = 10.7639
SQFT_PER_ACRE = 43560.0
SQFT_PER_HECTARE = 107639.0

# Longer unit spellings first: the alternation is tried left to right.
_AREA_UNITS = {
    'squarefeet': 1.0,
    'squarefoot': 1.0,
    'squaremetres': SQFT_PER_SQM,
    'squaremeters': SQFT_PER_SQM,
    'sq.ft.': 1.0,
    'sq.ft': 1.0,
    'sqft': 1.0,
    'sq.m': SQFT_PER_SQM,
    'sqm': SQFT_PER_SQM,
    'sq': 1.0,
    'ft2': 1.0,
    'ft²': 1.0,
    'sf': 1.0,
    'm2': SQFT_PER_SQM,
    'm²': SQFT_PER_SQM,
    'acres': SQFT_PER_ACRE,
    'acre': SQFT_PER_ACRE,
    'ac': SQFT_PER_ACRE,
    'hectares': SQFT_PER_HECTARE,
    'hectare': SQFT_PER_HECTARE,
    'ha': SQFT_PER_HECTARE,
}

_LOT_SIZE_WITH_UNIT = re.compile(
    r'(\d+(?:\.\d+)?)(' + '|'.join(re.escape(unit) for unit in _AREA_UNITS) + r')'
)
_DIGIT_RUN = re.compile(r'\d+')
_NUMERIC_RUN = re.compile(r'(\d+(?:\.\d+)?)(?:(thousand|million|mil|k|m)(?![a-z]))?')
_SUFFIX_MULTIPLIERS = {
    'k': 1_000,
    'thousand': 1_000,
    'm': 1_000_000,
    'mil': 1_000_000,
    'million': 1_000_000,
}

DEFAULT_ZONING = "Residential"


def _finite_non_negative(value: float) -> float:
    if math.isnan(value) or math.isinf(value) or value < 0:
        return 0.0
    return float(value)


def parse_lot_size(text: Any) -> float:
    """
    Lot size in square feet from free text ("5,533 sq ft", "0.25 acres",
    "512 m2", "5533"). Returns 0 when nothing numeric is present.
    """
    if isinstance(text, bool) or text is None:
        return 0.0
    if isinstance(text, (int, float)):
        return _finite_non_negative(text)
    if not isinstance(text, str):
        return 0.0

    cleaned = re.sub(r'[,\s]', '', text.lower())

    match = _LOT_SIZE_WITH_UNIT.search(cleaned)
    if match:
        value = float(match.group(1)) * _AREA_UNITS[match.group(2)]
        return _finite_non_negative(round(value, 2))

    match = _DIGIT_RUN.search(cleaned)
    if match:
        return float(int(match.group(0)))

    return 0.0


def parse_currency(text: Any) -> float:
    """
    Dollar amount from text ("$1,234,000", "CAD 950000", "1.2M", "1.2 million").
    Returns 0 when no numeric run is present.
    """
    if isinstance(text, bool) or text is None:
        return 0.0
    if isinstance(text, (int, float)):
        return _finite_non_negative(text)
    if not isinstance(text, str):
        return 0.0

    cleaned = re.sub(r'[$,\s]', '', text.lower())
    match = _NUMERIC_RUN.search(cleaned)
    if not match:
        return 0.0

    value = float(match.group(1)) * _SUFFIX_MULTIPLIERS.get(match.group(2), 1)
    return _finite_non_negative(value)


def estimate_zoning(city: Any, registry=None) -> str:
    """
    Typical single-family zoning code for a city, "Residential" when the
    city is unknown or its configuration names none.

    Cities resolve through the municipal registry, so "Surrey, BC" and
    configured aliases find the same entry as the plain name.
    """
    if not isinstance(city, str) or not city.strip():
        return DEFAULT_ZONING
    if registry is None:
        from ..scrapers.registry import get_municipal_registry
        registry = get_municipal_registry()
    return registry.typical_zoning(city) or DEFAULT_ZONING


def square_metres_to_feet(value: Any) -> float:
    number = to_float(value)
    if not number or number < 0:
        return 0.0
    return round(number * SQFT_PER_SQM, 2)


def to_float(value: Any) -> Optional[float]:
    """Float or None; accepts numbers and numeric strings with separators."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if math.isnan(value) or math.isinf(value):
            return None
        return float(value)
    if isinstance(value, str):
        cleaned = re.sub(r'[$,\s]', '', value)
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None


def to_int(value: Any) -> Optional[int]:
    number = to_float(value)
    if number is None:
        return None
    return int(number)


def parse_date(value: Any) -> Optional[date]:
    """
    Date from ISO strings, datetime/date objects or epoch milliseconds
    (ArcGIS returns dates as epoch ms).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text.replace('Z', '+00:00')).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def _positive_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or value <= 0:
        return None
    return value


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def canonical_address(address: str, city: str) -> str:
    return f"{address.strip()}, {city.strip()}"


def to_assessment_record(raw: RawRecord, address: str, city: str, registry=None) -> AssessmentRecord:
    """
    Build an AssessmentRecord candidate from an adapter hit.

    Values are copied as reported; whether they may be presented as an
    assessment is the integrity guard's decision, not this function's.
    """
    land_value = parse_currency(raw.get('land_value'))
    improvement_value = parse_currency(raw.get('improvement_value'))
    total = parse_currency(raw.get('total_assessed_value'))
    if not total and (land_value or improvement_value):
        total = land_value + improvement_value

    year_built = to_int(raw.get('year_built'))
    legal_description = _text(raw.get('legal_description')) or None

    return AssessmentRecord(
        parcel_id=_text(raw.get('parcel_id')),
        address=_text(raw.get('address')) or canonical_address(address, city),
        land_value=land_value,
        improvement_value=improvement_value,
        total_assessed_value=total,
        lot_size=parse_lot_size(raw.get('lot_size')),
        zoning=_text(raw.get('zoning')) or estimate_zoning(city, registry),
        property_type=_text(raw.get('property_type')) or "Unknown",
        provenance=Provenance(
            source=raw.source,
            kind=raw.kind,
            note=_text(raw.get('note')),
        ),
        year_built=year_built if year_built and year_built > 0 else None,
        building_area=_positive_or_none(to_float(raw.get('building_area'))),
        legal_description=legal_description,
    )


def to_comparable_sale(raw: RawRecord) -> ComparableSale:
    bedrooms = to_int(raw.get('bedrooms'))
    bathrooms = to_float(raw.get('bathrooms'))
    days_on_market = to_int(raw.get('days_on_market'))

    return ComparableSale(
        property_type=_text(raw.get('property_type')) or "Residential",
        mls_number=_text(raw.get('mls_number')) or None,
        address=_text(raw.get('address')) or None,
        list_price=_positive_or_none(parse_currency(raw.get('list_price'))),
        sold_price=_positive_or_none(parse_currency(raw.get('sold_price'))),
        days_on_market=days_on_market if days_on_market is not None and days_on_market >= 0 else None,
        list_date=parse_date(raw.get('list_date')),
        sold_date=parse_date(raw.get('sold_date')),
        bedrooms=bedrooms if bedrooms and bedrooms > 0 else None,
        bathrooms=bathrooms if bathrooms and bathrooms > 0 else None,
        floor_area=_positive_or_none(parse_lot_size(raw.get('floor_area'))),
    )
