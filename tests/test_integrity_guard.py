import pytest

from propdata.errors import IntegrityViolation
from propdata.models import AssessmentRecord, Provenance, SourceKind
from propdata.services.integrity_guard import GIS_ONLY_NOTE, IntegrityGuard


def make_record(kind, total=900000.0, parcel_id="012-345-678", source="src"):
    return AssessmentRecord(
        parcel_id=parcel_id,
        address="20387 Dale Drive, Maple Ridge",
        land_value=600000.0,
        improvement_value=300000.0,
        total_assessed_value=total,
        lot_size=5533.0,
        zoning="RS-1",
        property_type="Residential",
        provenance=Provenance(source=source, kind=kind),
    )


def test_listing_derived_is_always_rejected():
    guard = IntegrityGuard()

    with pytest.raises(IntegrityViolation) as excinfo:
        guard.accept(make_record(SourceKind.LISTING_DERIVED), SourceKind.LISTING_DERIVED)

    assert excinfo.value.kind == "listing-derived"
    assert excinfo.value.parcel_id == "012-345-678"


def test_listing_derived_rejected_even_without_values():
    guard = IntegrityGuard()
    record = make_record(SourceKind.LISTING_DERIVED, total=0.0, parcel_id="")

    with pytest.raises(IntegrityViolation):
        guard.accept(record, SourceKind.LISTING_DERIVED)


@pytest.mark.parametrize("kind", [SourceKind.GOVERNMENT_ASSESSMENT, SourceKind.MUNICIPAL_OPEN_DATA])
def test_assessment_grade_passes_unchanged(kind):
    record = make_record(kind)

    assert IntegrityGuard().accept(record, kind) == record


def test_gis_parcel_only_has_monetary_values_zeroed():
    record = make_record(SourceKind.GIS_PARCEL_ONLY)

    accepted = IntegrityGuard().accept(record, SourceKind.GIS_PARCEL_ONLY)

    assert accepted.land_value == 0
    assert accepted.improvement_value == 0
    assert accepted.total_assessed_value == 0
    assert accepted.is_partial
    assert accepted.parcel_id == "012-345-678"
    assert accepted.lot_size == 5533.0
    assert accepted.zoning == "RS-1"
    assert accepted.provenance.note == GIS_ONLY_NOTE


def test_total_without_assessment_grade_provenance_is_rejected():
    # Adapter claims assessment grade but the record came from somewhere else
    record = make_record(SourceKind.LISTING_DERIVED)

    with pytest.raises(IntegrityViolation):
        IntegrityGuard().accept(record, SourceKind.GOVERNMENT_ASSESSMENT)


def test_land_value_without_assessment_grade_provenance_is_rejected():
    record = make_record(SourceKind.GIS_PARCEL_ONLY, total=0.0)

    with pytest.raises(IntegrityViolation):
        IntegrityGuard().accept(record, SourceKind.MUNICIPAL_OPEN_DATA)


def test_record_without_values_and_assessment_grade_provenance_passes():
    record = make_record(SourceKind.GIS_PARCEL_ONLY).without_monetary_values("parcel only")

    assert IntegrityGuard().accept(record, SourceKind.MUNICIPAL_OPEN_DATA) == record
