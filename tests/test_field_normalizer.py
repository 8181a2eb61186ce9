from datetime import date

import pytest

from propdata.models import RawRecord, SourceKind
from propdata.scrapers.registry import MunicipalRegistry
from propdata.utils.field_normalizer import (
    estimate_zoning,
    parse_currency,
    parse_date,
    parse_lot_size,
    square_metres_to_feet,
    to_assessment_record,
    to_comparable_sale,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("5,533 sq ft", 5533.0),
        ("5533sqft", 5533.0),
        ("1,200 sf", 1200.0),
        ("4000 ft2", 4000.0),
        ("Lot 33 x 122", 33.0),
        ("5533", 5533.0),
    ],
)
def test_parse_lot_size_square_feet(text, expected):
    assert parse_lot_size(text) == expected


def test_parse_lot_size_converts_metric_and_acres():
    assert parse_lot_size("512 m2") == pytest.approx(5511.12, abs=0.01)
    assert parse_lot_size("0.25 acres") == pytest.approx(10890.0)
    assert parse_lot_size("1 ha") == pytest.approx(107639.0)


@pytest.mark.parametrize("text", ["", "letters", "n/a", None, [], {"size": 1}, True])
def test_parse_lot_size_is_total(text):
    assert parse_lot_size(text) == 0.0


def test_parse_lot_size_numbers_pass_through_non_negative():
    assert parse_lot_size(4200) == 4200.0
    assert parse_lot_size(7.5) == 7.5
    assert parse_lot_size(-10) == 0.0
    assert parse_lot_size(float("nan")) == 0.0


@pytest.mark.parametrize(
    "text,expected",
    [
        ("$1,234,000", 1234000.0),
        ("CAD 950000", 950000.0),
        ("1.2M", 1200000.0),
        ("850k", 850000.0),
        ("1.5 million", 1500000.0),
        ("$2.5 mil", 2500000.0),
        ("450 thousand", 450000.0),
        ("$1,234,000 monthly", 1234000.0),
        (500, 500.0),
    ],
)
def test_parse_currency(text, expected):
    assert parse_currency(text) == expected


@pytest.mark.parametrize("text", ["", "n/a", "TBD", None, -3, object()])
def test_parse_currency_is_total(text):
    assert parse_currency(text) == 0.0


def test_estimate_zoning_from_city_configuration():
    assert estimate_zoning("Maple Ridge") == "RS-1"
    assert estimate_zoning("  VANCOUVER ") == "RT-1"
    assert estimate_zoning("burnaby") == "R5"
    assert estimate_zoning("Richmond") == "RCH"
    assert estimate_zoning("Surrey") == "RF"
    assert estimate_zoning("Kelowna") == "Residential"
    assert estimate_zoning(None) == "Residential"


def test_estimate_zoning_resolves_province_suffix_and_aliases():
    assert estimate_zoning("Surrey, BC") == "RF"
    assert estimate_zoning("Burnaby B.C.") == "R5"
    assert estimate_zoning("mapleridge") == "RS-1"


def test_estimate_zoning_with_injected_registry(registry):
    assert estimate_zoning("Richmond", registry) == "RCH"
    assert estimate_zoning("Richmond", MunicipalRegistry()) == "Residential"


def test_parse_date_formats():
    assert parse_date("2024-03-01") == date(2024, 3, 1)
    assert parse_date("2024-03-01T10:15:00Z") == date(2024, 3, 1)
    assert parse_date(1709251200000) == date(2024, 3, 1)
    assert parse_date(date(2023, 5, 6)) == date(2023, 5, 6)
    assert parse_date("soon") is None
    assert parse_date("") is None
    assert parse_date(None) is None


def test_square_metres_to_feet():
    assert square_metres_to_feet(100) == pytest.approx(1076.39)
    assert square_metres_to_feet("bad") == 0.0
    assert square_metres_to_feet(None) == 0.0


def test_to_assessment_record_fills_total_and_zoning():
    raw = RawRecord(
        source="municipal_open_data",
        kind=SourceKind.MUNICIPAL_OPEN_DATA,
        fields={
            "parcel_id": "012-345-678",
            "land_value": "500,000",
            "improvement_value": 250000,
            "lot_size": "5,533 sq ft",
            "year_built": "1987",
        },
    )

    record = to_assessment_record(raw, "4567 Main Street", "Burnaby")

    assert record.parcel_id == "012-345-678"
    assert record.total_assessed_value == 750000.0
    assert record.lot_size == 5533.0
    assert record.zoning == "R5"
    assert record.property_type == "Unknown"
    assert record.year_built == 1987
    assert record.address == "4567 Main Street, Burnaby"
    assert record.provenance.source == "municipal_open_data"
    assert record.provenance.kind is SourceKind.MUNICIPAL_OPEN_DATA


def test_to_assessment_record_keeps_reported_total():
    raw = RawRecord(
        source="assessment_search",
        kind=SourceKind.GOVERNMENT_ASSESSMENT,
        fields={"land_value": 1, "improvement_value": 1, "total_assessed_value": "$900,000", "zoning": "RS-1"},
    )

    record = to_assessment_record(raw, "1 Oak St", "Coquitlam")

    assert record.total_assessed_value == 900000.0
    assert record.zoning == "RS-1"


def test_to_comparable_sale_normalizes_fields():
    raw = RawRecord(
        source="sold_listings",
        kind=SourceKind.LISTING_DERIVED,
        fields={
            "mls_number": "R2871234",
            "sold_price": "$1,100,000",
            "list_price": "1,150,000",
            "floor_area": "2,000 sq ft",
            "days_on_market": "21",
            "list_date": "2024-01-10",
            "sold_date": "2024-01-31",
            "bedrooms": "4",
            "bathrooms": "2.5",
        },
    )

    sale = to_comparable_sale(raw)

    assert sale.mls_number == "R2871234"
    assert sale.sold_price == 1100000.0
    assert sale.list_price == 1150000.0
    assert sale.usable_price == 1100000.0
    assert sale.floor_area == 2000.0
    assert sale.days_on_market == 21
    assert sale.list_date == date(2024, 1, 10)
    assert sale.sold_date == date(2024, 1, 31)
    assert sale.bedrooms == 4
    assert sale.bathrooms == 2.5
    assert sale.property_type == "Residential"


def test_to_comparable_sale_missing_values_are_none():
    sale = to_comparable_sale(RawRecord("sold_listings", SourceKind.LISTING_DERIVED, {"sold_price": "n/a"}))

    assert sale.sold_price is None
    assert sale.usable_price is None
    assert sale.floor_area is None
    assert sale.mls_number is None
