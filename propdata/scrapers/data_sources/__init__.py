"""Data source adapters"""

from .listing_feed import ActiveListingAdapter, ActiveListingComparables, SoldListingAdapter
from .municipal_open_data import MunicipalOpenDataAdapter
from .assessment_search import AssessmentSearchAdapter
from .gis_parcel import GISParcelAdapter

__all__ = [
    'ActiveListingAdapter',
    'ActiveListingComparables',
    'SoldListingAdapter',
    'MunicipalOpenDataAdapter',
    'AssessmentSearchAdapter',
    'GISParcelAdapter',
]
