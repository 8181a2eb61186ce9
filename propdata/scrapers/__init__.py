# Source adapters for property data resolution

# Base capabilities
from .base.source_adapter import ComparablesSource, HttpSourceAdapter, SourceAdapter

# Municipal portal registry
from .registry import City, MunicipalRegistry

# Data source adapters
from .data_sources.listing_feed import ActiveListingAdapter, ActiveListingComparables, SoldListingAdapter
from .data_sources.municipal_open_data import MunicipalOpenDataAdapter
from .data_sources.assessment_search import AssessmentSearchAdapter
from .data_sources.gis_parcel import GISParcelAdapter

__all__ = [
    # Base
    'SourceAdapter',
    'ComparablesSource',
    'HttpSourceAdapter',
    # Registry
    'City',
    'MunicipalRegistry',
    # Data Sources
    'ActiveListingAdapter',
    'ActiveListingComparables',
    'SoldListingAdapter',
    'MunicipalOpenDataAdapter',
    'AssessmentSearchAdapter',
    'GISParcelAdapter',
]
