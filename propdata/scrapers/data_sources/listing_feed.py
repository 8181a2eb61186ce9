"""
Listing Feed Adapters (REALTOR.ca DDF style)

Two views of the same listing API:
- ActiveListingAdapter: the subject property's own active listing, if any.
  Listing prices are not assessments; records it returns are tagged
  listing-derived and never survive the integrity guard.
- SoldListingAdapter: recent sales in the city, used as comparables.

Listing payloads arrive with camelCase or snake_case keys depending on the
feed version, so both spellings are accepted.
"""
from typing import Any, Dict, List, Optional

import aiohttp
import structlog

from ...errors import SourceUnavailableError
from ...models import RawRecord, SourceKind
from ...utils.address_matcher import get_address_matcher
from ..base.source_adapter import ComparablesSource, HttpSourceAdapter, SourceAdapter

logger = structlog.get_logger(__name__)

DEFAULT_DDF_BASE_URL = "https://ddf.realtor.ca/api/v1"

# canonical key: accepted payload keys, first present wins
LISTING_KEYS = {
    'mls_number': ('mlsNumber', 'mls_number', 'listingId', 'id'),
    'address': ('address', 'fullAddress', 'full_address', 'streetAddress'),
    'list_price': ('price', 'list_price', 'listPrice'),
    'sold_price': ('soldPrice', 'sold_price'),
    'floor_area': ('sqft', 'square_footage', 'squareFootage', 'floorArea'),
    'lot_size': ('lotSize', 'lot_size'),
    'days_on_market': ('daysOnMarket', 'dom', 'days_on_market'),
    'list_date': ('listDate', 'list_date'),
    'sold_date': ('soldDate', 'sold_date'),
    'property_type': ('propertyType', 'property_type'),
    'bedrooms': ('bedrooms', 'beds'),
    'bathrooms': ('bathrooms', 'baths'),
}


def canonicalize_listing(listing: Dict[str, Any]) -> Dict[str, Any]:
    """Map one listing payload onto the canonical RawRecord keys."""
    fields: Dict[str, Any] = {}
    for canonical, candidates in LISTING_KEYS.items():
        for key in candidates:
            value = listing.get(key)
            if value not in (None, ""):
                fields[canonical] = value
                break
    return fields


class ListingFeedClient(HttpSourceAdapter):
    """Authentication and search against the listing API."""

    def __init__(
        self,
        base_url: str = DEFAULT_DDF_BASE_URL,
        username: Optional[str] = None,
        password: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = 10.0,
        **kwargs
    ):
        super().__init__(session=session, timeout=timeout, **kwargs)
        self.base_url = base_url.rstrip('/')
        self.username = username
        self.password = password

    @property
    def is_configured(self) -> bool:
        return bool(self.username and self.password)

    async def _authenticate(self) -> str:
        if not self.is_configured:
            raise SourceUnavailableError(self.name, "listing feed credentials not configured")

        payload = self._expect_mapping(await self._post_json(
            f"{self.base_url}/auth/login",
            {'username': self.username, 'password': self.password},
        ))

        token = payload.get('access_token') or payload.get('accessToken')
        if not token:
            raise SourceUnavailableError(self.name, "login response carried no access token")
        return token

    async def search_listings(self, city: str, status: str, limit: int) -> List[Dict[str, Any]]:
        """Raw listing dicts for a city and status ('Active' or 'Sold')."""
        token = await self._authenticate()

        payload = self._expect_mapping(await self._get_json(
            f"{self.base_url}/listings/search",
            params={'city': city, 'province': 'BC', 'status': status, 'limit': str(limit)},
            headers={'Authorization': f"Bearer {token}"},
        ))

        listings = self._expect_list(payload.get('listings'), 'listings')
        logger.debug("listings_fetched", source=self.name, city=city, status=status, count=len(listings))
        return [listing for listing in listings if isinstance(listing, dict)]


class ActiveListingAdapter(ListingFeedClient, SourceAdapter):
    """The subject property's active listing, matched by exact address."""

    name = "active_listing"
    kind = SourceKind.LISTING_DERIVED

    def __init__(self, *args, scan_limit: int = 50, **kwargs):
        super().__init__(*args, **kwargs)
        self.scan_limit = scan_limit

    async def lookup(self, address: str, city: str) -> Optional[RawRecord]:
        matcher = get_address_matcher()
        listings = await self.search_listings(city, 'Active', self.scan_limit)

        for listing in listings:
            fields = canonicalize_listing(listing)
            if matcher.is_exact_match(address, fields.get('address')):
                # Listing payloads carry asking price and lot size, not assessed values
                fields['total_assessed_value'] = fields.get('list_price')
                fields['note'] = "active listing"
                return RawRecord(source=self.name, kind=self.kind, fields=fields)

        return None


class SoldListingAdapter(ListingFeedClient, ComparablesSource):
    """Recent sales in the city."""

    name = "sold_listings"

    async def search(self, address: str, city: str, limit: int) -> List[RawRecord]:
        listings = await self.search_listings(city, 'Sold', limit)
        return [
            RawRecord(source=self.name, kind=SourceKind.LISTING_DERIVED, fields=canonicalize_listing(listing))
            for listing in listings[:limit]
        ]


class ActiveListingComparables(ListingFeedClient, ComparablesSource):
    """Active listings in the city, offered as comparables alongside sales."""

    name = "active_listings"

    async def search(self, address: str, city: str, limit: int) -> List[RawRecord]:
        listings = await self.search_listings(city, 'Active', limit)
        return [
            RawRecord(source=self.name, kind=SourceKind.LISTING_DERIVED, fields=canonicalize_listing(listing))
            for listing in listings[:limit]
        ]
