"""
Government Assessment Search Adapter

Two-step title/assessment registry search:
1. POST {base}/addressSearch -> candidate parcels with PIDs
2. POST {base}/titleSearch (searchType=PID, includeAssessment) -> detail

Not configured (no base URL) means absent, not unavailable.
"""
from typing import Any, Dict, Optional

import structlog

from ...models import RawRecord, SourceKind
from ...utils.address_matcher import get_address_matcher
from ..base.source_adapter import HttpSourceAdapter, SourceAdapter

logger = structlog.get_logger(__name__)


class AssessmentSearchAdapter(HttpSourceAdapter, SourceAdapter):
    """Generic government assessment search (address -> PID -> assessment)."""

    name = "assessment_search"
    kind = SourceKind.GOVERNMENT_ASSESSMENT

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.base_url = base_url.rstrip('/') if base_url else None
        self.api_key = api_key

    def _headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f"Bearer {self.api_key}"
        return headers

    async def lookup(self, address: str, city: str) -> Optional[RawRecord]:
        if not self.base_url:
            logger.debug("assessment_search_not_configured")
            return None

        pid = await self._find_pid(address, city)
        if not pid:
            return None

        detail = self._expect_mapping(await self._post_json(
            f"{self.base_url}/titleSearch",
            {
                'searchType': 'PID',
                'searchValue': pid,
                'includeAssessment': True,
                'includePropertyDetails': True,
            },
            headers=self._headers(),
        ))

        fields = self._parse_title(detail)
        fields.setdefault('parcel_id', pid)
        logger.info("assessment_search_hit", parcel_id=fields['parcel_id'])
        return RawRecord(source=self.name, kind=self.kind, fields=fields)

    async def _find_pid(self, address: str, city: str) -> Optional[str]:
        payload = self._expect_mapping(await self._post_json(
            f"{self.base_url}/addressSearch",
            {'streetAddress': address, 'city': city, 'province': 'BC'},
            headers=self._headers(),
        ))

        matcher = get_address_matcher()
        for candidate in self._expect_list(payload.get('properties'), 'properties'):
            if not isinstance(candidate, dict) or not candidate.get('pid'):
                continue
            candidate_address = candidate.get('streetAddress') or candidate.get('address')
            # Results without an address are already scoped to the query
            if candidate_address and not matcher.is_exact_match(address, candidate_address):
                continue
            return str(candidate['pid'])

        return None

    def _parse_title(self, data: Dict[str, Any]) -> Dict[str, Any]:
        mapping = {
            'parcel_id': 'pid',
            'legal_description': 'legalDescription',
            'property_type': 'propertyClass',
            'land_value': 'marketValueLand',
            'improvement_value': 'marketValueImprovements',
            'total_assessed_value': 'assessedValue',
            'lot_size': 'lotSize',
            'year_built': 'yearBuilt',
            'building_area': 'buildingArea',
            'address': 'streetAddress',
        }
        fields: Dict[str, Any] = {}
        for canonical, key in mapping.items():
            value = data.get(key)
            if value not in (None, ""):
                fields[canonical] = value
        return fields
