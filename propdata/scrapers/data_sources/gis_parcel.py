"""
GIS Parcel Adapter

Last resort of the assessment chain: geocode the address with the BC
Address Geocoder, find the parcel under that point in the DataBC parcel
fabric, then read the zoning code from the city's zoning layer when the
registry has one.

The result carries parcel geometry facts only (parcel id, lot size,
zoning). It is tagged gis-parcel-only so any monetary value is zeroed by
the integrity guard.
"""
from typing import Any, Dict, Optional, Tuple

import structlog

from ...config.schemas import ZoningLayerConfig
from ...errors import SourceUnavailableError
from ...models import RawRecord, SourceKind
from ...utils.field_normalizer import square_metres_to_feet
from ..base.source_adapter import HttpSourceAdapter, SourceAdapter
from ..registry import MunicipalRegistry

logger = structlog.get_logger(__name__)

DEFAULT_GEOCODER_URL = "https://geocoder.api.gov.bc.ca/addresses.json"
DEFAULT_WFS_URL = "https://openmaps.gov.bc.ca/geo/pub/wfs"
PARCEL_FABRIC_LAYER = "pub:WHSE_CADASTRE.PMBC_PARCEL_FABRIC_POLY_SVW"


class GISParcelAdapter(HttpSourceAdapter, SourceAdapter):
    """Geocoder + parcel fabric + municipal zoning layer."""

    name = "gis_parcel"
    kind = SourceKind.GIS_PARCEL_ONLY

    def __init__(
        self,
        registry: MunicipalRegistry,
        geocoder_url: str = DEFAULT_GEOCODER_URL,
        wfs_url: str = DEFAULT_WFS_URL,
        min_score: int = 90,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.registry = registry
        self.geocoder_url = geocoder_url
        self.wfs_url = wfs_url
        self.min_score = min_score

    async def lookup(self, address: str, city: str) -> Optional[RawRecord]:
        location = await self.geocode(address, city)
        if location is None:
            return None
        lng, lat = location

        parcel = await self._find_parcel(lng, lat)
        if parcel is None:
            logger.info("parcel_not_found", address=address, city=city)
            return None

        fields: Dict[str, Any] = {
            'parcel_id': parcel.get('PID_FORMATTED') or parcel.get('PID') or parcel.get('PARCEL_FABRIC_POLY_ID') or "",
            'lot_size': square_metres_to_feet(parcel.get('FEATURE_AREA_SQM')),
            'note': "parcel fabric",
        }
        if parcel.get('PARCEL_CLASS'):
            fields['property_type'] = parcel['PARCEL_CLASS']

        layer = self.registry.zoning_layer(city)
        if layer is not None:
            zoning = await self._zoning_for(layer, address, lng, lat)
            if zoning:
                fields['zoning'] = zoning

        return RawRecord(source=self.name, kind=self.kind, fields=fields)

    async def geocode(self, address: str, city: str) -> Optional[Tuple[float, float]]:
        """
        (lng, lat) of the best geocoder match, or None when there is no
        match or the match scores below min_score. Never falls back to
        city-centre coordinates.
        """
        payload = self._expect_mapping(await self._get_json(
            self.geocoder_url,
            params={'addressString': f"{address}, {city}, BC", 'maxResults': '1'},
        ))

        features = self._expect_list(payload.get('features'), 'features')
        if not features:
            logger.info("geocode_no_match", address=address, city=city)
            return None

        feature = features[0] if isinstance(features[0], dict) else {}
        score = (feature.get('properties') or {}).get('score') or 0
        try:
            score = float(score)
        except (TypeError, ValueError):
            score = 0.0

        if score < self.min_score:
            logger.info("geocode_low_confidence", address=address, city=city, score=score, min_score=self.min_score)
            return None

        coordinates = (feature.get('geometry') or {}).get('coordinates')
        if not isinstance(coordinates, list) or len(coordinates) < 2:
            raise SourceUnavailableError(self.name, "geocoder feature has no coordinates")

        try:
            return float(coordinates[0]), float(coordinates[1])
        except (TypeError, ValueError) as e:
            raise SourceUnavailableError(self.name, "geocoder returned non-numeric coordinates") from e

    async def _find_parcel(self, lng: float, lat: float) -> Optional[Dict[str, Any]]:
        payload = self._expect_mapping(await self._get_json(
            self.wfs_url,
            params={
                'service': 'WFS',
                'version': '2.0.0',
                'request': 'GetFeature',
                'typeName': PARCEL_FABRIC_LAYER,
                'outputFormat': 'json',
                'count': '1',
                'CQL_FILTER': f"INTERSECTS(GEOMETRY,SRID=4326;POINT({lng} {lat}))",
            },
        ))

        features = self._expect_list(payload.get('features'), 'features')
        for feature in features:
            if isinstance(feature, dict) and isinstance(feature.get('properties'), dict):
                return feature['properties']
        return None

    async def _zoning_for(self, layer: ZoningLayerConfig, address: str, lng: float, lat: float) -> Optional[str]:
        """Zoning code from the city layer. A failing layer leaves zoning unknown."""
        try:
            if layer.platform == "arcgis":
                return await self._arcgis_zoning(layer, lng, lat)
            if layer.platform == "opendatasoft":
                return await self._opendatasoft_zoning(layer, address)
        except SourceUnavailableError as e:
            logger.warning("zoning_layer_unavailable", platform=layer.platform, reason=e.reason)
            return None

        logger.warning("unsupported_platform", platform=layer.platform)
        return None

    async def _arcgis_zoning(self, layer: ZoningLayerConfig, lng: float, lat: float) -> Optional[str]:
        payload = self._expect_mapping(await self._get_json(
            layer.endpoint,
            params={
                'where': '1=1',
                'geometry': f"{lng},{lat}",
                'geometryType': 'esriGeometryPoint',
                'inSR': '4326',
                'spatialRel': 'esriSpatialRelIntersects',
                'outFields': layer.zone_field,
                'returnGeometry': 'false',
                'f': 'json',
            },
        ))

        for feature in self._expect_list(payload.get('features'), 'features'):
            attributes = feature.get('attributes') if isinstance(feature, dict) else None
            if isinstance(attributes, dict) and attributes.get(layer.zone_field):
                return str(attributes[layer.zone_field]).strip()
        return None

    async def _opendatasoft_zoning(self, layer: ZoningLayerConfig, address: str) -> Optional[str]:
        params = {'q': address, 'rows': '1'}
        if layer.dataset:
            params['dataset'] = layer.dataset

        payload = self._expect_mapping(await self._get_json(layer.endpoint, params=params))

        for record in self._expect_list(payload.get('records'), 'records'):
            fields = record.get('fields') if isinstance(record, dict) else None
            if isinstance(fields, dict) and fields.get(layer.zone_field):
                return str(fields[layer.zone_field]).strip()
        return None
