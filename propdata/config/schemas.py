"""
Pydantic schemas for city configuration.

One YAML file per city describes where that city publishes assessment
and zoning data. A city with neither section is still valid: it just
has no municipal portal.
"""
from pydantic import BaseModel, Field, validator
from typing import Dict, List, Optional


SUPPORTED_PORTAL_PLATFORMS = ('opendatasoft',)
SUPPORTED_ZONING_PLATFORMS = ('arcgis', 'opendatasoft')

# Canonical RawRecord keys an assessment portal may populate
ASSESSMENT_FIELDS = (
    'parcel_id',
    'address',
    'land_value',
    'improvement_value',
    'total_assessed_value',
    'lot_size',
    'zoning',
    'property_type',
    'year_built',
    'building_area',
    'legal_description',
)


class CityInfo(BaseModel):
    """Basic city information."""
    name: str = Field(..., min_length=1)
    province: str = Field(default="BC", min_length=2, max_length=2)
    aliases: List[str] = Field(default_factory=list, description="Other spellings accepted for this city")


class AssessmentPortalConfig(BaseModel):
    """Configuration for a municipal open-data assessment dataset."""
    enabled: bool = True
    platform: str = Field(..., description="Platform type: 'opendatasoft'")
    endpoint: str = Field(..., description="Records endpoint URL")
    where_template: str = Field(
        default='civic_address like "%{address}%"',
        description="Query filter; {address}, {number} and {street} are substituted",
    )
    address_fields: List[str] = Field(
        default_factory=lambda: ['civic_address'],
        description="Portal fields joined with spaces to form the candidate address",
    )
    field_map: Dict[str, str] = Field(..., description="Canonical field name: portal field name")
    limit: int = Field(default=10, ge=1, le=100)

    @validator('platform')
    def validate_platform(cls, v):
        if v not in SUPPORTED_PORTAL_PLATFORMS:
            raise ValueError(f"Unsupported portal platform '{v}'")
        return v

    @validator('field_map')
    def validate_field_map(cls, v):
        unknown = [key for key in v if key not in ASSESSMENT_FIELDS]
        if unknown:
            raise ValueError(f"Unknown canonical fields in field_map: {', '.join(unknown)}")
        if not v:
            raise ValueError("field_map must map at least one field")
        return v


class ZoningLayerConfig(BaseModel):
    """Configuration for a municipal zoning layer."""
    enabled: bool = True
    platform: str = Field(..., description="Platform type: 'arcgis' (point query) or 'opendatasoft' (text query)")
    endpoint: str = Field(..., description="Layer query URL")
    dataset: Optional[str] = Field(None, description="OpenDataSoft dataset id (records 1.0 search API)")
    zone_field: str = Field(..., description="Attribute holding the zoning code")

    @validator('platform')
    def validate_platform(cls, v):
        if v not in SUPPORTED_ZONING_PLATFORMS:
            raise ValueError(f"Unsupported zoning platform '{v}'")
        return v


class CityConfig(BaseModel):
    """Complete city configuration."""
    city: CityInfo
    assessment_portal: Optional[AssessmentPortalConfig] = None
    zoning_layer: Optional[ZoningLayerConfig] = None
    typical_zoning: Optional[str] = Field(None, description="Typical single-family zoning code")

    class Config:
        # Allow extra fields for forward compatibility
        extra = "allow"
