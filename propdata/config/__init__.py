"""Configuration management for property data sources."""
from .schemas import CityConfig, AssessmentPortalConfig, ZoningLayerConfig
from .loader import ConfigLoader, load_city_config, get_available_cities
from .settings import settings, Settings, get_settings

__all__ = [
    'CityConfig',
    'AssessmentPortalConfig',
    'ZoningLayerConfig',
    'ConfigLoader',
    'load_city_config',
    'get_available_cities',
    'settings',
    'Settings',
    'get_settings',
]
