"""
Municipal Registry

Maps a free-text city name onto a known City and that city's portal
configuration. Unknown cities are not an error: they simply have no
portal, and adapters that depend on one return None without touching
the network.
"""
import re
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

import structlog

from ..config.loader import ConfigLoader
from ..config.schemas import AssessmentPortalConfig, CityConfig, ZoningLayerConfig

logger = structlog.get_logger(__name__)


class City(str, Enum):
    VANCOUVER = "vancouver"
    BURNABY = "burnaby"
    RICHMOND = "richmond"
    SURREY = "surrey"
    MAPLE_RIDGE = "maple_ridge"
    COQUITLAM = "coquitlam"

    @classmethod
    def from_name(cls, name: Optional[str]) -> Optional["City"]:
        """
        "Maple Ridge", "maple-ridge", "MAPLE RIDGE, BC" -> City.MAPLE_RIDGE.
        Returns None for cities without an entry.
        """
        key = normalize_city_name(name)
        for city in cls:
            if city.value == key:
                return city
        return None


def normalize_city_name(name: Optional[str]) -> str:
    if not name:
        return ""
    text = str(name).strip().lower()
    # Drop a trailing province, "Surrey, BC" or "Surrey B.C."
    text = re.sub(r'[,\s]+(bc|b\.c\.|british columbia)$', '', text)
    return re.sub(r'[^a-z0-9]+', '_', text).strip('_')


class MunicipalRegistry:
    """Per-city portal variants, keyed by City."""

    def __init__(self, configs: Optional[Dict[City, CityConfig]] = None):
        self._configs: Dict[City, CityConfig] = dict(configs or {})
        self._aliases: Dict[str, City] = {}
        for city, config in self._configs.items():
            for alias in config.city.aliases:
                self._aliases[normalize_city_name(alias)] = city

    @classmethod
    def from_config_dir(cls, config_dir: Optional[Path] = None) -> "MunicipalRegistry":
        """
        Build the registry from the city YAML files.

        Files whose name is not a known City are skipped with a warning.
        """
        loader = ConfigLoader(config_dir)
        configs: Dict[City, CityConfig] = {}

        for city_id, config in loader.load_all().items():
            city = City.from_name(city_id)
            if city is None:
                logger.warning("unknown_city_config_skipped", city_id=city_id)
                continue
            configs[city] = config

        logger.debug("municipal_registry_loaded", cities=sorted(c.value for c in configs))
        return cls(configs)

    def resolve_city(self, name: Optional[str]) -> Optional[City]:
        city = City.from_name(name)
        if city is not None:
            return city
        return self._aliases.get(normalize_city_name(name))

    def config_for(self, name: Optional[str]) -> Optional[CityConfig]:
        city = self.resolve_city(name)
        if city is None:
            return None
        return self._configs.get(city)

    def assessment_portal(self, name: Optional[str]) -> Optional[AssessmentPortalConfig]:
        config = self.config_for(name)
        if config is None or config.assessment_portal is None:
            return None
        if not config.assessment_portal.enabled:
            return None
        return config.assessment_portal

    def zoning_layer(self, name: Optional[str]) -> Optional[ZoningLayerConfig]:
        config = self.config_for(name)
        if config is None or config.zoning_layer is None:
            return None
        if not config.zoning_layer.enabled:
            return None
        return config.zoning_layer

    def typical_zoning(self, name: Optional[str]) -> Optional[str]:
        config = self.config_for(name)
        if config is None:
            return None
        return config.typical_zoning

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.config_for(name) is not None

    def __len__(self) -> int:
        return len(self._configs)


# Registry over the shipped city files
_municipal_registry = None

def get_municipal_registry() -> MunicipalRegistry:
    """Get singleton MunicipalRegistry built from the default config directory"""
    global _municipal_registry
    if _municipal_registry is None:
        _municipal_registry = MunicipalRegistry.from_config_dir()
    return _municipal_registry
