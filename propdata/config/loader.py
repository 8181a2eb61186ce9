"""
Config loader for city configurations.

Loads and validates YAML config files.
"""
import yaml
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import CityConfig


class ConfigLoader:
    """Loads and validates city configurations."""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing city config files
        """
        if config_dir is None:
            # Default to config/cities/ relative to this file
            config_dir = Path(__file__).parent / "cities"

        self.config_dir = Path(config_dir)

        if not self.config_dir.exists():
            raise ConfigurationError(f"Config directory not found: {self.config_dir}")

    def load(self, city_id: str) -> CityConfig:
        """
        Load and validate a city config.

        Args:
            city_id: City identifier (e.g., "maple_ridge")

        Returns:
            Validated CityConfig object

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        config_file = self.config_dir / f"{city_id}.yaml"

        if not config_file.exists():
            available = self.get_available_cities()
            raise ConfigurationError(
                f"Config file not found: {config_file}\n"
                f"Available cities: {', '.join(available)}"
            )

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Malformed YAML in {config_file}: {e}") from e

        if not isinstance(raw_config, dict):
            raise ConfigurationError(f"Invalid config in {config_file}: expected a mapping")

        try:
            return CityConfig(**raw_config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid config in {config_file}: {e}") from e

    def load_all(self) -> Dict[str, CityConfig]:
        """Load every city config in the directory, keyed by city id."""
        return {city_id: self.load(city_id) for city_id in self.get_available_cities()}

    def get_available_cities(self) -> List[str]:
        """
        Get list of available city IDs.

        Returns:
            Sorted list of city IDs (without .yaml extension)
        """
        if not self.config_dir.exists():
            return []

        yaml_files = self.config_dir.glob("*.yaml")
        return sorted(f.stem for f in yaml_files)


# Convenience functions
def load_city_config(city_id: str, config_dir: Optional[Path] = None) -> CityConfig:
    """
    Load a city config (convenience function).

    Args:
        city_id: City identifier (e.g., "vancouver")
        config_dir: Optional config directory override

    Returns:
        Validated CityConfig object
    """
    loader = ConfigLoader(config_dir)
    return loader.load(city_id)


def get_available_cities(config_dir: Optional[Path] = None) -> List[str]:
    """
    Get list of available cities (convenience function).

    Args:
        config_dir: Optional config directory override

    Returns:
        List of city IDs
    """
    loader = ConfigLoader(config_dir)
    return loader.get_available_cities()
