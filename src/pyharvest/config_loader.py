"""
Configuration loader for PyHarvest.
Provides unified access to YAML, TOML, and JSON configuration files.

Supports:
- YAML (.yaml, .yml) - output configuration, harvest scenarios
- TOML (.toml) - structured configuration with types
- JSON (.json) - machine-generated configuration

Output configuration keys:
- timestep: harvest timestep in years (required)
- event_log: path of the Event Log CSV
- summary_log: path of the Summary Log CSV
- prescription_maps: prescription map name template containing {timestep}
- biomass_maps: optional biomass-removed map name template
- map_driver: GDAL driver for output maps (default GTiff)
"""
import json
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .exceptions import ConfigurationError, InvalidDataError, validate_positive
from .maps import check_map_template

# Handle TOML imports for different Python versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

__all__ = [
    'HarvestOutputConfig',
    'load_config_file',
    'load_output_config',
]

DEFAULT_EVENT_LOG = 'harvest/biomass-harvest-event-log.csv'
DEFAULT_SUMMARY_LOG = 'harvest/biomass-harvest-summary-log.csv'
DEFAULT_PRESCRIPTION_MAPS = 'harvest/biomass-harvest-prescripts-{timestep}.tif'
DEFAULT_MAP_DRIVER = 'GTiff'


def load_config_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """Load configuration from a YAML, TOML or JSON file.

    Args:
        file_path: Path to the configuration file

    Returns:
        Dictionary containing configuration data

    Raises:
        ConfigurationError: If the file is missing, the format is not
            supported, or parsing fails
        InvalidDataError: If the file is empty or malformed
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    suffix = file_path.suffix.lower()

    try:
        if suffix in ['.yaml', '.yml']:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        elif suffix == '.toml':
            with open(file_path, 'rb') as f:
                data = tomllib.load(f)
        elif suffix == '.json':
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        else:
            raise ConfigurationError(f"Unsupported configuration file format: {suffix}. "
                                     f"Supported formats: .yaml, .yml, .toml, .json")
    except yaml.YAMLError as e:
        raise InvalidDataError("YAML configuration", f"parsing error: {str(e)}") from e
    except json.JSONDecodeError as e:
        raise InvalidDataError("JSON configuration", f"parsing error: {str(e)}") from e
    except tomllib.TOMLDecodeError as e:
        raise InvalidDataError("TOML configuration", f"parsing error: {str(e)}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to load configuration from {file_path}: {str(e)}") from e

    if data is None:
        raise InvalidDataError(f"configuration file {file_path.name}", "file is empty or contains only comments")
    if not isinstance(data, dict):
        raise InvalidDataError(f"configuration file {file_path.name}", "top level must be a mapping")
    return data


@dataclass
class HarvestOutputConfig:
    """Where and how often harvest output is written.

    Attributes:
        timestep: Harvest timestep in years
        event_log: Event Log CSV path
        summary_log: Summary Log CSV path
        prescription_maps: Prescription map name template
        biomass_maps: Optional biomass-removed map name template
        map_driver: GDAL driver name for output maps
    """
    timestep: int
    event_log: Path = Path(DEFAULT_EVENT_LOG)
    summary_log: Path = Path(DEFAULT_SUMMARY_LOG)
    prescription_maps: str = DEFAULT_PRESCRIPTION_MAPS
    biomass_maps: Optional[str] = None
    map_driver: str = DEFAULT_MAP_DRIVER

    def __post_init__(self):
        self.timestep = int(validate_positive(self.timestep, 'timestep'))
        self.event_log = Path(self.event_log)
        self.summary_log = Path(self.summary_log)
        check_map_template(self.prescription_maps)
        if self.biomass_maps is not None:
            check_map_template(self.biomass_maps)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> 'HarvestOutputConfig':
        """Build a config from parsed file data.

        Relative output paths are resolved against ``base_dir`` when given.

        Raises:
            ConfigurationError: On unknown or missing keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown output configuration keys: {unknown}")
        if 'timestep' not in data:
            raise ConfigurationError("Output configuration must define 'timestep'")

        config = cls(**data)
        if base_dir is not None:
            config.resolve_paths(base_dir)
        return config

    def resolve_paths(self, base_dir: Union[str, Path]) -> None:
        """Make relative output paths relative to ``base_dir``."""
        base_dir = Path(base_dir)
        if not self.event_log.is_absolute():
            self.event_log = base_dir / self.event_log
        if not self.summary_log.is_absolute():
            self.summary_log = base_dir / self.summary_log
        if not Path(self.prescription_maps).is_absolute():
            self.prescription_maps = str(base_dir / self.prescription_maps)
        if self.biomass_maps is not None and not Path(self.biomass_maps).is_absolute():
            self.biomass_maps = str(base_dir / self.biomass_maps)


def load_output_config(file_path: Union[str, Path]) -> HarvestOutputConfig:
    """Load an output configuration file.

    Args:
        file_path: YAML, TOML or JSON file

    Returns:
        The validated output configuration
    """
    file_path = Path(file_path)
    data = load_config_file(file_path)
    return HarvestOutputConfig.from_dict(data, base_dir=file_path.parent)
