"""
Per-timestep output maps.

Prescription map codes:
- 0: inactive site
- 1: active site not harvested this timestep
- n + 2: active site harvested by the prescription with index n

The biomass-removed map holds each active site's total biomass removed this
timestep (g m-2, rounded to an integer); inactive sites are 0.
"""
from pathlib import Path

import numpy as np
import rasterio
from rasterio.errors import RasterioError

from .exceptions import ConfigurationError, OutputError
from .landscape import Landscape
from .logging_config import get_logger
from .site_deltas import SiteDeltaCollector

__all__ = [
    'TIMESTEP_VARIABLE',
    'INACTIVE_CODE',
    'UNHARVESTED_CODE',
    'map_path_for_timestep',
    'check_map_template',
    'prescription_map_dtype',
    'prescription_map_codes',
    'biomass_removed_values',
    'PrescriptionMapWriter',
    'BiomassMapWriter',
]

logger = get_logger(__name__)

TIMESTEP_VARIABLE = '{timestep}'
INACTIVE_CODE = 0
UNHARVESTED_CODE = 1
FIRST_PRESCRIPTION_CODE = 2


def check_map_template(template: str) -> str:
    """Ensure a map name template contains the timestep variable.

    Raises:
        ConfigurationError: If ``{timestep}`` is missing
    """
    if TIMESTEP_VARIABLE not in template:
        raise ConfigurationError(
            f"Map name template '{template}' must contain the variable {TIMESTEP_VARIABLE}"
        )
    return template


def map_path_for_timestep(template: str, timestep: int) -> Path:
    """Substitute the timestep into a map name template.

    >>> map_path_for_timestep('harvest/prescripts-{timestep}.tif', 10)
    PosixPath('harvest/prescripts-10.tif')
    """
    return Path(check_map_template(template).replace(TIMESTEP_VARIABLE, str(timestep)))


def prescription_map_dtype(prescription_count: int) -> np.dtype:
    """Smallest unsigned integer type holding every prescription code."""
    largest_code = prescription_count + FIRST_PRESCRIPTION_CODE - 1
    for dtype in (np.uint8, np.uint16, np.uint32):
        if largest_code <= np.iinfo(dtype).max:
            return np.dtype(dtype)
    raise ConfigurationError(f"Too many prescriptions for a map: {prescription_count}")


def prescription_map_codes(landscape: Landscape, prescription_count: int) -> np.ndarray:
    """Encode which prescription harvested each site."""
    codes = np.zeros(landscape.dimensions, dtype=prescription_map_dtype(prescription_count))
    for site in landscape:
        if not site.is_active:
            code = INACTIVE_CODE
        elif site.prescription is None:
            code = UNHARVESTED_CODE
        else:
            code = site.prescription.number + FIRST_PRESCRIPTION_CODE
        codes[site.row, site.column] = code
    return codes


def biomass_removed_values(landscape: Landscape, collector: SiteDeltaCollector) -> np.ndarray:
    """Total biomass removed per site (g m-2)."""
    values = np.zeros(landscape.dimensions, dtype=np.int32)
    for site in landscape.active_sites():
        delta = collector.timestep_delta_for(site)
        values[site.row, site.column] = int(round(delta.total_biomass_removed))
    return values


def _write_raster(path: Path, data: np.ndarray, driver: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with rasterio.open(
            path, 'w',
            driver=driver,
            height=data.shape[0],
            width=data.shape[1],
            count=1,
            dtype=data.dtype.name,
        ) as dst:
            dst.write(data, 1)
    except (OSError, RasterioError) as e:
        raise OutputError(path, str(e)) from e


class PrescriptionMapWriter:
    """Writes the prescription map once per timestep."""

    def __init__(self, name_template: str, prescription_count: int, driver: str = 'GTiff'):
        self.name_template = check_map_template(name_template)
        self.prescription_count = prescription_count
        self.driver = driver

    def write(self, landscape: Landscape, timestep: int) -> Path:
        """Write the map for a timestep.

        Returns:
            Path of the written raster

        Raises:
            OutputError: If the raster cannot be written
        """
        path = map_path_for_timestep(self.name_template, timestep)
        logger.info("Writing prescription map to %s ...", path)
        _write_raster(path, prescription_map_codes(landscape, self.prescription_count), self.driver)
        return path


class BiomassMapWriter:
    """Writes the biomass-removed map once per timestep."""

    def __init__(self, name_template: str, driver: str = 'GTiff'):
        self.name_template = check_map_template(name_template)
        self.driver = driver

    def write(self, landscape: Landscape, collector: SiteDeltaCollector,
              timestep: int) -> Path:
        """Write the map for a timestep.

        Raises:
            OutputError: If the raster cannot be written
        """
        path = map_path_for_timestep(self.name_template, timestep)
        logger.info("Writing biomass-removed map to %s ...", path)
        _write_raster(path, biomass_removed_values(landscape, collector), self.driver)
        return path
