"""
Shared pytest fixtures for PyHarvest tests.

This module provides the species, prescriptions, landscape and management
unit used across the test files, plus output locations under ``tmp_path``.
"""
import pytest

from pyharvest.config_loader import HarvestOutputConfig
from pyharvest.landscape import (
    AppliedPrescription,
    Landscape,
    ManagementUnit,
    Prescription,
    Stand,
)
from pyharvest.log_tables import create_event_log, create_summary_log
from pyharvest.prescription_totals import PrescriptionTotals
from pyharvest.site_deltas import SiteDeltaCollector
from pyharvest.species import SpeciesRegistry


CELL_AREA = 0.09


# =============================================================================
# Species and Prescriptions
# =============================================================================

@pytest.fixture
def species():
    """Three-species registry: abiebals (0), acerrubr (1), pinubank (2)."""
    return SpeciesRegistry(['abiebals', 'acerrubr', 'pinubank'])


@pytest.fixture
def prescriptions():
    """Three prescriptions; PatchCutting closes damaged sites to establishment."""
    return [
        Prescription('MaxAgeClearcut', 0),
        Prescription('PatchCutting', 1, prevent_establishment=True),
        Prescription('SelectiveThin', 2),
    ]


# =============================================================================
# Landscape Fixtures
# =============================================================================

@pytest.fixture
def landscape():
    """A 2x3 landscape with one inactive site at (1, 0).

    Layout:
    - row 0: active, active, active
    - row 1: inactive, active, active
    """
    return Landscape.from_mask([[1, 1, 1], [0, 1, 1]], CELL_AREA)


@pytest.fixture
def unit(landscape, species, prescriptions):
    """Management area 1 with two stands.

    - Stand 10: sites (0, 0) and (0, 1), age 40
    - Stand 20: sites (0, 2), (1, 1) and (1, 2), age 55

    MaxAgeClearcut and PatchCutting are applied from time 0 to 100.
    """
    stand_a = Stand(10, [landscape.site_at(0, 0), landscape.site_at(0, 1)], len(species), age=40)
    stand_b = Stand(
        20,
        [landscape.site_at(0, 2), landscape.site_at(1, 1), landscape.site_at(1, 2)],
        len(species),
        age=55,
    )
    return ManagementUnit(
        map_code=1,
        stands=[stand_a, stand_b],
        applied_prescriptions=[
            AppliedPrescription(prescriptions[0], 0, 100),
            AppliedPrescription(prescriptions[1], 0, 100),
        ],
    )


# =============================================================================
# Accounting Fixtures
# =============================================================================

@pytest.fixture
def collector(species):
    return SiteDeltaCollector(species)


@pytest.fixture
def totals(prescriptions, species):
    return PrescriptionTotals(len(prescriptions), len(species))


# =============================================================================
# Output Fixtures
# =============================================================================

@pytest.fixture
def event_log(tmp_path, species):
    return create_event_log(tmp_path / 'event-log.csv', species.names)


@pytest.fixture
def summary_log(tmp_path, species):
    return create_summary_log(tmp_path / 'summary-log.csv', species.names)


@pytest.fixture
def output_config(tmp_path):
    """Output configuration writing everything under ``tmp_path/harvest``."""
    return HarvestOutputConfig(
        timestep=10,
        event_log=tmp_path / 'harvest' / 'event-log.csv',
        summary_log=tmp_path / 'harvest' / 'summary-log.csv',
        prescription_maps=str(tmp_path / 'harvest' / 'prescripts-{timestep}.tif'),
        biomass_maps=str(tmp_path / 'harvest' / 'biomass-removed-{timestep}.tif'),
    )
