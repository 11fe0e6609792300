"""
PyHarvest: harvest accounting and reporting for landscape simulations

Turns per-site harvest damage into stand-level Event Log rows,
per-prescription Summary Log rows and per-timestep prescription maps.

Quick Start:
    >>> from pyharvest import HarvestReporter, load_output_config, load_scenario
    >>> scenario = load_scenario('scenario.yaml')
    >>> reporter = HarvestReporter(load_output_config('output.yaml'), scenario.species,
    ...                            scenario.prescriptions, scenario.landscape)
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__author__ = "PyHarvest Development Team"

# =============================================================================
# Core Classes - Primary API
# =============================================================================
from .harvest_reporter import (
    HarvestReporter,
    UnitHarvestPass,
    UnitHarvestResult,
    TimestepResult,
)

# =============================================================================
# Landscape Model
# =============================================================================
from .landscape import (
    Prescription,
    AppliedPrescription,
    Site,
    Landscape,
    Stand,
    ManagementUnit,
)
from .species import Species, SpeciesRegistry

# =============================================================================
# Accounting
# =============================================================================
from .site_deltas import SiteDelta, SiteDeltaCollector
from .prescription_totals import PrescriptionTotals, StandHarvestTotals
from .stand_aggregator import StandAggregator, summarize_stand
from .summary_emitter import SummaryEmitter

# =============================================================================
# Output
# =============================================================================
from .log_records import EventLogRow, SummaryLogRow
from .log_tables import HarvestLogTable, create_event_log, create_summary_log
from .maps import PrescriptionMapWriter, BiomassMapWriter, map_path_for_timestep

# =============================================================================
# Configuration Loading
# =============================================================================
from .config_loader import HarvestOutputConfig, load_config_file, load_output_config
from .scenario import HarvestScenario, ScriptedHarvest, load_scenario

# =============================================================================
# Logging
# =============================================================================
from .logging_config import setup_logging, get_logger

# =============================================================================
# Exceptions
# =============================================================================
from .exceptions import (
    HarvestError,
    ConfigurationError,
    SpeciesNotFoundError,
    IndexSpaceError,
    DataError,
    InvalidDataError,
    StandError,
    OutputError,
)

__all__ = [
    # Metadata
    "__version__",
    "__author__",
    # Core
    "HarvestReporter",
    "UnitHarvestPass",
    "UnitHarvestResult",
    "TimestepResult",
    # Landscape
    "Prescription",
    "AppliedPrescription",
    "Site",
    "Landscape",
    "Stand",
    "ManagementUnit",
    "Species",
    "SpeciesRegistry",
    # Accounting
    "SiteDelta",
    "SiteDeltaCollector",
    "PrescriptionTotals",
    "StandHarvestTotals",
    "StandAggregator",
    "summarize_stand",
    "SummaryEmitter",
    # Output
    "EventLogRow",
    "SummaryLogRow",
    "HarvestLogTable",
    "create_event_log",
    "create_summary_log",
    "PrescriptionMapWriter",
    "BiomassMapWriter",
    "map_path_for_timestep",
    # Configuration
    "HarvestOutputConfig",
    "load_config_file",
    "load_output_config",
    "HarvestScenario",
    "ScriptedHarvest",
    "load_scenario",
    # Logging
    "setup_logging",
    "get_logger",
    # Exceptions
    "HarvestError",
    "ConfigurationError",
    "SpeciesNotFoundError",
    "IndexSpaceError",
    "DataError",
    "InvalidDataError",
    "StandError",
    "OutputError",
]
