"""
Row records for the harvest Event Log and Summary Log.

Column names follow the biomass harvest output tables so existing
post-processing scripts can read them. Per-species vectors expand into one
column per species, e.g. ``CohortsHarvested_pinubank``.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from .exceptions import IndexSpaceError

__all__ = [
    'EventLogRow',
    'SummaryLogRow',
    'repeat_suffixed_name',
]

COHORTS_COLUMN_PREFIX = 'CohortsHarvested_'
BIOMASS_COLUMN_PREFIX = 'BiomassHarvestedMg_'


def repeat_suffixed_name(name: str, repeat_number: int) -> str:
    """Append the repeat-pass number to a prescription name.

    >>> repeat_suffixed_name('MaxAgeClearcut', 2)
    'MaxAgeClearcut(2)'
    """
    if repeat_number > 0:
        return f"{name}({repeat_number})"
    return name


def _species_columns(species_names: Sequence[str]) -> List[str]:
    return ([f"{COHORTS_COLUMN_PREFIX}{name}" for name in species_names]
            + [f"{BIOMASS_COLUMN_PREFIX}{name}" for name in species_names])


def _species_values(species_names: Sequence[str], cohorts: Tuple[int, ...],
                    biomass: Tuple[float, ...]) -> Dict[str, Any]:
    if len(cohorts) != len(species_names) or len(biomass) != len(species_names):
        raise IndexSpaceError("species vector length", len(species_names), (len(cohorts), len(biomass)))
    values: Dict[str, Any] = {}
    for name, count in zip(species_names, cohorts):
        values[f"{COHORTS_COLUMN_PREFIX}{name}"] = count
    for name, mass in zip(species_names, biomass):
        values[f"{BIOMASS_COLUMN_PREFIX}{name}"] = mass
    return values


@dataclass(frozen=True)
class EventLogRow:
    """One stand-harvest occurrence.

    Attributes:
        time: Simulation timestep
        management_area: Management-unit map code
        prescription: Prescription name, suffixed with the repeat pass
        stand: Stand map code
        event_id: Harvest event identifier
        stand_age: Stand age at harvest
        stand_rank: Rank the stand received when selected
        number_of_sites: Active sites in the stand
        harvested_sites: Sites with at least one damaged cohort
        biomass_removed: Biomass removed (Mg)
        biomass_removed_per_damaged_ha: Biomass removed per damaged hectare (Mg/ha)
        cohorts_partial_harvest: Cohorts partially harvested
        cohorts_complete_harvest: Cohorts completely harvested
        species_cohorts: Cohorts damaged per species
        species_biomass: Biomass removed per species (Mg)
    """
    time: int
    management_area: int
    prescription: str
    stand: int
    event_id: int
    stand_age: int
    stand_rank: int
    number_of_sites: int
    harvested_sites: int
    biomass_removed: float
    biomass_removed_per_damaged_ha: float
    cohorts_partial_harvest: int
    cohorts_complete_harvest: int
    species_cohorts: Tuple[int, ...]
    species_biomass: Tuple[float, ...]

    @staticmethod
    def column_names(species_names: Sequence[str]) -> List[str]:
        return [
            'Time', 'ManagementArea', 'Prescription', 'Stand', 'EventID',
            'StandAge', 'StandRank', 'NumberOfSites', 'HarvestedSites',
            'MgBiomassRemoved', 'MgBioRemovedPerDamagedHa',
            'TotalCohortsPartialHarvest', 'TotalCohortsCompleteHarvest',
        ] + _species_columns(species_names)

    def to_dict(self, species_names: Sequence[str]) -> Dict[str, Any]:
        """Convert record to an output-table row."""
        row = {
            'Time': self.time,
            'ManagementArea': self.management_area,
            'Prescription': self.prescription,
            'Stand': self.stand,
            'EventID': self.event_id,
            'StandAge': self.stand_age,
            'StandRank': self.stand_rank,
            'NumberOfSites': self.number_of_sites,
            'HarvestedSites': self.harvested_sites,
            'MgBiomassRemoved': self.biomass_removed,
            'MgBioRemovedPerDamagedHa': self.biomass_removed_per_damaged_ha,
            'TotalCohortsPartialHarvest': self.cohorts_partial_harvest,
            'TotalCohortsCompleteHarvest': self.cohorts_complete_harvest,
        }
        row.update(_species_values(species_names, self.species_cohorts, self.species_biomass))
        return row


@dataclass(frozen=True)
class SummaryLogRow:
    """One prescription's activity within a management unit for a cycle.

    Attributes:
        time: Simulation timestep
        management_area: Management-unit map code
        prescription: Prescription name, suffixed with the repeat pass
        harvested_sites: Damaged sites
        total_biomass_harvested: Biomass removed (Mg)
        cohorts_partial_harvest: Cohorts partially harvested
        cohorts_complete_harvest: Cohorts completely harvested
        species_cohorts: Cohorts damaged per species
        species_biomass: Biomass removed per species (Mg)
    """
    time: int
    management_area: int
    prescription: str
    harvested_sites: int
    total_biomass_harvested: float
    cohorts_partial_harvest: int
    cohorts_complete_harvest: int
    species_cohorts: Tuple[int, ...]
    species_biomass: Tuple[float, ...]

    @staticmethod
    def column_names(species_names: Sequence[str]) -> List[str]:
        return [
            'Time', 'ManagementArea', 'Prescription', 'HarvestedSites',
            'TotalBiomassHarvested', 'TotalCohortsPartialHarvest',
            'TotalCohortsCompleteHarvest',
        ] + _species_columns(species_names)

    def to_dict(self, species_names: Sequence[str]) -> Dict[str, Any]:
        """Convert record to an output-table row."""
        row = {
            'Time': self.time,
            'ManagementArea': self.management_area,
            'Prescription': self.prescription,
            'HarvestedSites': self.harvested_sites,
            'TotalBiomassHarvested': self.total_biomass_harvested,
            'TotalCohortsPartialHarvest': self.cohorts_partial_harvest,
            'TotalCohortsCompleteHarvest': self.cohorts_complete_harvest,
        }
        row.update(_species_values(species_names, self.species_cohorts, self.species_biomass))
        return row
