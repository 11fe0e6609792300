"""
Stand-level harvest aggregation.

Rolls the site deltas of every active site in a harvested stand into one
Event Log row, and adds the stand's contribution to its prescription's slot
in the management unit's ``PrescriptionTotals``.

Units:
- Site biomass removed arrives as areal density (g m-2).
- g m-2 / 100 gives Mg ha-1; multiplied by the cell area (ha) gives Mg.
"""
from typing import Optional

import numpy as np

from .exceptions import IndexSpaceError, StandError
from .landscape import ManagementUnit, Stand
from .log_records import EventLogRow, repeat_suffixed_name
from .log_tables import HarvestLogTable
from .logging_config import get_logger, log_stand_harvest
from .prescription_totals import PrescriptionTotals, StandHarvestTotals
from .site_deltas import SiteDeltaCollector

__all__ = [
    'G_M2_TO_MG_HA',
    'summarize_stand',
    'StandAggregator',
]

# g m-2 -> Mg ha-1
G_M2_TO_MG_HA = 0.01


def summarize_stand(stand: Stand, collector: SiteDeltaCollector, cell_area: float,
                    current_time: Optional[int] = None) -> StandHarvestTotals:
    """Sum the site deltas of a stand.

    Sites harvested by a prescription get that prescription's name and the
    current time stamped on them when ``current_time`` is given.

    Args:
        stand: The harvested stand
        collector: Site deltas not yet reported
        cell_area: Cell area in hectares
        current_time: Timestep to stamp on harvested sites

    Returns:
        The stand's contribution to its prescription slot
    """
    species_count = len(collector.species)
    if stand.damage_table.shape != (species_count,):
        raise IndexSpaceError("stand damage table length", species_count, stand.damage_table.shape)

    damaged_sites = 0
    cohorts_damaged = 0
    cohorts_killed = 0
    biomass_removed = 0.0
    species_biomass = np.zeros(species_count, dtype=float)

    for site in stand:
        if current_time is not None and site.prescription is not None:
            site.prescription_name = site.prescription.name
            site.time_of_last_event = current_time

        delta = collector.delta_for(site)
        cohorts_damaged += delta.cohorts_partially_damaged
        cohorts_killed += delta.cohorts_fully_killed

        if delta.is_damaged:
            damaged_sites += 1
            site_biomass = delta.biomass_removed * G_M2_TO_MG_HA * cell_area
            biomass_removed += delta.total_biomass_removed * G_M2_TO_MG_HA * cell_area
            species_biomass += site_biomass

    return StandHarvestTotals(
        site_count=stand.site_count,
        damaged_sites=damaged_sites,
        cohorts_damaged=cohorts_damaged,
        cohorts_killed=cohorts_killed,
        biomass_removed=biomass_removed,
        species_cohorts=stand.damage_table.copy(),
        species_biomass=species_biomass,
    )


class StandAggregator:
    """Writes one Event Log row per harvested stand."""

    def __init__(self, collector: SiteDeltaCollector, cell_area: float,
                 event_log: HarvestLogTable):
        self.collector = collector
        self.cell_area = cell_area
        self.event_log = event_log
        self.logger = get_logger(__name__)

    def aggregate(self, unit: ManagementUnit, stand: Stand, totals: PrescriptionTotals,
                  current_time: int, repeat_number: int = 0) -> EventLogRow:
        """Account for one stand harvest and log it.

        The stand's damage table is cleared and its sites' pending deltas
        consumed whatever the outcome of the sweep, so nothing is counted
        twice in a later pass or cycle.

        Args:
            unit: Management unit owning the stand
            stand: The harvested stand
            totals: The unit's prescription totals for this cycle
            current_time: Current timestep
            repeat_number: Repeat pass number, 0 for the initial harvest

        Returns:
            The Event Log row that was appended

        Raises:
            StandError: If the stand has no prescription applied
        """
        prescription = stand.last_prescription
        if prescription is None:
            raise StandError(f"Stand {stand.map_code} in management area {unit.map_code} "
                             f"was harvested without a prescription")

        try:
            stand_totals = summarize_stand(stand, self.collector, self.cell_area, current_time)
            totals.accumulate(prescription.number, stand_totals)
        finally:
            stand.clear_damage_table()
            self.collector.consume(stand)

        per_damaged_ha = 0.0
        if stand_totals.biomass_removed > 0.0 and stand_totals.damaged_sites > 0:
            per_damaged_ha = (stand_totals.biomass_removed
                              / stand_totals.damaged_sites / self.cell_area)

        row = EventLogRow(
            time=current_time,
            management_area=unit.map_code,
            prescription=repeat_suffixed_name(prescription.name, repeat_number),
            stand=stand.map_code,
            event_id=stand.event_id,
            stand_age=stand.age,
            stand_rank=int(stand.harvested_rank),
            number_of_sites=stand_totals.site_count,
            harvested_sites=stand_totals.damaged_sites,
            biomass_removed=stand_totals.biomass_removed,
            biomass_removed_per_damaged_ha=per_damaged_ha,
            cohorts_partial_harvest=stand_totals.cohorts_damaged,
            cohorts_complete_harvest=stand_totals.cohorts_killed,
            species_cohorts=tuple(int(c) for c in stand_totals.species_cohorts),
            species_biomass=tuple(float(b) for b in stand_totals.species_biomass),
        )
        self.event_log.append(row)
        log_stand_harvest(self.logger, row)
        return row
