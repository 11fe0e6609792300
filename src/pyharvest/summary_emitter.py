"""
Prescription summaries for the Summary Log.

Within one management-unit cycle a prescription can be summarized more than
once: repeat-harvest passes are summarized as they finish, before the
unit's stands are logged and its new initiations summarized. Two pieces of
state keep this straight:

- ``reported[p]`` suppresses further summaries once the initial pass (or
  the terminal pass of an expired repeat sequence) has been summarized.
- ``last_harvest`` clears the slot after the terminal repeat summary so the
  next summary does not count the same harvests twice. ``total_sites`` is
  left alone.
"""
from typing import Optional

from .landscape import AppliedPrescription, ManagementUnit
from .log_records import SummaryLogRow, repeat_suffixed_name
from .log_tables import HarvestLogTable
from .logging_config import get_logger, log_summary_emitted
from .prescription_totals import PrescriptionTotals

__all__ = [
    'SummaryEmitter',
]


class SummaryEmitter:
    """Writes Summary Log rows from a unit's prescription totals."""

    def __init__(self, summary_log: HarvestLogTable):
        self.summary_log = summary_log
        self.logger = get_logger(__name__)

    def emit(self, unit: ManagementUnit, applied: AppliedPrescription,
             totals: PrescriptionTotals, current_time: int,
             repeat_number: int = 0, last_harvest: bool = False) -> Optional[SummaryLogRow]:
        """Summarize one prescription if it is due.

        Args:
            unit: Management unit being processed
            applied: The prescription as applied in the unit
            totals: The unit's prescription totals for this cycle
            current_time: Current timestep
            repeat_number: Repeat pass number, 0 for the initial pass
            last_harvest: Whether this is the last harvest of a repeat
                sequence, as reported by the harvest collaborator

        Returns:
            The appended row, or None when nothing was due
        """
        p = applied.number
        if totals.total_sites[p] <= 0 or totals.is_reported(p):
            return None

        row = SummaryLogRow(
            time=current_time,
            management_area=unit.map_code,
            prescription=repeat_suffixed_name(applied.name, repeat_number),
            harvested_sites=int(totals.total_damaged_sites[p]),
            total_biomass_harvested=float(totals.total_biomass_removed[p]),
            cohorts_partial_harvest=int(totals.total_cohorts_damaged[p]),
            cohorts_complete_harvest=int(totals.total_cohorts_killed[p]),
            species_cohorts=tuple(int(c) for c in totals.total_species_cohorts[p]),
            species_biomass=tuple(float(b) for b in totals.total_species_biomass[p]),
        )
        self.summary_log.append(row)
        log_summary_emitted(self.logger, row)

        if repeat_number == 0 or (current_time > applied.end_time and last_harvest):
            totals.mark_reported(p)

        if last_harvest:
            totals.clear_slot(p)
            self.logger.debug("Cleared totals for %s in management area %s",
                              applied.name, unit.map_code)
        return row
