"""
Per-prescription harvest totals for one management-unit cycle.

A fresh ``PrescriptionTotals`` is built every time a management unit is
processed, so no totals survive from one unit (or one timestep) to the next.
Slots only grow through ``accumulate``; the single exception is
``clear_slot``, which the summary emitter calls after the terminal summary
of a repeat-harvest sequence.
"""
from dataclasses import dataclass
from typing import Dict, Any

import numpy as np

from .exceptions import IndexSpaceError, InvalidDataError

__all__ = [
    'StandHarvestTotals',
    'PrescriptionTotals',
]


@dataclass
class StandHarvestTotals:
    """Quantities one stand contributes to its prescription's slot.

    Attributes:
        site_count: Active sites in the stand
        damaged_sites: Sites where at least one cohort was damaged
        cohorts_damaged: Cohorts partially harvested
        cohorts_killed: Cohorts completely harvested
        biomass_removed: Biomass removed (Mg)
        species_cohorts: Cohorts damaged per species
        species_biomass: Biomass removed per species (Mg)
    """
    site_count: int
    damaged_sites: int
    cohorts_damaged: int
    cohorts_killed: int
    biomass_removed: float
    species_cohorts: np.ndarray
    species_biomass: np.ndarray


class PrescriptionTotals:
    """Running totals per prescription and species.

    Attributes:
        total_sites: Sites in stands harvested per prescription
        total_damaged_sites: Damaged sites per prescription
        total_cohorts_killed: Completely harvested cohorts per prescription
        total_cohorts_damaged: Partially harvested cohorts per prescription
        total_biomass_removed: Biomass removed per prescription (Mg)
        total_species_cohorts: Cohorts damaged, prescription x species
        total_species_biomass: Biomass removed, prescription x species (Mg)
        reported: Whether a prescription's summary has been flushed
    """

    def __init__(self, prescription_count: int, species_count: int):
        self.reset(prescription_count, species_count)

    def reset(self, prescription_count: int, species_count: int) -> None:
        """Zero every slot and reported flag for a new cycle."""
        if prescription_count < 1:
            raise IndexSpaceError("prescription count", "at least 1", prescription_count)
        if species_count < 1:
            raise IndexSpaceError("species count", "at least 1", species_count)

        self.prescription_count = int(prescription_count)
        self.species_count = int(species_count)
        shape = (self.prescription_count, self.species_count)

        self.total_sites = np.zeros(self.prescription_count, dtype=np.int64)
        self.total_damaged_sites = np.zeros(self.prescription_count, dtype=np.int64)
        self.total_cohorts_killed = np.zeros(self.prescription_count, dtype=np.int64)
        self.total_cohorts_damaged = np.zeros(self.prescription_count, dtype=np.int64)
        self.total_biomass_removed = np.zeros(self.prescription_count, dtype=float)
        self.total_species_cohorts = np.zeros(shape, dtype=np.int64)
        self.total_species_biomass = np.zeros(shape, dtype=float)
        self.reported = np.zeros(self.prescription_count, dtype=bool)

    def _check_index(self, prescription_index: int) -> int:
        if not 0 <= prescription_index < self.prescription_count:
            raise IndexSpaceError(
                "prescription index", f"0..{self.prescription_count - 1}", prescription_index
            )
        return prescription_index

    def accumulate(self, prescription_index: int, totals: StandHarvestTotals) -> None:
        """Add one stand's contribution to a prescription's slot.

        Raises:
            IndexSpaceError: If the index or a species vector does not fit
            InvalidDataError: If any contribution is negative
        """
        p = self._check_index(prescription_index)
        for name in ('species_cohorts', 'species_biomass'):
            vector = getattr(totals, name)
            if np.shape(vector) != (self.species_count,):
                raise IndexSpaceError(f"{name} length", self.species_count, np.shape(vector))

        scalars = (totals.site_count, totals.damaged_sites, totals.cohorts_damaged,
                   totals.cohorts_killed, totals.biomass_removed)
        if min(scalars) < 0 or (totals.species_cohorts < 0).any() or (totals.species_biomass < 0).any():
            raise InvalidDataError("stand harvest totals", "contributions must not be negative")

        self.total_sites[p] += totals.site_count
        self.total_damaged_sites[p] += totals.damaged_sites
        self.total_cohorts_damaged[p] += totals.cohorts_damaged
        self.total_cohorts_killed[p] += totals.cohorts_killed
        self.total_biomass_removed[p] += totals.biomass_removed
        self.total_species_cohorts[p] += totals.species_cohorts
        self.total_species_biomass[p] += totals.species_biomass

    def is_reported(self, prescription_index: int) -> bool:
        return bool(self.reported[self._check_index(prescription_index)])

    def mark_reported(self, prescription_index: int) -> None:
        self.reported[self._check_index(prescription_index)] = True

    def clear_slot(self, prescription_index: int) -> None:
        """Zero a slot after its terminal summary.

        ``total_sites`` is kept; it only returns to zero on ``reset``.
        """
        p = self._check_index(prescription_index)
        self.total_damaged_sites[p] = 0
        self.total_biomass_removed[p] = 0.0
        self.total_cohorts_damaged[p] = 0
        self.total_cohorts_killed[p] = 0
        self.total_species_cohorts[p] = 0
        self.total_species_biomass[p] = 0.0

    def slot(self, prescription_index: int) -> Dict[str, Any]:
        """Get a copy of one prescription's totals."""
        p = self._check_index(prescription_index)
        return {
            'total_sites': int(self.total_sites[p]),
            'total_damaged_sites': int(self.total_damaged_sites[p]),
            'total_cohorts_damaged': int(self.total_cohorts_damaged[p]),
            'total_cohorts_killed': int(self.total_cohorts_killed[p]),
            'total_biomass_removed': float(self.total_biomass_removed[p]),
            'species_cohorts': self.total_species_cohorts[p].copy(),
            'species_biomass': self.total_species_biomass[p].copy(),
            'reported': bool(self.reported[p]),
        }

    def __repr__(self) -> str:
        return (f"PrescriptionTotals(prescriptions={self.prescription_count}, "
                f"species={self.species_count})")
