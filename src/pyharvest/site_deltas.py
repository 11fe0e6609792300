"""
Per-site harvest deltas recorded during the current timestep.

The harvest selection process reports, for every site it cuts, the biomass
removed per species and how many cohorts it damaged. The collector keeps
those numbers until the stand aggregator consumes them, and keeps a running
record for the whole timestep that the establishment check and the
biomass-removed map read at its end. Everything is zeroed when a timestep
starts.
"""
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .exceptions import InvalidDataError, validate_non_negative
from .landscape import Prescription, Site
from .species import SpeciesRegistry

__all__ = [
    'SiteDelta',
    'SiteDeltaCollector',
]

BiomassBySpecies = Union[Mapping[str, float], Sequence[float], np.ndarray]


@dataclass
class SiteDelta:
    """Harvest damage on a single site.

    Attributes:
        biomass_removed: Biomass removed per species (g m-2)
        cohorts_partially_damaged: Cohorts that lost part of their biomass
        cohorts_damaged: All cohorts damaged, including those killed outright
    """
    biomass_removed: np.ndarray
    cohorts_partially_damaged: int = 0
    cohorts_damaged: int = 0

    @property
    def total_biomass_removed(self) -> float:
        """Biomass removed over all species (g m-2)."""
        return float(self.biomass_removed.sum())

    @property
    def cohorts_fully_killed(self) -> int:
        # The damage model counts killed cohorts inside cohorts_damaged.
        return self.cohorts_damaged - self.cohorts_partially_damaged

    @property
    def is_damaged(self) -> bool:
        return self.cohorts_partially_damaged > 0 or self.cohorts_damaged > 0




class SiteDeltaCollector:
    """Collects site deltas for the current timestep.

    Two records are kept per site. The pending delta is what the stand
    aggregator has not read yet; ``consume`` hands it over once and drops
    it, so a later pass over the same stand sees only newer harvests. The
    timestep delta keeps everything recorded since ``reset`` for the
    establishment check and the biomass-removed map.
    """

    def __init__(self, species: SpeciesRegistry):
        self.species = species
        self._pending: Dict[Tuple[int, int], SiteDelta] = {}
        self._timestep: Dict[Tuple[int, int], SiteDelta] = {}

    def reset(self) -> None:
        """Forget every recorded delta."""
        self._pending.clear()
        self._timestep.clear()

    def _add(self, deltas: Dict[Tuple[int, int], SiteDelta], location: Tuple[int, int],
             biomass: np.ndarray, partial: int, damaged: int) -> SiteDelta:
        delta = deltas.get(location)
        if delta is None:
            delta = SiteDelta(self.species.zeros())
            deltas[location] = delta
        delta.biomass_removed += biomass
        delta.cohorts_partially_damaged += partial
        delta.cohorts_damaged += damaged
        return delta

    def record_site_harvest(self, site: Site, prescription: Optional[Prescription],
                            biomass_removed: BiomassBySpecies,
                            cohorts_partially_damaged: int = 0,
                            cohorts_damaged: int = 0) -> SiteDelta:
        """Record the damage one harvest pass did to a site.

        Repeated calls for the same site within a timestep add up.

        Args:
            site: The harvested site
            prescription: Prescription that harvested the site
            biomass_removed: Biomass removed per species (g m-2), as a
                mapping of species name to value or a vector in index order
            cohorts_partially_damaged: Cohorts partially harvested
            cohorts_damaged: Cohorts damaged, including those partially
                harvested and those killed

        Returns:
            The site's pending delta

        Raises:
            InvalidDataError: If a value is negative or the partially
                harvested cohorts exceed the damaged cohorts
        """
        validate_non_negative(cohorts_partially_damaged, 'cohorts_partially_damaged')
        validate_non_negative(cohorts_damaged, 'cohorts_damaged')
        if cohorts_partially_damaged > cohorts_damaged:
            raise InvalidDataError(
                f"cohort damage at site {site.location}",
                f"{cohorts_partially_damaged} partially harvested cohorts exceed "
                f"{cohorts_damaged} damaged cohorts"
            )
        biomass = self.species.to_vector(biomass_removed, "site biomass removed")
        validate_non_negative(float(biomass.min()), 'biomass_removed')

        partial = int(cohorts_partially_damaged)
        damaged = int(cohorts_damaged)
        self._add(self._timestep, site.location, biomass, partial, damaged)
        delta = self._add(self._pending, site.location, biomass, partial, damaged)

        if prescription is not None:
            site.prescription = prescription
        return delta

    def delta_for(self, site: Site) -> SiteDelta:
        """Get a site's pending delta; sites with none get an empty one."""
        delta = self._pending.get(site.location)
        if delta is None:
            return SiteDelta(self.species.zeros())
        return delta

    def consume(self, sites: Iterable[Site]) -> None:
        """Drop the pending deltas of sites that have been reported."""
        for site in sites:
            self._pending.pop(site.location, None)

    def timestep_delta_for(self, site: Site) -> SiteDelta:
        """Get everything recorded for a site since the last reset."""
        delta = self._timestep.get(site.location)
        if delta is None:
            return SiteDelta(self.species.zeros())
        return delta

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, site: Site) -> bool:
        return site.location in self._pending
