"""
Landscape, stand and management-unit objects consumed by harvest reporting.

These classes model the state that the host simulation and the harvest
selection process maintain. PyHarvest reads them, stamps a few bookkeeping
fields onto sites (prescription name, time of last event) and clears each
stand's damage table once it has been reported.
"""
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .exceptions import IndexSpaceError, InvalidDataError, validate_positive

__all__ = [
    'Prescription',
    'AppliedPrescription',
    'Site',
    'Landscape',
    'Stand',
    'ManagementUnit',
]


@dataclass(frozen=True)
class Prescription:
    """A harvest prescription defined for the run.

    Attributes:
        name: Display name used in log rows
        number: Dense prescription index in ``0..P-1``
        prevent_establishment: Whether damaged sites are closed to
            establishment after harvest
    """
    name: str
    number: int
    prevent_establishment: bool = False


@dataclass
class AppliedPrescription:
    """A prescription as applied within one management unit.

    Attributes:
        prescription: The prescription being applied
        begin_time: First timestep the prescription is active
        end_time: Last timestep the prescription is active
    """
    prescription: Prescription
    begin_time: int
    end_time: int

    @property
    def number(self) -> int:
        return self.prescription.number

    @property
    def name(self) -> str:
        return self.prescription.name


@dataclass(eq=False)
class Site:
    """A landscape cell.

    Attributes:
        row: Zero-based row
        column: Zero-based column
        is_active: Inactive sites are never harvested and map to code 0
        prescription: Prescription that harvested the site this timestep
        prescription_name: Name of the last prescription reported for the site
        time_of_last_event: Timestep of the last reported harvest
        establishment_prevented: Set when a prescription closed the site
    """
    row: int
    column: int
    is_active: bool = True
    prescription: Optional[Prescription] = None
    prescription_name: Optional[str] = None
    time_of_last_event: Optional[int] = None
    establishment_prevented: bool = False

    @property
    def location(self) -> Tuple[int, int]:
        return (self.row, self.column)


class Landscape:
    """Grid of sites traversed in row-major order."""

    def __init__(self, rows: int, columns: int, cell_area: float,
                 active: Optional[np.ndarray] = None):
        """Initialize the landscape.

        Args:
            rows: Number of rows
            columns: Number of columns
            cell_area: Area of one cell in hectares
            active: Optional boolean mask of shape (rows, columns);
                all sites are active when omitted
        """
        self.rows = int(validate_positive(rows, 'rows'))
        self.columns = int(validate_positive(columns, 'columns'))
        self.cell_area = float(validate_positive(cell_area, 'cell_area'))

        if active is None:
            active = np.ones((self.rows, self.columns), dtype=bool)
        active = np.asarray(active, dtype=bool)
        if active.shape != (self.rows, self.columns):
            raise IndexSpaceError("active-site mask shape", (self.rows, self.columns), active.shape)

        self._sites: List[Site] = [
            Site(row, column, bool(active[row, column]))
            for row in range(self.rows)
            for column in range(self.columns)
        ]

    @classmethod
    def from_mask(cls, active: Sequence[Sequence[int]], cell_area: float) -> 'Landscape':
        """Create a landscape from a nested 0/1 activity mask."""
        mask = np.asarray(active, dtype=bool)
        if mask.ndim != 2:
            raise InvalidDataError("active-site mask", f"expected 2 dimensions, got {mask.ndim}")
        return cls(mask.shape[0], mask.shape[1], cell_area, mask)

    @property
    def dimensions(self) -> Tuple[int, int]:
        return (self.rows, self.columns)

    @property
    def sites(self) -> List[Site]:
        """All sites, row-major."""
        return self._sites

    def active_sites(self) -> Iterator[Site]:
        return (site for site in self._sites if site.is_active)

    def site_at(self, row: int, column: int) -> Site:
        if not (0 <= row < self.rows and 0 <= column < self.columns):
            raise InvalidDataError("site location", f"({row}, {column}) outside {self.dimensions}")
        return self._sites[row * self.columns + column]

    def __iter__(self) -> Iterator[Site]:
        return iter(self._sites)

    def __len__(self) -> int:
        return len(self._sites)


class Stand:
    """A stand: an ordered set of active sites harvested as a unit.

    Attributes:
        map_code: Stand identifier from the stand map
        age: Stand age in years
        harvested_rank: Rank the stand received when selected for harvest
        event_id: Identifier of the harvest event that took the stand
        last_prescription: Prescription most recently applied to the stand
        harvested: Whether the stand was harvested this timestep
        repeat_harvested: Whether this timestep's harvest was a repeat pass
        damage_table: Cohorts damaged per species since the last clear
    """

    def __init__(self, map_code: int, sites: Iterable[Site], species_count: int,
                 age: int = 0):
        self.map_code = map_code
        self.age = age
        self._sites: List[Site] = [site for site in sites if site.is_active]
        self.damage_table = np.zeros(species_count, dtype=np.int64)

        self.harvested_rank: float = 0.0
        self.event_id: int = 0
        self.last_prescription: Optional[Prescription] = None
        self.harvested = False
        self.repeat_harvested = False

    def __iter__(self) -> Iterator[Site]:
        return iter(list(self._sites))

    def __len__(self) -> int:
        return len(self._sites)

    @property
    def site_count(self) -> int:
        return len(self._sites)

    @property
    def prescription_name(self) -> Optional[str]:
        if self.last_prescription is None:
            return None
        return self.last_prescription.name

    def record_cohort_damage(self, species_index: int, count: int = 1) -> None:
        """Add damaged cohorts of one species to the damage table."""
        if count < 0:
            raise InvalidDataError("cohort damage count", f"must not be negative, got {count}")
        self.damage_table[species_index] += count

    def clear_damage_table(self) -> None:
        self.damage_table[:] = 0

    def delist_active_site(self, site: Site) -> None:
        """Remove a site from the stand's active sites."""
        self._sites.remove(site)

    def clear_repeat_harvested(self) -> None:
        self.repeat_harvested = False

    def __repr__(self) -> str:
        return f"Stand(map_code={self.map_code!r}, sites={len(self._sites)})"


@dataclass
class ManagementUnit:
    """A management area with its stands and applied prescriptions.

    Attributes:
        map_code: Management-area identifier
        stands: Stands in processing order
        applied_prescriptions: Prescriptions in application order
    """
    map_code: int
    stands: List[Stand] = field(default_factory=list)
    applied_prescriptions: List[AppliedPrescription] = field(default_factory=list)

    def __iter__(self) -> Iterator[Stand]:
        return iter(self.stands)

    def find_stand(self, map_code: int) -> Stand:
        for stand in self.stands:
            if stand.map_code == map_code:
                return stand
        raise InvalidDataError("stand reference", f"stand {map_code} not in management area {self.map_code}")

    def find_applied(self, prescription_name: str) -> AppliedPrescription:
        for applied in self.applied_prescriptions:
            if applied.name == prescription_name:
                return applied
        raise InvalidDataError(
            "prescription reference",
            f"'{prescription_name}' not applied in management area {self.map_code}"
        )
