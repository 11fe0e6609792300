"""
Timestep driver for harvest accounting and reporting.

The host calls ``HarvestReporter.run_timestep`` once per harvest timestep.
For each management unit, in order, the reporter:

1. builds a fresh ``UnitHarvestPass`` (with its own ``PrescriptionTotals``);
2. hands it to the harvest selection callback, which reports harvested
   sites, repeat-harvested stands and finished repeat prescriptions through
   explicit calls on the pass;
3. logs every stand harvested in an initial (non-repeat) step;
4. closes damaged sites to establishment where the prescription says so;
5. summarizes every applied prescription that has not yet ended.

After the last unit it writes the prescription map (and the biomass-removed
map when configured).
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

from .config_loader import HarvestOutputConfig, load_output_config
from .exceptions import IndexSpaceError, validate_non_negative
from .landscape import AppliedPrescription, Landscape, ManagementUnit, Prescription, Site, Stand
from .log_records import EventLogRow, SummaryLogRow
from .log_tables import HarvestLogTable, create_event_log, create_summary_log
from .logging_config import get_logger
from .maps import BiomassMapWriter, PrescriptionMapWriter
from .prescription_totals import PrescriptionTotals
from .site_deltas import BiomassBySpecies, SiteDelta, SiteDeltaCollector
from .species import SpeciesRegistry
from .stand_aggregator import StandAggregator
from .summary_emitter import SummaryEmitter

__all__ = [
    'UnitHarvestPass',
    'UnitHarvestResult',
    'TimestepResult',
    'HarvestReporter',
    'validate_prescriptions',
]


def validate_prescriptions(prescriptions: Sequence[Prescription]) -> List[Prescription]:
    """Check that prescription numbers form the dense index space ``0..P-1``.

    Returns:
        Prescriptions ordered by number

    Raises:
        IndexSpaceError: On gaps, duplicates or an empty list
    """
    ordered = sorted(prescriptions, key=lambda p: p.number)
    numbers = [p.number for p in ordered]
    if not ordered or numbers != list(range(len(ordered))):
        raise IndexSpaceError("prescription numbers", f"0..{len(ordered) - 1}", numbers)
    names = [p.name for p in ordered]
    if len(set(names)) != len(names):
        raise IndexSpaceError("prescription names", "unique names", names)
    return ordered


@dataclass
class UnitHarvestResult:
    """Rows produced while processing one management unit."""
    management_area: int
    event_rows: List[EventLogRow] = field(default_factory=list)
    summary_rows: List[SummaryLogRow] = field(default_factory=list)
    sites_closed: int = 0


@dataclass
class TimestepResult:
    """Everything written during one timestep."""
    time: int
    units: List[UnitHarvestResult] = field(default_factory=list)
    prescription_map: Optional[Path] = None
    biomass_map: Optional[Path] = None

    @property
    def event_rows(self) -> List[EventLogRow]:
        return [row for unit in self.units for row in unit.event_rows]

    @property
    def summary_rows(self) -> List[SummaryLogRow]:
        return [row for unit in self.units for row in unit.summary_rows]


class UnitHarvestPass:
    """Accounting state for one management unit within one timestep.

    The pass owns its ``PrescriptionTotals``; nothing else reads or writes
    them, and they are discarded when the pass ends.
    """

    def __init__(self, reporter: 'HarvestReporter', unit: ManagementUnit, current_time: int):
        self.reporter = reporter
        self.unit = unit
        self.current_time = current_time
        self.totals = PrescriptionTotals(len(reporter.prescriptions), len(reporter.species))
        self.result = UnitHarvestResult(unit.map_code)

    def site_harvested(self, site: Site, prescription: Optional[Prescription],
                       biomass_removed: BiomassBySpecies,
                       cohorts_partially_damaged: int = 0,
                       cohorts_damaged: int = 0) -> SiteDelta:
        """Record the damage a harvest did to one site."""
        return self.reporter.collector.record_site_harvest(
            site, prescription, biomass_removed, cohorts_partially_damaged, cohorts_damaged
        )

    def repeat_stand_harvested(self, stand: Stand, repeat_number: int) -> EventLogRow:
        """Log a stand harvested in a repeat step."""
        validate_non_negative(repeat_number, 'repeat_number')
        row = self.reporter.aggregator.aggregate(
            self.unit, stand, self.totals, self.current_time, repeat_number
        )
        self.result.event_rows.append(row)
        return row

    def repeat_prescription_finished(self, applied: AppliedPrescription, repeat_number: int,
                                     last_harvest: bool) -> Optional[SummaryLogRow]:
        """Summarize a prescription whose repeat step has finished."""
        validate_non_negative(repeat_number, 'repeat_number')
        row = self.reporter.emitter.emit(
            self.unit, applied, self.totals, self.current_time, repeat_number, last_harvest
        )
        if row is not None:
            self.result.summary_rows.append(row)
        return row

    def log_initial_harvests(self) -> List[EventLogRow]:
        """Log stands harvested in an initial step.

        Stands harvested in a repeat step were logged when the repeat
        happened; their repeat flag is cleared instead.
        """
        rows = []
        for stand in self.unit:
            if stand.harvested and not stand.repeat_harvested:
                row = self.reporter.aggregator.aggregate(
                    self.unit, stand, self.totals, self.current_time
                )
                rows.append(row)
            elif stand.repeat_harvested:
                stand.clear_repeat_harvested()
        self.result.event_rows.extend(rows)
        return rows

    def prevent_establishment(self) -> int:
        """Close damaged sites of stands whose prescription prevents establishment.

        Returns:
            Number of sites closed
        """
        closed = 0
        collector = self.reporter.collector
        for stand in self.unit:
            prescription = stand.last_prescription
            if not (stand.harvested and prescription is not None and prescription.prevent_establishment):
                continue
            to_delist = [site for site in stand if collector.timestep_delta_for(site).is_damaged]
            for site in to_delist:
                site.establishment_prevented = True
                stand.delist_active_site(site)
            closed += len(to_delist)
        self.result.sites_closed += closed
        return closed

    def summarize_prescriptions(self) -> List[SummaryLogRow]:
        """Summarize each applied prescription that has not ended."""
        rows = []
        for applied in self.unit.applied_prescriptions:
            if self.current_time <= applied.end_time:
                row = self.reporter.emitter.emit(self.unit, applied, self.totals, self.current_time)
                if row is not None:
                    rows.append(row)
        self.result.summary_rows.extend(rows)
        return rows


HarvestStandsCallback = Callable[[ManagementUnit, UnitHarvestPass], None]


class HarvestReporter:
    """Accounts for harvests and writes the harvest logs and maps.

    Attributes:
        config: Output configuration
        species: Species registry
        prescriptions: Prescriptions ordered by index
        landscape: The simulated landscape
        collector: Site deltas for the current timestep
        event_log: Event Log table
        summary_log: Summary Log table
    """

    def __init__(self, config: HarvestOutputConfig, species: SpeciesRegistry,
                 prescriptions: Sequence[Prescription], landscape: Landscape):
        self.logger = get_logger(__name__)
        self.config = config
        self.species = species
        self.prescriptions = validate_prescriptions(prescriptions)
        self.landscape = landscape

        self.collector = SiteDeltaCollector(species)
        self.event_log: HarvestLogTable = create_event_log(config.event_log, species.names)
        self.summary_log: HarvestLogTable = create_summary_log(config.summary_log, species.names)
        self.aggregator = StandAggregator(self.collector, landscape.cell_area, self.event_log)
        self.emitter = SummaryEmitter(self.summary_log)

        self.prescription_map_writer = PrescriptionMapWriter(
            config.prescription_maps, len(self.prescriptions), config.map_driver
        )
        self.biomass_map_writer = None
        if config.biomass_maps is not None:
            self.biomass_map_writer = BiomassMapWriter(config.biomass_maps, config.map_driver)

    @classmethod
    def from_config_file(cls, config_path: Union[str, Path], species: SpeciesRegistry,
                         prescriptions: Sequence[Prescription],
                         landscape: Landscape) -> 'HarvestReporter':
        return cls(load_output_config(config_path), species, prescriptions, landscape)

    def _check_applied_prescriptions(self, unit: ManagementUnit) -> None:
        for applied in unit.applied_prescriptions:
            number = applied.number
            if not 0 <= number < len(self.prescriptions) or applied.prescription != self.prescriptions[number]:
                raise IndexSpaceError(
                    f"prescription {number} applied in management area {unit.map_code}",
                    [p.name for p in self.prescriptions], applied.name
                )

    def begin_timestep(self, current_time: int) -> None:
        """Forget the previous timestep's site harvests."""
        for site in self.landscape.active_sites():
            site.prescription = None
        self.collector.reset()
        self.logger.debug("Harvest reporting reset for time %d", current_time)

    def process_unit(self, unit: ManagementUnit, current_time: int,
                     harvest_stands: HarvestStandsCallback) -> UnitHarvestResult:
        """Harvest and report one management unit."""
        self._check_applied_prescriptions(unit)
        unit_pass = UnitHarvestPass(self, unit, current_time)
        harvest_stands(unit, unit_pass)
        unit_pass.log_initial_harvests()
        unit_pass.prevent_establishment()
        unit_pass.summarize_prescriptions()

        result = unit_pass.result
        self.logger.info(
            "Management area %s: %d stand events, %d prescription summaries",
            unit.map_code, len(result.event_rows), len(result.summary_rows)
        )
        return result

    def end_timestep(self, current_time: int) -> TimestepResult:
        """Write the timestep's maps."""
        result = TimestepResult(current_time)
        result.prescription_map = self.prescription_map_writer.write(self.landscape, current_time)
        if self.biomass_map_writer is not None:
            result.biomass_map = self.biomass_map_writer.write(
                self.landscape, self.collector, current_time
            )
        return result

    def run_timestep(self, current_time: int, units: Iterable[ManagementUnit],
                     harvest_stands: HarvestStandsCallback) -> TimestepResult:
        """Run harvest reporting for one timestep.

        Args:
            current_time: Current simulation time
            units: Management units, processed strictly in order
            harvest_stands: Harvest selection callback, called once per unit

        Returns:
            Rows and map paths written during the timestep
        """
        self.begin_timestep(current_time)
        unit_results = [self.process_unit(unit, current_time, harvest_stands) for unit in units]
        result = self.end_timestep(current_time)
        result.units = unit_results
        return result
