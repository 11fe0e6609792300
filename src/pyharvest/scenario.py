"""
Recorded harvest scenarios.

A scenario file describes a landscape, its management units and stands, and
for each harvest timestep the harvest decisions taken there, in the order the
harvest selection made them. Replaying a scenario drives ``HarvestReporter``
exactly as a live simulation would.

Example (YAML):

    cell_area: 0.09
    species: [abiebals, acerrubr, pinubank]
    prescriptions:
      - name: MaxAgeClearcut
      - name: PatchCutting
        prevent_establishment: true
    active_sites:
      - [1, 1, 0]
      - [1, 1, 1]
    management_units:
      - map_code: 1
        prescriptions:
          - {name: MaxAgeClearcut, begin: 0, end: 100}
        stands:
          - {map_code: 10, age: 40, sites: [[0, 0], [0, 1]]}
    timesteps:
      - time: 10
        events:
          - kind: stand_harvest
            management_area: 1
            stand: 10
            prescription: MaxAgeClearcut
            event_id: 1
            rank: 1
            damage_table: {abiebals: 2}
            sites:
              - location: [0, 0]
                biomass_removed: {abiebals: 100, pinubank: 50}
                cohorts_partially_damaged: 2
                cohorts_damaged: 5
          - kind: repeat_finished
            management_area: 1
            prescription: MaxAgeClearcut
            repeat_number: 1
            last_harvest: true
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Union

from .config_loader import load_config_file
from .exceptions import InvalidDataError
from .harvest_reporter import UnitHarvestPass
from .landscape import AppliedPrescription, Landscape, ManagementUnit, Prescription, Stand
from .species import SpeciesRegistry

__all__ = [
    'SiteHarvest',
    'StandHarvestEvent',
    'RepeatFinishedEvent',
    'ScenarioTimestep',
    'HarvestScenario',
    'ScriptedHarvest',
    'load_scenario',
]


@dataclass
class SiteHarvest:
    """Damage recorded on one site of a harvested stand."""
    location: Tuple[int, int]
    biomass_removed: Dict[str, float] = field(default_factory=dict)
    cohorts_partially_damaged: int = 0
    cohorts_damaged: int = 0


@dataclass
class StandHarvestEvent:
    """A stand taken by a prescription, initially or in a repeat step."""
    management_area: int
    stand: int
    prescription: str
    event_id: int = 0
    rank: float = 0.0
    repeat_number: int = 0
    damage_table: Dict[str, int] = field(default_factory=dict)
    sites: List[SiteHarvest] = field(default_factory=list)


@dataclass
class RepeatFinishedEvent:
    """A prescription's repeat step finished within a management unit."""
    management_area: int
    prescription: str
    repeat_number: int
    last_harvest: bool = False


ScenarioEvent = Union[StandHarvestEvent, RepeatFinishedEvent]


@dataclass
class ScenarioTimestep:
    time: int
    events: List[ScenarioEvent] = field(default_factory=list)


@dataclass
class HarvestScenario:
    """Everything needed to replay recorded harvests."""
    species: SpeciesRegistry
    prescriptions: List[Prescription]
    landscape: Landscape
    units: List[ManagementUnit]
    timesteps: List[ScenarioTimestep]


class ScriptedHarvest:
    """Harvest selection callback that replays one timestep's events."""

    def __init__(self, scenario: HarvestScenario, timestep: ScenarioTimestep):
        self.scenario = scenario
        self.timestep = timestep

    def __call__(self, unit: ManagementUnit, unit_pass: UnitHarvestPass) -> None:
        for stand in unit:
            stand.harvested = False

        for event in self.timestep.events:
            if event.management_area != unit.map_code:
                continue
            if isinstance(event, StandHarvestEvent):
                self._harvest_stand(unit, unit_pass, event)
            else:
                unit_pass.repeat_prescription_finished(
                    unit.find_applied(event.prescription), event.repeat_number, event.last_harvest
                )

    def _harvest_stand(self, unit: ManagementUnit, unit_pass: UnitHarvestPass,
                       event: StandHarvestEvent) -> None:
        species = self.scenario.species
        landscape = self.scenario.landscape
        stand = unit.find_stand(event.stand)
        prescription = unit.find_applied(event.prescription).prescription

        stand.harvested = True
        stand.last_prescription = prescription
        stand.event_id = event.event_id
        stand.harvested_rank = event.rank
        for name, count in event.damage_table.items():
            stand.record_cohort_damage(species.index_of(name), count)

        for site_harvest in event.sites:
            site = landscape.site_at(*site_harvest.location)
            if site not in list(stand):
                raise InvalidDataError(
                    "site harvest", f"site {site.location} is not an active site of stand {stand.map_code}"
                )
            unit_pass.site_harvested(
                site, prescription, site_harvest.biomass_removed,
                site_harvest.cohorts_partially_damaged, site_harvest.cohorts_damaged
            )

        if event.repeat_number > 0:
            stand.repeat_harvested = True
            unit_pass.repeat_stand_harvested(stand, event.repeat_number)


def _require(data: Mapping[str, Any], key: str, description: str) -> Any:
    if key not in data:
        raise InvalidDataError(description, f"missing required key '{key}'")
    return data[key]


def _location(value: Any) -> Tuple[int, int]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise InvalidDataError("site location", f"expected [row, column], got {value!r}")
    return (int(value[0]), int(value[1]))


def _parse_event(data: Mapping[str, Any]) -> ScenarioEvent:
    kind = _require(data, 'kind', "scenario event")
    if kind == 'stand_harvest':
        return StandHarvestEvent(
            management_area=int(_require(data, 'management_area', "stand harvest")),
            stand=int(_require(data, 'stand', "stand harvest")),
            prescription=str(_require(data, 'prescription', "stand harvest")),
            event_id=int(data.get('event_id', 0)),
            rank=float(data.get('rank', 0.0)),
            repeat_number=int(data.get('repeat_number', 0)),
            damage_table={str(k): int(v) for k, v in (data.get('damage_table') or {}).items()},
            sites=[
                SiteHarvest(
                    location=_location(_require(site, 'location', "site harvest")),
                    biomass_removed={str(k): float(v) for k, v in (site.get('biomass_removed') or {}).items()},
                    cohorts_partially_damaged=int(site.get('cohorts_partially_damaged', 0)),
                    cohorts_damaged=int(site.get('cohorts_damaged', 0)),
                )
                for site in data.get('sites') or []
            ],
        )
    if kind == 'repeat_finished':
        return RepeatFinishedEvent(
            management_area=int(_require(data, 'management_area', "repeat completion")),
            prescription=str(_require(data, 'prescription', "repeat completion")),
            repeat_number=int(_require(data, 'repeat_number', "repeat completion")),
            last_harvest=bool(data.get('last_harvest', False)),
        )
    raise InvalidDataError("scenario event", f"unknown kind '{kind}'")


def scenario_from_dict(data: Mapping[str, Any]) -> HarvestScenario:
    """Build a scenario from parsed file data.

    Raises:
        InvalidDataError: If references or locations are inconsistent
    """
    species = SpeciesRegistry(_require(data, 'species', "scenario"))

    prescriptions = [
        Prescription(
            name=str(_require(entry, 'name', "prescription")),
            number=number,
            prevent_establishment=bool(entry.get('prevent_establishment', False)),
        )
        for number, entry in enumerate(_require(data, 'prescriptions', "scenario"))
    ]
    by_name = {p.name: p for p in prescriptions}

    landscape = Landscape.from_mask(
        _require(data, 'active_sites', "scenario"),
        float(_require(data, 'cell_area', "scenario")),
    )

    assigned: Dict[Tuple[int, int], int] = {}
    units = []
    for unit_data in _require(data, 'management_units', "scenario"):
        unit = ManagementUnit(map_code=int(_require(unit_data, 'map_code', "management unit")))
        for applied in unit_data.get('prescriptions') or []:
            name = str(_require(applied, 'name', "applied prescription"))
            if name not in by_name:
                raise InvalidDataError("applied prescription", f"unknown prescription '{name}'")
            unit.applied_prescriptions.append(AppliedPrescription(
                by_name[name],
                int(applied.get('begin', 0)),
                int(_require(applied, 'end', "applied prescription")),
            ))
        for stand_data in unit_data.get('stands') or []:
            map_code = int(_require(stand_data, 'map_code', "stand"))
            sites = []
            for location in _require(stand_data, 'sites', "stand"):
                location = _location(location)
                site = landscape.site_at(*location)
                if not site.is_active:
                    raise InvalidDataError("stand", f"stand {map_code} includes inactive site {location}")
                if location in assigned:
                    raise InvalidDataError(
                        "stand", f"site {location} belongs to stands {assigned[location]} and {map_code}"
                    )
                assigned[location] = map_code
                sites.append(site)
            unit.stands.append(Stand(map_code, sites, len(species), age=int(stand_data.get('age', 0))))
        units.append(unit)

    timesteps = [
        ScenarioTimestep(
            time=int(_require(step, 'time', "timestep")),
            events=[_parse_event(event) for event in step.get('events') or []],
        )
        for step in data.get('timesteps') or []
    ]
    return HarvestScenario(species, prescriptions, landscape, units, timesteps)


def load_scenario(file_path: Union[str, Path]) -> HarvestScenario:
    """Load a recorded harvest scenario from YAML, TOML or JSON."""
    return scenario_from_dict(load_config_file(file_path))
