"""
Command-line replay of recorded harvest scenarios.

Usage:
    pyharvest scenario.yaml --config output.yaml
    pyharvest scenario.yaml --config output.yaml --log-level DEBUG --log-file run.log
"""
import argparse
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from .config_loader import HarvestOutputConfig, load_output_config
from .exceptions import ConfigurationError, HarvestError
from .harvest_reporter import HarvestReporter, TimestepResult
from .logging_config import get_logger, setup_logging
from .scenario import HarvestScenario, ScriptedHarvest, load_scenario

__all__ = [
    'replay_scenario',
    'main',
]

console = Console()
logger = get_logger(__name__)


def check_timesteps(scenario: HarvestScenario, config: HarvestOutputConfig) -> None:
    """Ensure every recorded timestep falls on the harvest timestep."""
    previous = None
    for step in scenario.timesteps:
        if step.time % config.timestep != 0:
            raise ConfigurationError(
                f"Scenario time {step.time} is not a multiple of the harvest timestep {config.timestep}"
            )
        if previous is not None and step.time <= previous:
            raise ConfigurationError(f"Scenario times must increase: {previous} then {step.time}")
        previous = step.time


def replay_scenario(scenario: HarvestScenario, config: HarvestOutputConfig) -> List[TimestepResult]:
    """Run harvest reporting for every recorded timestep.

    Args:
        scenario: Recorded landscape and harvest decisions
        config: Output configuration

    Returns:
        One result per timestep, in order
    """
    check_timesteps(scenario, config)
    reporter = HarvestReporter(config, scenario.species, scenario.prescriptions, scenario.landscape)

    results = []
    for step in scenario.timesteps:
        logger.info("Harvest timestep %d", step.time)
        results.append(reporter.run_timestep(step.time, scenario.units, ScriptedHarvest(scenario, step)))
    return results


def print_summary(results: Sequence[TimestepResult], config: HarvestOutputConfig) -> None:
    """Print the Summary Log rows written during the replay."""
    table = Table(title="Harvest Summary", show_header=True)
    table.add_column("Time", justify="right")
    table.add_column("Mgmt Area", justify="right")
    table.add_column("Prescription", style="cyan")
    table.add_column("Sites", justify="right")
    table.add_column("Biomass (Mg)", style="green", justify="right")
    table.add_column("Partial", justify="right")
    table.add_column("Complete", justify="right")

    for result in results:
        for row in result.summary_rows:
            table.add_row(
                str(row.time),
                str(row.management_area),
                row.prescription,
                str(row.harvested_sites),
                f"{row.total_biomass_harvested:.3f}",
                str(row.cohorts_partial_harvest),
                str(row.cohorts_complete_harvest),
            )

    console.print(table)
    console.print(f"[green]Event log: {config.event_log}[/green]")
    console.print(f"[green]Summary log: {config.summary_log}[/green]")
    for result in results:
        if result.prescription_map is not None:
            console.print(f"  Prescription map: {result.prescription_map}")
        if result.biomass_map is not None:
            console.print(f"  Biomass map: {result.biomass_map}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for scenario replay."""
    parser = argparse.ArgumentParser(
        description="Replay recorded harvests and write harvest logs and maps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pyharvest scenario.yaml --config output.yaml
  pyharvest scenario.yaml -c output.yaml --log-level DEBUG
        """
    )

    parser.add_argument(
        "scenario",
        type=Path,
        help="Recorded harvest scenario (YAML, TOML or JSON)"
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        required=True,
        help="Output configuration file"
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write log records to this file"
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Do not print the summary table"
    )

    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    try:
        config = load_output_config(args.config)
        scenario = load_scenario(args.scenario)
        results = replay_scenario(scenario, config)
    except HarvestError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1

    if not args.quiet:
        print_summary(results, config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
