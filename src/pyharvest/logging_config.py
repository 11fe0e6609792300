"""
Logging configuration for PyHarvest.

Provides a package-wide logger hierarchy rooted at ``pyharvest`` plus a few
helpers that format harvest log rows consistently.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from .log_records import EventLogRow, SummaryLogRow

ROOT_LOGGER_NAME = "pyharvest"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO,
                  log_file: Optional[Union[str, Path]] = None,
                  fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """Configure the package root logger.

    Repeated calls replace the handlers installed by earlier calls, so the
    CLI and tests can reconfigure without duplicating output.

    Args:
        level: Logging level name or number
        log_file: Optional file that receives a copy of every record
        fmt: Record format string

    Returns:
        The configured ``pyharvest`` logger
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(fmt)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger inside the package hierarchy.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Logger instance
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def log_stand_harvest(logger: logging.Logger, row: "EventLogRow") -> None:
    """Log one stand-harvest event at DEBUG level."""
    logger.debug(
        "Time %d, MA %s, stand %s: %s harvested %d/%d sites, %.3f Mg removed "
        "(%d partial, %d complete cohorts)",
        row.time, row.management_area, row.stand, row.prescription,
        row.harvested_sites, row.number_of_sites, row.biomass_removed,
        row.cohorts_partial_harvest, row.cohorts_complete_harvest,
    )


def log_summary_emitted(logger: logging.Logger, row: "SummaryLogRow") -> None:
    """Log one prescription summary at INFO level."""
    logger.info(
        "Time %d, MA %s: %s summary, %d sites harvested, %.3f Mg removed",
        row.time, row.management_area, row.prescription,
        row.harvested_sites, row.total_biomass_harvested,
    )
