"""
Append-only CSV log tables.

Each appended row is written to disk before ``append`` returns, so a run that
aborts mid-timestep leaves every row logged so far on disk.
"""
from pathlib import Path
from typing import Any, Dict, List, Sequence, Type, Union

import pandas as pd

from .exceptions import OutputError
from .log_records import EventLogRow, SummaryLogRow
from .logging_config import get_logger

__all__ = [
    'HarvestLogTable',
    'create_event_log',
    'create_summary_log',
]

LogRow = Union[EventLogRow, SummaryLogRow]


class HarvestLogTable:
    """A CSV table that rows are appended to in program order.

    Attributes:
        path: Output CSV path
        species_names: Species names used to expand per-species columns
        columns: Column header, in file order
        rows: Records appended since the table was opened
    """

    def __init__(self, path: Union[str, Path], row_type: Type[LogRow],
                 species_names: Sequence[str]):
        self.path = Path(path)
        self.row_type = row_type
        self.species_names = list(species_names)
        self.columns = row_type.column_names(self.species_names)
        self.rows: List[LogRow] = []
        self.logger = get_logger(__name__)

    def open(self) -> 'HarvestLogTable':
        """Create (or truncate) the file and write the header."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            pd.DataFrame(columns=self.columns).to_csv(self.path, index=False)
        except OSError as e:
            raise OutputError(self.path, str(e)) from e
        self.logger.info("Opened %s log %s", self.row_type.__name__, self.path)
        return self

    def append(self, row: LogRow) -> None:
        """Append one row and flush it to disk.

        Raises:
            TypeError: If the row is not of this table's row type
            OutputError: If the row cannot be written
        """
        if not isinstance(row, self.row_type):
            raise TypeError(f"{self.path.name} accepts {self.row_type.__name__} rows, "
                            f"got {type(row).__name__}")
        record = row.to_dict(self.species_names)
        try:
            pd.DataFrame([record], columns=self.columns).to_csv(
                self.path, mode='a', header=False, index=False
            )
        except OSError as e:
            raise OutputError(self.path, str(e)) from e
        self.rows.append(row)

    def to_records(self) -> List[Dict[str, Any]]:
        return [row.to_dict(self.species_names) for row in self.rows]

    def to_dataframe(self) -> pd.DataFrame:
        """Get the rows appended so far as a DataFrame."""
        return pd.DataFrame(self.to_records(), columns=self.columns)

    def __len__(self) -> int:
        return len(self.rows)


def create_event_log(path: Union[str, Path], species_names: Sequence[str]) -> HarvestLogTable:
    return HarvestLogTable(path, EventLogRow, species_names).open()


def create_summary_log(path: Union[str, Path], species_names: Sequence[str]) -> HarvestLogTable:
    return HarvestLogTable(path, SummaryLogRow, species_names).open()
