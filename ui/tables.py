"""
Table Management Module
Contains KeyedTableManager and the row formatters for flights and airports
"""

from typing import Any, Callable, Optional

from rich.text import Text
from textual.widgets import DataTable
from textual.widgets.data_table import CellDoesNotExist

from backend.core.models import FlightRecord, UnifiedAirport
from backend.core.reconcile import MarkerDiff
from common import logger as debug_logger
from .config import TableConfig


def flight_row(flight: FlightRecord) -> tuple:
    """Format a flight as a table row"""
    return (
        flight.callsign,
        flight.username or "-",
        f"{flight.position.altitude:,.0f}",
        f"{flight.speed:.0f}",
        f"{flight.heading % 360:03.0f}",
        f"{flight.vertical_speed:+.0f}",
    )


def airport_row(airport: UnifiedAirport) -> tuple:
    """Format an airport as a table row"""
    live = airport.live
    atc = ", ".join(f.username or f.user_id for f in live.atc_facilities) if live else ""
    return (
        airport.icao,
        airport.name,
        airport.traffic,
        live.inbound_count if live else 0,
        live.outbound_count if live else 0,
        atc or "-",
    )


class KeyedTableManager:
    """
    Keeps a DataTable in step with a keyed marker diff.

    Rows are keyed by the marker key (flight id or ICAO), so a poll tick only
    touches the rows that were added, removed or changed, and the cursor stays
    on the same flight or airport across refreshes.
    """

    def __init__(self, table: DataTable, config: TableConfig, to_row: Callable[[Any], tuple]):
        self.table = table
        self.config = config
        self.to_row = to_row

    def setup(self) -> None:
        """Create the columns on an empty table"""
        self.table.clear(columns=True)
        for column in self.config.columns:
            self.table.add_column(column.name, key=column.key, width=column.width)

    def _cells(self, payload: Any) -> list:
        cells = []
        for column, value in zip(self.config.columns, self.to_row(payload)):
            if column.content_align == "right":
                value = Text(str(value), justify="right")
            cells.append(value)
        return cells

    def apply(self, diff: Optional[MarkerDiff]) -> None:
        """Apply removals, updates and additions to the table"""
        if diff is None or diff.is_empty:
            return

        for key in diff.removed:
            if str(key) in self.table.rows:
                self.table.remove_row(str(key))

        added = dict(diff.added)
        for key, payload in diff.updated.items():
            if str(key) not in self.table.rows:
                added[key] = payload
                continue
            for column, value in zip(self.config.columns, self._cells(payload)):
                self.table.update_cell(str(key), column.key, value)

        for key, payload in added.items():
            if str(key) in self.table.rows:
                continue
            self.table.add_row(*self._cells(payload), key=str(key))

        debug_logger.debug(
            f"Table {self.table.id}: +{len(diff.added)} -{len(diff.removed)} ~{len(diff.updated)}"
        )

    def selected_key(self) -> Optional[str]:
        """Key of the row under the cursor"""
        if self.table.row_count == 0:
            return None
        try:
            row_key, _ = self.table.coordinate_to_cell_key(self.table.cursor_coordinate)
        except CellDoesNotExist:
            return None
        return row_key.value
