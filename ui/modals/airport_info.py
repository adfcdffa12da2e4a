"""Airport Information Modal Screen"""

from typing import TYPE_CHECKING

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from backend.config.constants import ATC_FACILITY_TYPES
from backend.core.unifier import resolve_coordinates

if TYPE_CHECKING:
    from ui.app import LiveMapApp


class AirportInfoScreen(ModalScreen):
    """Modal screen showing live activity and ATC at an airport"""

    CSS = """
    AirportInfoScreen {
        align: center middle;
    }

    #airport-info-container {
        width: 72;
        height: auto;
        max-height: 80%;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    #airport-info-title {
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
        color: $accent;
    }

    #airport-info-hint {
        text-align: center;
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", priority=True),
        Binding("q", "close", "Close"),
    ]

    def __init__(self, icao: str):
        super().__init__()
        self.icao = icao

    @property
    def live_app(self) -> "LiveMapApp":
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        with Container(id="airport-info-container"):
            yield Static(self._format_title(), id="airport-info-title")
            yield Static(self._format_airport_info(), id="airport-info-content")
            yield Static("Press Escape or Q to close", id="airport-info-hint")

    def _format_title(self) -> str:
        airport = self.live_app.live_state.get_airport(self.icao)
        if airport is None:
            return self.icao
        return f"{airport.icao} - {airport.name}"

    def _format_airport_info(self) -> str:
        airport = self.live_app.live_state.get_airport(self.icao)
        if airport is None:
            return "[dim]Airport not found.[/dim]"

        lines = []
        if airport.iata:
            lines.append(f"[bold]IATA:[/bold] {airport.iata}")
        if airport.static and (airport.static.city or airport.static.country):
            place = ", ".join(p for p in (airport.static.city, airport.static.country) if p)
            lines.append(f"[bold]Location:[/bold] {place}")

        coordinates = resolve_coordinates(airport)
        if coordinates:
            lines.append(f"[bold]Position:[/bold] {coordinates[0]:.4f}, {coordinates[1]:.4f}")
        else:
            lines.append("[bold]Position:[/bold] [dim]unknown[/dim]")

        live = airport.live
        if live is None:
            lines.append("")
            lines.append("[dim]No live activity on this server.[/dim]")
            return "\n".join(lines)

        lines.append("")
        lines.append(f"[bold]Inbound:[/bold] {live.inbound_count}")
        lines.append(f"[bold]Outbound:[/bold] {live.outbound_count}")

        lines.append("")
        if live.atc_facilities:
            lines.append("[bold]ATC:[/bold]")
            for facility in live.atc_facilities:
                lines.append(f"  {facility.username or facility.user_id} ({ATC_FACILITY_TYPES.get(facility.type, 'Unknown')})")
        else:
            lines.append("[dim]No active ATC[/dim]")
        return "\n".join(lines)

    def refresh_content(self) -> None:
        """Re-render after a world status update"""
        self.query_one("#airport-info-title", Static).update(self._format_title())
        self.query_one("#airport-info-content", Static).update(self._format_airport_info())

    def action_close(self) -> None:
        """End the selection; the app pops this modal once it is idle"""
        state = self.live_app.live_state
        if state.selection.is_active:
            state.close_selection()
        else:
            self.dismiss()
