"""Flight Information Modal Screen"""

from typing import TYPE_CHECKING

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.screen import ModalScreen
from textual.widgets import Static

from backend.core.models import SelectionPhase

if TYPE_CHECKING:
    from ui.app import LiveMapApp


class FlightInfoScreen(ModalScreen):
    """Modal screen showing the selected flight and its route status"""

    CSS = """
    FlightInfoScreen {
        align: center middle;
    }

    #flight-info-container {
        width: 72;
        height: auto;
        max-height: 80%;
        background: $surface;
        border: thick $primary;
        padding: 1 2;
    }

    #flight-info-title {
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
        color: $accent;
    }

    .info-section {
        margin-bottom: 1;
    }

    #flight-info-hint {
        text-align: center;
        color: $text-muted;
        margin-top: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close", priority=True),
        Binding("q", "close", "Close"),
    ]

    def __init__(self, flight_id: str):
        super().__init__()
        self.flight_id = flight_id

    @property
    def live_app(self) -> "LiveMapApp":
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        with Container(id="flight-info-container"):
            yield Static(self._format_title(), id="flight-info-title")
            with Vertical():
                yield Static(self._format_flight_info(), classes="info-section", id="flight-info-content")
                yield Static(self._format_route_info(), classes="info-section", id="flight-route-content")
            yield Static("Press Escape or Q to close", id="flight-info-hint")

    def _format_title(self) -> str:
        flight = self.live_app.live_state.get_flight(self.flight_id)
        return f"Flight {flight.callsign}" if flight else f"Flight {self.flight_id}"

    def _format_flight_info(self) -> str:
        flight = self.live_app.live_state.get_flight(self.flight_id)
        if flight is None:
            return "[dim]This flight is no longer in the latest snapshot.[/dim]"

        lines = [
            f"[bold]Pilot:[/bold] {flight.username or 'Anonymous'}",
            f"[bold]Position:[/bold] {flight.position.latitude:.4f}, {flight.position.longitude:.4f}",
            f"[bold]Altitude:[/bold] {flight.position.altitude:,.0f} ft",
            f"[bold]Ground speed:[/bold] {flight.speed:.0f} kt",
            f"[bold]Heading:[/bold] {flight.heading % 360:03.0f}",
            f"[bold]Vertical speed:[/bold] {flight.vertical_speed:+.0f} fpm",
        ]
        if flight.virtual_organization:
            lines.append(f"[bold]Virtual organization:[/bold] {flight.virtual_organization}")
        return "\n".join(lines)

    def _format_route_info(self) -> str:
        selection = self.live_app.live_state.selection
        if selection.flight_id != self.flight_id:
            return ""
        if selection.phase == SelectionPhase.SELECTING:
            return "[dim]Loading route...[/dim]"

        flown = len(selection.flown_route)
        plan = [p.waypoint_name for p in selection.flight_plan if p.waypoint_name]
        lines = [f"[bold]Flown route:[/bold] {flown} position reports"]
        if plan:
            shown = " ".join(plan[:12])
            if len(plan) > 12:
                shown += f" ... {plan[-1]}"
            lines.append(f"[bold]Flight plan:[/bold] {shown}")
        else:
            lines.append("[bold]Flight plan:[/bold] [dim]none filed[/dim]")
        return "\n".join(lines)

    def refresh_content(self) -> None:
        """Re-render after a poll tick or a route update"""
        self.query_one("#flight-info-title", Static).update(self._format_title())
        self.query_one("#flight-info-content", Static).update(self._format_flight_info())
        self.query_one("#flight-route-content", Static).update(self._format_route_info())

    def action_close(self) -> None:
        """End the selection; the app pops this modal once it is idle"""
        state = self.live_app.live_state
        if state.selection.is_active:
            state.close_selection()
        else:
            self.dismiss()
