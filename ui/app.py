"""
Main Application Module
Contains the LiveMapApp Textual application class
"""

from datetime import datetime, timezone
from typing import Iterable, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static, TabbedContent, TabPane

from backend.config.constants import POLL_SERVERS
from backend.core.live_state import (
    CHANGE_AIRPORTS,
    CHANGE_FLIGHTS,
    CHANGE_SEARCH,
    CHANGE_SELECTION,
    CHANGE_SERVER,
    CHANGE_SERVERS,
    LAYER_FLIGHTS,
    LiveState,
    LiveStateSettings,
)
from backend.core.models import AirportRegistryEntry, Notice, SearchCategory, SearchIndexEntry, SelectionPhase
from backend.core.reconcile import MarkerLayer
from backend.core.unifier import top_airports
from backend.data.live_api import LiveApiClient
from backend.data.preferences import has_seen_onboarding, mark_onboarding_seen
from common import logger as debug_logger
from .config import HEADER_TOP_AIRPORTS, TOP_AIRPORTS_LIMIT, create_airports_table_config, create_flights_table_config
from .modals import AirportInfoScreen, FlightInfoScreen, OnboardingScreen, SearchScreen, ServerSelectScreen
from .tables import KeyedTableManager, airport_row, flight_row


class LiveMapApp(App):
    """Textual app for the Live Flight Map"""

    CSS = """
    #header-bar {
        height: 1;
        background: $boost;
        color: $text;
        layout: horizontal;
    }

    .header-title {
        width: 1fr;
        content-align: center middle;
        text-align: center;
    }

    .header-clocks {
        width: auto;
        content-align: right middle;
        padding-right: 2;
    }

    #top-airports {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }

    #tabs {
        height: 1fr;
    }

    TabbedContent {
        height: 100%;
    }

    TabbedContent > ContentSwitcher {
        height: 1fr;
    }

    DataTable {
        height: 100%;
        width: 100%;
    }

    TabPane {
        height: 100%;
    }

    #status-bar {
        height: 1;
        background: $surface;
        color: $text;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit", priority=True),
        Binding("ctrl+f", "show_search", "Search", priority=True),
        Binding("ctrl+s", "show_server_select", "Server", priority=True),
        Binding("escape", "close_selection", "Close", show=False),
    ]

    def __init__(
        self,
        client: LiveApiClient,
        static_airports: Iterable[AirportRegistryEntry] = (),
        settings: Optional[LiveStateSettings] = None,
    ):
        super().__init__()
        self.title = "Live Flight Map"
        self.live_state = LiveState(
            client,
            static_airports,
            settings=settings,
            notify=self.show_notice,
            on_change=self.on_live_state_changed,
        )
        self.airport_rows = MarkerLayer("airport-rows")
        self.shutting_down = False
        self.last_update_time: Optional[datetime] = None
        self.status_update_timer = None
        # TableManagers are created once the tables exist
        self.flights_manager: Optional[KeyedTableManager] = None
        self.airports_manager: Optional[KeyedTableManager] = None

    def compose(self) -> ComposeResult:
        """Create child widgets for the app."""
        with Container(id="header-bar"):
            yield Static("Live Flight Map", classes="header-title")
            yield Static("", classes="header-clocks")

        yield Static("", id="top-airports")

        with TabbedContent(initial="flights", id="tabs"):
            with TabPane("Flights", id="flights"):
                flights_table = DataTable(id="flights-table")
                flights_table.cursor_type = "row"
                yield flights_table

            with TabPane("Airports", id="airports"):
                airports_table = DataTable(id="airports-table")
                airports_table.cursor_type = "row"
                yield airports_table

        yield Static("Connecting...", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        self.flights_manager = KeyedTableManager(
            self.query_one("#flights-table", DataTable), create_flights_table_config(), flight_row
        )
        self.airports_manager = KeyedTableManager(
            self.query_one("#airports-table", DataTable), create_airports_table_config(), airport_row
        )
        self.flights_manager.setup()
        self.airports_manager.setup()

        self.live_state.start()
        self.status_update_timer = self.set_interval(1, self.update_status_bar)

        if not has_seen_onboarding():
            self.push_screen(OnboardingScreen(), self._on_onboarding_closed)

    def on_unmount(self) -> None:
        self.shutting_down = True
        self.live_state.stop()

    def _on_onboarding_closed(self, _result) -> None:
        mark_onboarding_seen()

    # Live state bridge

    def show_notice(self, notice: Notice) -> None:
        """Show an engine notice as a toast"""
        if self.shutting_down:
            return
        debug_logger.info(f"Notice ({notice.severity}): {notice.message}")
        self.notify(notice.message, severity=notice.severity)

    def on_live_state_changed(self, topic: str) -> None:
        """Push live state changes into the widgets"""
        if self.shutting_down:
            return
        if topic in (CHANGE_SERVER, CHANGE_FLIGHTS, CHANGE_SELECTION):
            self.flights_manager.apply(self.live_state.last_diffs.get(LAYER_FLIGHTS))

        if topic in (CHANGE_SERVER, CHANGE_AIRPORTS):
            self.refresh_airports()

        if topic in (CHANGE_FLIGHTS, CHANGE_AIRPORTS):
            self.last_update_time = datetime.now(timezone.utc)

        if topic == CHANGE_SELECTION:
            self._sync_selection_screen()

        if topic in (CHANGE_FLIGHTS, CHANGE_AIRPORTS):
            screen = self.screen
            if isinstance(screen, (FlightInfoScreen, AirportInfoScreen)):
                screen.refresh_content()

        if topic == CHANGE_SEARCH and isinstance(self.screen, SearchScreen):
            self.screen.show_results(self.live_state.search_results)

        if topic in (CHANGE_SERVERS, CHANGE_SERVER):
            self.update_status_bar()

    def refresh_airports(self) -> None:
        """Rebuild the traffic-ranked airport rows and the header line"""
        ranked = top_airports(self.live_state.unified_airports, TOP_AIRPORTS_LIMIT)
        diff = self.airport_rows.apply({airport.icao: airport for airport in ranked})
        self.airports_manager.apply(diff)
        if not diff.is_empty:
            self.airports_manager.table.sort(
                "traffic", "icao", key=lambda cells: (-int(str(cells[0])), str(cells[1]))
            )

        top_line = "  ".join(f"{a.icao} ({a.traffic})" for a in ranked[:HEADER_TOP_AIRPORTS])
        self.query_one("#top-airports", Static).update(f"Top active airports: {top_line}" if top_line else "")

    def _sync_selection_screen(self) -> None:
        selection = self.live_state.selection
        screen = self.screen
        if not isinstance(screen, (FlightInfoScreen, AirportInfoScreen)):
            return
        if selection.phase == SelectionPhase.IDLE:
            # Server change or preemption ended the selection under the modal
            self.pop_screen()
        elif isinstance(screen, FlightInfoScreen):
            screen.refresh_content()

    def update_status_bar(self) -> None:
        """Update the status bar and the header clock"""
        self.query_one(".header-clocks", Static).update(datetime.now(timezone.utc).strftime("%H:%M:%SZ"))

        state = self.live_state
        server = state.active_server
        if server is None:
            text = "No server available" if state.servers or state.poller.is_running(POLL_SERVERS) else "Connecting..."
        else:
            text = f"{server.name} | {len(state.flights)} flights"
            live_airports = sum(1 for airport in state.unified_airports if airport.live is not None)
            text += f" | {live_airports} active airports"
            if self.last_update_time:
                seconds = int((datetime.now(timezone.utc) - self.last_update_time).total_seconds())
                text += f" | Updated {seconds}s ago"

        selection = state.selection
        if selection.flight_id:
            flight = state.get_flight(selection.flight_id)
            label = flight.callsign if flight else selection.flight_id
            text += f" | Selected: {label} ({selection.phase.value})"
        elif selection.airport_icao:
            text += f" | Selected: {selection.airport_icao}"

        self.query_one("#status-bar", Static).update(text)

    # Selection

    def open_flight(self, flight_id: str) -> None:
        if isinstance(self.screen, (FlightInfoScreen, AirportInfoScreen)):
            self.pop_screen()
        self.live_state.select_flight(flight_id)
        self.push_screen(FlightInfoScreen(flight_id))

    def open_airport(self, icao: str) -> None:
        if isinstance(self.screen, (FlightInfoScreen, AirportInfoScreen)):
            self.pop_screen()
        if self.live_state.select_airport(icao):
            self.push_screen(AirportInfoScreen(icao))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        key = event.row_key.value
        if key is None:
            return
        if event.data_table.id == "flights-table":
            self.open_flight(key)
        elif event.data_table.id == "airports-table":
            self.open_airport(key)

    def action_close_selection(self) -> None:
        self.live_state.close_selection()

    # Search and server selection

    def action_show_search(self) -> None:
        if isinstance(self.screen, SearchScreen):
            return
        self.push_screen(SearchScreen(), self._on_search_closed)

    def _on_search_closed(self, entry: Optional[SearchIndexEntry]) -> None:
        self.live_state.search_index.clear()
        if entry is None:
            return
        if entry.type == SearchCategory.AIRPORT:
            self.open_airport(entry.id)
        else:
            self.open_flight(entry.id)

    def action_show_server_select(self) -> None:
        active = self.live_state.active_server
        self.push_screen(
            ServerSelectScreen(self.live_state.servers, active.id if active else None),
            self._on_server_selected,
        )

    def _on_server_selected(self, server_id: Optional[str]) -> None:
        if server_id is None:
            return
        active = self.live_state.active_server
        if active is not None and active.id == server_id:
            return
        self.last_update_time = None
        self.live_state.change_server(server_id)
