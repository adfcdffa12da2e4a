"""
Live state context.

Owns everything that changes while the app runs: the server list, the active
server, the flight and airport snapshots, the unified airport view, the
selection, the search index and the rendered marker layers. The presentation
layer reads the snapshots and calls the intents:

    select_flight(id), select_airport(icao), close_selection(),
    set_query(text), change_server(id)

`start()` loads the server list and begins polling the default server;
`stop()` tears all schedules down. Every state change is announced through
`on_change(topic)` with one of the CHANGE_* topics below.
"""

import asyncio
import functools
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from backend.cache.manager import find_server, load_servers_cached
from backend.config.constants import (
    DEFAULT_SERVER_HINT,
    FLIGHT_POLL_INTERVAL,
    POLL_FLIGHTS,
    POLL_SERVERS,
    POLL_WORLD,
    ROUTE_SETTLE_WINDOW,
    SEARCH_DEBOUNCE,
    SEARCH_RESULT_LIMIT,
    SERVER_RETRY_INTERVAL,
    WORLD_POLL_INTERVAL,
)
from backend.core.models import (
    AirportActivity,
    AirportRegistryEntry,
    FlightRecord,
    Notice,
    SearchIndexEntry,
    Selection,
    ServerContext,
    UnifiedAirport,
)
from backend.core.poller import NotifyCallback, Poller, run_fetch
from backend.core.reconcile import MarkerDiff, MarkerLayer
from backend.core.search import SearchIndex
from backend.core.selection import SelectionStateMachine
from backend.core.unifier import index_by_icao, placeable_airports, resolve_coordinates, unify
from backend.data.live_api import LiveApiClient, LiveApiError
from common import logger as debug_logger

CHANGE_SERVERS = "servers"
CHANGE_SERVER = "server"
CHANGE_FLIGHTS = "flights"
CHANGE_AIRPORTS = "airports"
CHANGE_SELECTION = "selection"
CHANGE_SEARCH = "search"

LAYER_FLIGHTS = "flights"
LAYER_AIRPORTS = "airports"
LAYER_OVERLAY = "overlay"

NO_SERVER_MESSAGE = "No server available. Retrying..."
CONNECT_FAILED_MESSAGE = "Failed to connect to Infinite Flight API."


@dataclass
class LiveStateSettings:
    """Runtime knobs, filled from the command line."""
    flight_interval: float = FLIGHT_POLL_INTERVAL
    world_interval: float = WORLD_POLL_INTERVAL
    server_retry_interval: float = SERVER_RETRY_INTERVAL
    settle_window: float = ROUTE_SETTLE_WINDOW
    search_debounce: float = SEARCH_DEBOUNCE
    search_limit: Optional[int] = SEARCH_RESULT_LIMIT
    preferred_server: Optional[str] = None


class LiveState:
    """Explicit owner of the live map state."""

    def __init__(
        self,
        client: LiveApiClient,
        static_airports: Iterable[AirportRegistryEntry] = (),
        settings: Optional[LiveStateSettings] = None,
        notify: Optional[NotifyCallback] = None,
        on_change: Optional[Callable[[str], None]] = None,
    ):
        self.client = client
        self.settings = settings or LiveStateSettings()
        self.static_airports = tuple(static_airports)
        self._notify = notify
        self._on_change = on_change

        self.poller = Poller(notify=self._report)
        self.selection_machine = SelectionStateMachine(
            client.get_flight_route,
            notify=self._report,
            settle_window=self.settings.settle_window,
            on_change=self._on_selection_changed,
        )
        self.search_index = SearchIndex(
            debounce=self.settings.search_debounce,
            on_results=self._on_search_results,
            limit=self.settings.search_limit,
        )

        self.flight_layer = MarkerLayer(LAYER_FLIGHTS)
        self.airport_layer = MarkerLayer(LAYER_AIRPORTS)
        self.overlay_layer = MarkerLayer(LAYER_OVERLAY)
        self.last_diffs: Dict[str, MarkerDiff] = {}

        self._servers: List[ServerContext] = []
        self._active_server: Optional[ServerContext] = None
        self._flights: Dict[str, FlightRecord] = {}
        self._live_airports: List[AirportActivity] = []
        self._unified: List[UnifiedAirport] = []
        self._unified_index: Dict[str, UnifiedAirport] = {}
        self._startup_task: Optional[asyncio.Task] = None

        self._recompute_airports()
        self._render_airports()

    # Read-only snapshots

    @property
    def servers(self) -> List[ServerContext]:
        return list(self._servers)

    @property
    def active_server(self) -> Optional[ServerContext]:
        return self._active_server

    @property
    def no_server_available(self) -> bool:
        return self._active_server is None

    @property
    def flights(self) -> List[FlightRecord]:
        return list(self._flights.values())

    def get_flight(self, flight_id: str) -> Optional[FlightRecord]:
        return self._flights.get(flight_id)

    @property
    def unified_airports(self) -> List[UnifiedAirport]:
        return list(self._unified)

    def get_airport(self, icao: str) -> Optional[UnifiedAirport]:
        return self._unified_index.get(icao)

    @property
    def selection(self) -> Selection:
        return self.selection_machine.selection

    @property
    def search_results(self) -> List[SearchIndexEntry]:
        return self.search_index.results

    # Lifecycle

    def start(self) -> asyncio.Task:
        """Load the server list and start polling. Needs a running event loop."""
        debug_logger.info("Live state starting")
        self._startup_task = asyncio.get_event_loop().create_task(self.load_servers())
        return self._startup_task

    def stop(self) -> None:
        debug_logger.info("Live state stopping")
        if self._startup_task is not None and not self._startup_task.done():
            self._startup_task.cancel()
        self.poller.stop_all()
        self.search_index.clear()
        self.selection_machine.reset()

    async def load_servers(self) -> bool:
        """
        Fetch the server list once and activate the default server.

        On failure, or when no server is listed, the server list is retried on
        its own schedule and flight/airport polling stays off until it loads.
        """
        try:
            servers = await run_fetch(load_servers_cached, self.client.get_servers)
        except LiveApiError as e:
            debug_logger.error(f"Failed to load server list: {e}")
            self._report(Notice(CONNECT_FAILED_MESSAGE, "error"))
            servers = []

        if servers:
            self._apply_servers(servers)
            return True

        self._start_server_retry()
        return False

    def _start_server_retry(self) -> None:
        if self.poller.is_running(POLL_SERVERS):
            return
        debug_logger.warning("No server available; retrying server list")
        self._report(Notice(NO_SERVER_MESSAGE, "warning"))
        self.poller.start(
            POLL_SERVERS,
            self.client.get_servers,
            self.settings.server_retry_interval,
            self._on_servers_retry,
            failure_message=CONNECT_FAILED_MESSAGE,
        )

    def _on_servers_retry(self, servers: List[ServerContext]) -> None:
        if not servers:
            return
        self.poller.stop(POLL_SERVERS)
        self._apply_servers(servers)

    def _apply_servers(self, servers: List[ServerContext]) -> None:
        self._servers = list(servers)
        debug_logger.info(f"Server list loaded: {', '.join(s.name for s in self._servers)}")
        self._changed(CHANGE_SERVERS)
        default = self._pick_default_server()
        if default is not None:
            self.change_server(default.id)

    def _pick_default_server(self) -> Optional[ServerContext]:
        if not self._servers:
            return None
        if self.settings.preferred_server:
            preferred = find_server(self._servers, self.settings.preferred_server)
            if preferred is not None:
                return preferred
            debug_logger.warning(f"Preferred server '{self.settings.preferred_server}' not found")
        for server in self._servers:
            if DEFAULT_SERVER_HINT in server.name.lower():
                return server
        return self._servers[0]

    # Intents

    def change_server(self, server_id: str) -> bool:
        """
        Make another server active.

        Stops the previous server's schedules, resets the selection at once,
        clears flights, live airports and every marker layer, then starts
        polling the new server.
        """
        server = find_server(self._servers, server_id)
        if server is None:
            self._report(Notice(f"Server information not available for {server_id}.", "error"))
            return False

        self.poller.stop(POLL_FLIGHTS)
        self.poller.stop(POLL_WORLD)
        self._active_server = server
        debug_logger.info(f"Active server: {server.name} ({server.id})")

        self.selection_machine.reset()
        self._flights = {}
        self._live_airports = []
        self._recompute_airports()
        self.last_diffs[LAYER_FLIGHTS] = self.flight_layer.clear()
        self.last_diffs[LAYER_OVERLAY] = self.overlay_layer.clear()
        self._render_airports()
        self.search_index.update_sources(self.flights, self._unified)
        self._changed(CHANGE_SERVER)

        self.poller.start(
            POLL_FLIGHTS,
            functools.partial(self.client.get_flights, server.id),
            self.settings.flight_interval,
            functools.partial(self._on_flights, server.id),
            failure_message="Failed to load flights for this server.",
        )
        self.poller.start(
            POLL_WORLD,
            functools.partial(self.client.get_world, server.id),
            self.settings.world_interval,
            functools.partial(self._on_world, server.id),
            failure_message="Failed to load airport data.",
        )
        return True

    def select_flight(self, flight_id: str) -> Optional[asyncio.Task]:
        server_id = self._active_server.id if self._active_server else None
        return self.selection_machine.select_flight(server_id, flight_id)

    def select_airport(self, icao: str) -> bool:
        airport = self._unified_index.get(icao)
        if airport is None:
            self._report(Notice(f"Airport {icao} not found.", "error"))
            return False
        position = resolve_coordinates(airport)
        if position is None:
            self._report(Notice("No valid coordinates found for this airport.", "warning"))
        self.selection_machine.select_airport(icao, position)
        return True

    def close_selection(self) -> None:
        self.selection_machine.close()

    def set_query(self, text: str) -> None:
        self.search_index.set_query(text)

    # Poll results

    def _is_stale(self, server_id: str, kind: str) -> bool:
        if self._active_server is None or self._active_server.id != server_id:
            debug_logger.debug(f"Dropping {kind} snapshot from inactive server {server_id}")
            return True
        return False

    def _on_flights(self, server_id: str, flights: List[FlightRecord]) -> None:
        if self._is_stale(server_id, POLL_FLIGHTS):
            return
        self._flights = {flight.id: flight for flight in flights}
        self._render_flights()
        self.search_index.update_sources(self.flights, self._unified)
        self._changed(CHANGE_FLIGHTS)

    def _on_world(self, server_id: str, airports: List[AirportActivity]) -> None:
        if self._is_stale(server_id, POLL_WORLD):
            return
        self._live_airports = list(airports)
        self._recompute_airports()
        self._render_airports()
        self.search_index.update_sources(self.flights, self._unified)
        self._changed(CHANGE_AIRPORTS)

    def _recompute_airports(self) -> None:
        self._unified = unify(self._live_airports, self.static_airports)
        self._unified_index = index_by_icao(self._unified)

    # Marker layers

    def _render_flights(self) -> None:
        desired = dict(self._flights)
        selection = self.selection
        # Keep the selected flight's marker while its selection is settling
        if selection.flight_id and selection.is_active and not selection.settled:
            if selection.flight_id not in desired and selection.flight_id in self.flight_layer:
                desired[selection.flight_id] = self.flight_layer.markers[selection.flight_id]
        self.last_diffs[LAYER_FLIGHTS] = self.flight_layer.apply(desired)

    def _render_airports(self) -> None:
        desired = {airport.icao: (airport, position) for airport, position in placeable_airports(self._unified)}
        self.last_diffs[LAYER_AIRPORTS] = self.airport_layer.apply(desired)

    def _render_overlay(self) -> None:
        selection = self.selection
        desired = {}
        if selection.flown_route:
            desired["flown_route"] = selection.flown_route
        if selection.flight_plan:
            desired["flight_plan"] = selection.flight_plan
        if selection.airport_icao and selection.airport_position is not None:
            desired[f"airport:{selection.airport_icao}"] = selection.airport_position
        self.last_diffs[LAYER_OVERLAY] = self.overlay_layer.apply(desired)

    def _on_selection_changed(self, selection: Selection) -> None:
        self._render_overlay()
        self._render_flights()
        self._changed(CHANGE_SELECTION)

    def _on_search_results(self, results: List[SearchIndexEntry]) -> None:
        self._changed(CHANGE_SEARCH)

    def _report(self, notice: Notice) -> None:
        if self._notify is not None:
            self._notify(notice)

    def _changed(self, topic: str) -> None:
        if self._on_change is not None:
            self._on_change(topic)
