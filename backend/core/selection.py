"""
Selection state machine.

    idle -> selecting -> protected -> idle

Selecting a flight records its id synchronously, before the route fetch is
even scheduled, so every render pass that runs afterwards already sees the
flight as protected. The route response is applied only if the selection that
requested it is still current (matched by generation). After the response, a
settling window runs; when it elapses the selection is marked settled.

An explicit close, a new selection or a server change ends the selection.
A server change is an immediate reset that skips the settling window.
"""

import asyncio
from dataclasses import replace
from typing import Any, Callable, Optional, Tuple

from backend.config.constants import ROUTE_SETTLE_WINDOW
from backend.core.models import Notice, RouteData, Selection, SelectionPhase
from backend.core.poller import NotifyCallback, run_fetch
from backend.data.live_api import LiveApiError
from common import logger as debug_logger

ROUTE_FAILED_MESSAGE = "Failed to load flight route."
ROUTE_EMPTY_MESSAGE = (
    "No route data available for this flight. The pilot may not have filed a "
    "flight plan, or the flight data is not yet available."
)


class SelectionStateMachine:
    """Owns the single current selection and its route fetch."""

    def __init__(
        self,
        fetch_route: Callable[[str, str], Any],
        notify: Optional[NotifyCallback] = None,
        settle_window: float = ROUTE_SETTLE_WINDOW,
        on_change: Optional[Callable[[Selection], None]] = None,
    ):
        self._fetch_route = fetch_route
        self._notify = notify
        self.settle_window = settle_window
        self._on_change = on_change
        self._selection = Selection()
        self._generation = 0
        self._route_task: Optional[asyncio.Task] = None
        self._settle_handle: Optional[asyncio.TimerHandle] = None

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def route_task(self) -> Optional[asyncio.Task]:
        return self._route_task

    def is_protected(self, flight_id: str) -> bool:
        """True while `flight_id` is the selected flight, whatever the poll says."""
        return self._selection.is_active and self._selection.flight_id == flight_id

    def select_flight(self, server_id: Optional[str], flight_id: str) -> Optional[asyncio.Task]:
        """
        Select a flight and start fetching its route.

        Returns the route fetch task, or None when there is no active server
        to fetch from (the selection then goes straight to protected with
        empty routes).
        """
        generation = self._begin()
        self._set(Selection(
            flight_id=flight_id,
            phase=SelectionPhase.SELECTING,
            generation=generation,
        ))
        debug_logger.info(f"Selected flight {flight_id} (generation {generation})")

        if server_id is None:
            self._apply_route(generation, RouteData())
            return None

        self._route_task = asyncio.get_event_loop().create_task(
            self._load_route(server_id, flight_id, generation)
        )
        return self._route_task

    def select_airport(self, icao: str, position: Optional[Tuple[float, float]]) -> None:
        """
        Select an airport.

        Airports have no route to fetch: observers see the selecting phase
        and the selection is then protected straight away. `position` places
        the transient overlay marker; None means the airport has no
        renderable position.
        """
        generation = self._begin()
        selecting = Selection(
            phase=SelectionPhase.SELECTING,
            airport_icao=icao,
            airport_position=position,
            generation=generation,
        )
        self._set(selecting)
        self._set(replace(selecting, phase=SelectionPhase.PROTECTED))
        debug_logger.info(f"Selected airport {icao} (generation {generation})")
        self._start_settle_timer(generation)

    def close(self) -> None:
        """Explicitly close the details view."""
        if not self._selection.is_active:
            return
        debug_logger.info("Selection closed")
        self._go_idle()

    def reset(self) -> None:
        """Immediate, unconditional return to idle (server change)."""
        debug_logger.info("Selection reset")
        self._go_idle()

    def _begin(self) -> int:
        self._cancel_settle_timer()
        self._generation += 1
        return self._generation

    def _go_idle(self) -> None:
        generation = self._begin()
        self._set(Selection(generation=generation))

    def _set(self, selection: Selection) -> None:
        self._selection = selection
        if self._on_change is not None:
            self._on_change(selection)

    async def _load_route(self, server_id: str, flight_id: str, generation: int) -> None:
        failed = False
        try:
            route = await run_fetch(self._fetch_route, server_id, flight_id)
        except LiveApiError as e:
            debug_logger.warning(f"Route fetch for {flight_id} failed: {e}")
            route, failed = RouteData(), True
        except Exception as e:
            debug_logger.error(f"Unexpected error fetching route for {flight_id}: {e}")
            route, failed = RouteData(), True

        if generation != self._generation:
            debug_logger.debug(f"Discarding route for {flight_id}: generation {generation} superseded by {self._generation}")
            return

        if failed:
            self._report(Notice(ROUTE_FAILED_MESSAGE, "error"))
        elif route.is_empty:
            self._report(Notice(ROUTE_EMPTY_MESSAGE, "warning"))

        self._apply_route(generation, route)

    def _apply_route(self, generation: int, route: RouteData) -> None:
        self._set(self._selection.with_route(route))
        self._start_settle_timer(generation)

    def _start_settle_timer(self, generation: int) -> None:
        self._cancel_settle_timer()
        self._settle_handle = asyncio.get_event_loop().call_later(
            self.settle_window, self._settle, generation
        )

    def _cancel_settle_timer(self) -> None:
        if self._settle_handle is not None:
            self._settle_handle.cancel()
            self._settle_handle = None

    def _settle(self, generation: int) -> None:
        self._settle_handle = None
        if generation != self._generation or self._selection.phase != SelectionPhase.PROTECTED:
            return
        self._set(replace(self._selection, settled=True))

    def _report(self, notice: Notice) -> None:
        if self._notify is not None:
            self._notify(notice)
