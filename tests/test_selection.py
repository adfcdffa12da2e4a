import asyncio

from backend.core.models import RouteData, SelectionPhase
from backend.core.selection import ROUTE_EMPTY_MESSAGE, ROUTE_FAILED_MESSAGE, SelectionStateMachine
from backend.data.live_api import TransportError

from factories import P1, P2, FakeLiveClient


def make_machine(client, settle_window=0.2):
    notices = []
    machine = SelectionStateMachine(client.get_flight_route, notify=notices.append, settle_window=settle_window)
    return machine, notices


def test_select_flight_records_id_before_fetch_then_protects():
    async def scenario():
        client = FakeLiveClient(routes={"F1": RouteData(flown_route=(P1, P2))})
        machine, notices = make_machine(client)

        task = machine.select_flight("srv", "F1")
        assert machine.selection.flight_id == "F1"
        assert machine.selection.phase == SelectionPhase.SELECTING
        assert machine.is_protected("F1")
        assert client.calls == []

        await task
        assert machine.selection.phase == SelectionPhase.PROTECTED
        assert machine.selection.flown_route == (P1, P2)
        assert machine.selection.flight_plan == ()
        assert notices == []

        machine.close()
        assert machine.selection.phase == SelectionPhase.IDLE
        assert machine.selection.flight_id is None

    asyncio.run(scenario())


def test_selection_stays_protected_through_settling_window():
    async def scenario():
        client = FakeLiveClient(routes={"F1": RouteData(flown_route=(P1,))})
        machine, _ = make_machine(client, settle_window=0.15)

        await machine.select_flight("srv", "F1")
        await asyncio.sleep(0.05)
        assert machine.is_protected("F1")
        assert not machine.selection.settled

        await asyncio.sleep(0.2)
        assert machine.selection.settled
        assert machine.is_protected("F1")

    asyncio.run(scenario())


def test_late_route_for_superseded_selection_is_discarded():
    async def scenario():
        client = FakeLiveClient(routes={
            "A": RouteData(flown_route=(P1,)),
            "B": RouteData(flown_route=(P2,)),
        })
        client.route_gates["A"] = asyncio.Event()
        machine, _ = make_machine(client)

        task_a = machine.select_flight("srv", "A")
        task_b = machine.select_flight("srv", "B")
        await task_b
        assert machine.selection.flight_id == "B"
        assert machine.selection.flown_route == (P2,)

        client.route_gates["A"].set()
        await task_a
        assert machine.selection.flight_id == "B"
        assert machine.selection.flown_route == (P2,)

    asyncio.run(scenario())


def test_route_failure_still_protects_and_notifies():
    async def scenario():
        client = FakeLiveClient(routes={"F1": TransportError("down")})
        machine, notices = make_machine(client)

        await machine.select_flight("srv", "F1")
        assert machine.selection.phase == SelectionPhase.PROTECTED
        assert machine.selection.flown_route == ()
        assert [(n.message, n.severity) for n in notices] == [(ROUTE_FAILED_MESSAGE, "error")]

    asyncio.run(scenario())


def test_empty_route_raises_warning():
    async def scenario():
        client = FakeLiveClient()
        machine, notices = make_machine(client)

        await machine.select_flight("srv", "F1")
        assert machine.selection.phase == SelectionPhase.PROTECTED
        assert [(n.message, n.severity) for n in notices] == [(ROUTE_EMPTY_MESSAGE, "warning")]

    asyncio.run(scenario())


def test_no_server_goes_straight_to_protected():
    async def scenario():
        client = FakeLiveClient()
        machine, _ = make_machine(client)

        assert machine.select_flight(None, "F1") is None
        assert machine.selection.phase == SelectionPhase.PROTECTED
        assert client.calls == []

    asyncio.run(scenario())


def test_reset_skips_settling_window():
    async def scenario():
        client = FakeLiveClient(routes={"F1": RouteData(flown_route=(P1, P2))})
        machine, _ = make_machine(client, settle_window=5)

        await machine.select_flight("srv", "F1")
        generation = machine.selection.generation
        machine.reset()
        assert machine.selection.phase == SelectionPhase.IDLE
        assert machine.selection.flown_route == ()
        assert machine.selection.generation > generation
        assert not machine.is_protected("F1")

    asyncio.run(scenario())


def test_airport_selection_is_replaced_by_flight_selection():
    async def scenario():
        client = FakeLiveClient()
        machine, _ = make_machine(client)

        machine.select_airport("EDDF", (50.0, 8.5))
        assert machine.selection.phase == SelectionPhase.PROTECTED
        assert machine.selection.airport_icao == "EDDF"
        assert machine.selection.airport_position == (50.0, 8.5)

        task = machine.select_flight("srv", "F1")
        assert machine.selection.airport_icao is None
        assert machine.selection.airport_position is None
        await task

    asyncio.run(scenario())


def test_on_change_sees_every_transition():
    async def scenario():
        client = FakeLiveClient(routes={"F1": RouteData(flown_route=(P1,))})
        phases = []
        machine = SelectionStateMachine(
            client.get_flight_route,
            settle_window=0.05,
            on_change=lambda selection: phases.append((selection.phase, selection.settled)),
        )

        await machine.select_flight("srv", "F1")
        await asyncio.sleep(0.1)
        machine.close()

        assert phases == [
            (SelectionPhase.SELECTING, False),
            (SelectionPhase.PROTECTED, False),
            (SelectionPhase.PROTECTED, True),
            (SelectionPhase.IDLE, False),
        ]

    asyncio.run(scenario())


def test_airport_selection_reports_selecting_before_protected():
    async def scenario():
        client = FakeLiveClient()
        seen = []
        machine = SelectionStateMachine(
            client.get_flight_route,
            settle_window=5,
            on_change=lambda selection: seen.append((selection.phase, selection.airport_icao)),
        )

        machine.select_airport("EDDF", (50.0, 8.5))
        assert seen == [
            (SelectionPhase.SELECTING, "EDDF"),
            (SelectionPhase.PROTECTED, "EDDF"),
        ]
        machine.close()

    asyncio.run(scenario())
