import asyncio

from backend.core.models import SearchCategory
from backend.core.search import ALL_CATEGORIES, SearchIndex, parse_query, search
from backend.core.unifier import unify

from factories import make_flight, make_live_airport, make_static_airport


def airports(*live):
    return unify(list(live), [])


def test_equal_traffic_breaks_ties_lexically():
    unified = airports(make_live_airport("EDDM", inbound=20), make_live_airport("EDDF", inbound=20))
    results = list(search("ED", [SearchCategory.AIRPORT], [], unified))
    assert [r.id for r in results] == ["EDDF", "EDDM"]


def test_higher_traffic_ranks_first():
    unified = airports(make_live_airport("EDDA", inbound=10), make_live_airport("EDDZ", inbound=30))
    results = list(search("ED", [SearchCategory.AIRPORT], [], unified))
    assert [r.id for r in results] == ["EDDZ", "EDDA"]


def test_matching_is_case_insensitive_across_categories():
    flights = [
        make_flight("F1", callsign="DLH400", username="lufthansa_fan"),
        make_flight("F2", callsign="BAW1", username="speedbird"),
    ]
    unified = unify([], [make_static_airport("EDDF", 50.0, 8.5, name="Frankfurt", iata="FRA")])

    results = list(search("dlh", ALL_CATEGORIES, flights, unified))
    assert [(r.type, r.id) for r in results] == [(SearchCategory.AIRCRAFT, "F1")]

    results = list(search("fra", ALL_CATEGORIES, flights, unified))
    assert [(r.type, r.id) for r in results] == [(SearchCategory.AIRPORT, "EDDF")]

    results = list(search("SPEED", ALL_CATEGORIES, flights, unified))
    assert [(r.type, r.id) for r in results] == [(SearchCategory.USER, "F2")]


def test_categories_come_out_in_fixed_order():
    flights = [make_flight("F1", callsign="EDW12", username="edwin")]
    unified = airports(make_live_airport("EDDF", inbound=5))
    results = list(search("ed", ALL_CATEGORIES, flights, unified))
    assert [r.type for r in results] == [SearchCategory.AIRCRAFT, SearchCategory.AIRPORT, SearchCategory.USER]


def test_short_query_lists_live_airports_by_traffic():
    flights = [make_flight("F1", callsign="A1")]
    unified = unify(
        [make_live_airport("EDDM", inbound=3), make_live_airport("EGLL", inbound=9)],
        [make_static_airport("KJFK", 40.6, -73.8)],
    )
    results = list(search("A", ALL_CATEGORIES, flights, unified))
    assert [r.id for r in results] == ["EGLL", "EDDM"]
    assert list(search("", [SearchCategory.AIRCRAFT], flights, unified)) == []


def test_search_is_a_fresh_generator_each_time():
    unified = airports(make_live_airport("EDDF", inbound=1))
    first = search("EDDF", ALL_CATEGORIES, [], unified)
    assert [r.id for r in first] == ["EDDF"]
    assert list(first) == []
    assert [r.id for r in search("EDDF", ALL_CATEGORIES, [], unified)] == ["EDDF"]


def test_query_prefixes_narrow_categories():
    assert parse_query("@ eddf") == ("eddf", (SearchCategory.AIRPORT,))
    assert parse_query("#DLH") == ("DLH", (SearchCategory.AIRCRAFT,))
    assert parse_query("~pilot") == ("pilot", (SearchCategory.USER,))
    assert parse_query("  dlh ") == ("dlh", ALL_CATEGORIES)


def test_debounce_recomputes_once_with_final_query():
    async def scenario():
        published = []
        index = SearchIndex(debounce=0.05, on_results=published.append)
        index.update_sources(
            [make_flight("F1", callsign="DLH1"), make_flight("F2", callsign="DLH12")],
            [],
        )

        for text in ("D", "DL", "DLH", "DLH1", "DLH12"):
            index.set_query(text)
            await asyncio.sleep(0.02)

        assert index.recompute_count == 0
        await asyncio.sleep(0.15)

        assert index.recompute_count == 1
        assert index.debounced_query == "DLH12"
        assert [r.id for r in index.results] == ["F2"]
        assert len(published) == 1

    asyncio.run(scenario())


def test_newer_query_supersedes_running_recomputation():
    async def scenario():
        published = []
        flights = [make_flight(f"F{i}", callsign=f"AAL{i}") for i in range(50)]
        flights.append(make_flight("X", callsign="BAW9"))
        index = SearchIndex(debounce=0.01, on_results=published.append, chunk_size=5)
        index.update_sources(flights, [])

        index.set_query("AAL")
        await asyncio.sleep(0.02)
        index.set_query("BAW")
        await asyncio.sleep(0.1)

        assert [r.id for r in index.results] == ["X"]
        assert [r.id for r in published[-1]] == ["X"]
        assert not index.is_searching

    asyncio.run(scenario())


def test_new_snapshots_refresh_settled_query():
    async def scenario():
        index = SearchIndex(debounce=0.01)
        index.set_query("DLH")
        await asyncio.sleep(0.05)
        assert index.results == []

        index.update_sources([make_flight("F1", callsign="DLH1")], [])
        await asyncio.sleep(0.01)
        assert [r.id for r in index.results] == ["F1"]

    asyncio.run(scenario())


def test_replaced_query_never_publishes_its_results():
    async def scenario():
        published = []
        flights = [make_flight(f"F{i}", callsign=f"AAL{i}") for i in range(50)]
        flights.append(make_flight("X", callsign="BAW9"))
        index = SearchIndex(debounce=0.05, on_results=published.append, chunk_size=5)
        index.update_sources(flights, [])

        index.set_query("AAL")
        while index.debounced_query != "AAL":
            await asyncio.sleep(0.005)
        await asyncio.sleep(0)
        assert index.is_searching

        index.set_query("BAW")
        await asyncio.sleep(0.01)
        assert published == []

        await asyncio.sleep(0.1)
        assert [[r.id for r in batch] for batch in published] == [["X"]]

    asyncio.run(scenario())


class UnreadableAirports:
    def __iter__(self):
        raise AssertionError("airports were read before aircraft were consumed")


def test_later_categories_are_only_matched_on_demand():
    flights = [make_flight("F1", callsign="DLH1"), make_flight("F2", callsign="DLH2")]
    results = search("dlh", ALL_CATEGORIES, flights, UnreadableAirports())
    assert next(results).id == "F1"
    assert next(results).id == "F2"
