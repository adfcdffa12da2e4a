from backend.core.models import AirportPriority
from backend.core.unifier import (
    index_by_icao,
    placeable_airports,
    resolve_coordinates,
    top_airports,
    unify,
)

from factories import make_atc, make_live_airport, make_static_airport


STATIC = [
    make_static_airport("EDDF", 50.03, 8.57, name="Frankfurt am Main Airport", iata="FRA"),
    make_static_airport("EDDM", 48.35, 11.79, name="Munich Airport", iata="MUC"),
]
LIVE = [
    make_live_airport("EDDF", inbound=12, outbound=8, name="Frankfurt"),
    make_live_airport("XXXX", inbound=1),
]


def test_unify_is_idempotent():
    assert unify(LIVE, STATIC) == unify(LIVE, STATIC)


def test_live_takes_priority_and_keeps_static():
    unified = index_by_icao(unify(LIVE, STATIC))
    eddf = unified["EDDF"]
    assert eddf.priority == AirportPriority.LIVE
    assert eddf.static == STATIC[0]
    assert eddf.live == LIVE[0]
    assert unified["EDDM"].priority == AirportPriority.STATIC
    assert unified["EDDM"].live is None


def test_every_icao_appears_once():
    icaos = [airport.icao for airport in unify(LIVE, STATIC)]
    assert sorted(icaos) == ["EDDF", "EDDM", "XXXX"]


def test_absent_inputs():
    assert unify(None, None) == []
    assert [a.icao for a in unify(None, STATIC)] == ["EDDF", "EDDM"]
    assert [a.icao for a in unify(LIVE, [])] == ["EDDF", "XXXX"]


def test_coordinates_prefer_first_atc_facility():
    live = make_live_airport("EDDF", atc=[make_atc(50.1, 8.6), make_atc(51.0, 9.0)])
    airport = index_by_icao(unify([live], STATIC))["EDDF"]
    assert resolve_coordinates(airport) == (50.1, 8.6)


def test_coordinates_fall_back_to_static():
    unified = index_by_icao(unify(LIVE, STATIC))
    assert resolve_coordinates(unified["EDDF"]) == (50.03, 8.57)
    assert resolve_coordinates(unified["EDDM"]) == (48.35, 11.79)


def test_facility_without_position_falls_back_to_static():
    live = make_live_airport("EDDF", atc=[make_atc(None, None)])
    airport = index_by_icao(unify([live], STATIC))["EDDF"]
    assert resolve_coordinates(airport) == (50.03, 8.57)


def test_airport_without_position_is_not_placed_but_kept():
    unified = unify(LIVE, STATIC)
    placed = [airport.icao for airport, _ in placeable_airports(unified)]
    assert "XXXX" not in placed
    assert "XXXX" in index_by_icao(unified)


def test_display_name_resolution():
    unified = index_by_icao(unify(LIVE, STATIC))
    assert unified["EDDF"].name == "Frankfurt"
    assert unified["EDDM"].name == "Munich Airport"
    assert unified["XXXX"].name == "XXXX"
    assert unified["EDDF"].iata == "FRA"


def test_top_airports_ranks_live_airports_by_traffic():
    live = [
        make_live_airport("EDDM", inbound=10, outbound=10),
        make_live_airport("EDDF", inbound=15, outbound=5),
        make_live_airport("EGLL", inbound=30),
    ]
    ranked = top_airports(unify(live, STATIC))
    assert [a.icao for a in ranked] == ["EGLL", "EDDF", "EDDM"]
    assert [a.icao for a in top_airports(unify(live, STATIC), limit=1)] == ["EGLL"]
