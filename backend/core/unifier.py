"""
Airport unification.

Merges the live airport activity from the world endpoint with the bundled
static registry into one view addressable by ICAO code.

Priority: live > static. A live record replaces the static one for display
and selection, but the static record is kept alongside it so names and
coordinates are still available when live data lacks them.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from backend.core.models import (
    AirportActivity,
    AirportPriority,
    AirportRegistryEntry,
    UnifiedAirport,
)


def unify(
    live_airports: Optional[Iterable[AirportActivity]],
    static_airports: Optional[Iterable[AirportRegistryEntry]],
) -> List[UnifiedAirport]:
    """
    Merge live and static airports into one record per ICAO code.

    Pure and idempotent: no I/O, never raises, and the same inputs always
    give structurally equal output. Absent inputs are treated as empty.
    """
    airport_map: Dict[str, UnifiedAirport] = {}

    for static in static_airports or ():
        airport_map[static.icao] = UnifiedAirport(
            icao=static.icao,
            static=static,
            priority=AirportPriority.STATIC,
        )

    for live in live_airports or ():
        existing = airport_map.get(live.icao)
        airport_map[live.icao] = UnifiedAirport(
            icao=live.icao,
            live=live,
            static=existing.static if existing else None,
            priority=AirportPriority.LIVE,
        )

    return list(airport_map.values())


def resolve_coordinates(airport: UnifiedAirport) -> Optional[Tuple[float, float]]:
    """
    Pick the map position of an airport.

    Live airports with ATC use the first facility's position; otherwise the
    static registry position is used. None means the airport can't be placed
    on the map (it stays searchable).
    """
    if airport.priority == AirportPriority.LIVE and airport.live and airport.live.atc_facilities:
        facility = airport.live.atc_facilities[0]
        if facility.latitude is not None and facility.longitude is not None:
            return (facility.latitude, facility.longitude)

    if airport.static is not None:
        return (airport.static.latitude, airport.static.longitude)

    return None


def index_by_icao(airports: Iterable[UnifiedAirport]) -> Dict[str, UnifiedAirport]:
    return {airport.icao: airport for airport in airports}


def placeable_airports(airports: Iterable[UnifiedAirport]) -> List[Tuple[UnifiedAirport, Tuple[float, float]]]:
    """Airports that have a renderable position, with that position."""
    placed = []
    for airport in airports:
        coordinates = resolve_coordinates(airport)
        if coordinates is not None:
            placed.append((airport, coordinates))
    return placed


def traffic_sort_key(airport: UnifiedAirport) -> tuple:
    """Busiest first, ICAO ascending among equals."""
    return (-airport.traffic, airport.icao)


def top_airports(airports: Iterable[UnifiedAirport], limit: Optional[int] = None) -> List[UnifiedAirport]:
    """Live airports ranked by traffic."""
    ranked = sorted((a for a in airports if a.live is not None), key=traffic_sort_key)
    return ranked[:limit] if limit is not None else ranked
