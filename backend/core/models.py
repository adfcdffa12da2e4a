"""
Data models for live servers, flights, airports, routes and search results.
Provides structured data classes instead of raw API dictionaries.

All snapshot models are frozen: every poll tick produces fresh instances and
consumers replace whole values instead of editing them in place.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class ServerContext:
    """A live server (session) that can be polled."""
    id: str
    name: str
    type: str
    max_users: int = 0
    user_count: int = 0


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float
    altitude: float = 0.0


@dataclass(frozen=True)
class FlightRecord:
    """One aircraft in a flight snapshot."""
    id: str
    position: Position
    heading: float
    speed: float
    vertical_speed: float
    callsign: str
    username: Optional[str] = None
    connected: bool = True
    user_id: Optional[str] = None
    aircraft_id: Optional[str] = None
    livery_id: Optional[str] = None
    virtual_organization: Optional[str] = None
    last_report: Optional[str] = None


@dataclass(frozen=True)
class AtcFacility:
    """An active ATC frequency at an airport."""
    frequency_id: str
    user_id: str
    username: Optional[str]
    airport_name: str
    type: int
    latitude: Optional[float]
    longitude: Optional[float]
    start_time: Optional[str] = None


@dataclass(frozen=True)
class AirportActivity:
    """Live airport status from the world endpoint."""
    icao: str
    name: str
    inbound_count: int = 0
    inbound_ids: Tuple[str, ...] = ()
    outbound_count: int = 0
    outbound_ids: Tuple[str, ...] = ()
    atc_facilities: Tuple[AtcFacility, ...] = ()

    @property
    def traffic(self) -> int:
        """Inbound plus outbound flights."""
        return self.inbound_count + self.outbound_count


@dataclass(frozen=True)
class AirportRegistryEntry:
    """Static airport from the bundled registry."""
    icao: str
    name: str
    latitude: float
    longitude: float
    iata: Optional[str] = None
    city: str = ""
    country: str = ""


class AirportPriority(str, Enum):
    LIVE = "live"
    STATIC = "static"


@dataclass(frozen=True)
class UnifiedAirport:
    """
    Merged view of one airport.

    A live record takes priority for display and selection; the static record
    is kept alongside it to fill in what live data lacks.
    """
    icao: str
    live: Optional[AirportActivity] = None
    static: Optional[AirportRegistryEntry] = None
    priority: AirportPriority = AirportPriority.STATIC

    @property
    def name(self) -> str:
        if self.live and self.live.name:
            return self.live.name
        if self.static and self.static.name:
            return self.static.name
        return self.icao

    @property
    def iata(self) -> Optional[str]:
        return self.static.iata if self.static else None

    @property
    def traffic(self) -> int:
        return self.live.traffic if self.live else 0


@dataclass(frozen=True)
class TrackPoint:
    """A point on a flown route or a filed flight plan."""
    latitude: float
    longitude: float
    altitude: float = 0.0
    heading: float = 0.0
    speed: float = 0.0
    timestamp: Optional[float] = None
    waypoint_name: Optional[str] = None


@dataclass(frozen=True)
class RouteData:
    flown_route: Tuple[TrackPoint, ...] = ()
    flight_plan: Tuple[TrackPoint, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.flown_route and not self.flight_plan


class SelectionPhase(str, Enum):
    IDLE = "idle"
    SELECTING = "selecting"
    PROTECTED = "protected"


@dataclass(frozen=True)
class Selection:
    """
    The single current selection.

    `flight_id` is set for a flight selection, `airport_icao` for an airport
    selection (which also places a transient overlay marker at
    `airport_position`). `generation` increases on every new selection so late
    route responses can be matched against the selection that requested them.
    `settled` turns true once the settling window after the route fetch has
    elapsed.
    """
    flight_id: Optional[str] = None
    phase: SelectionPhase = SelectionPhase.IDLE
    flown_route: Tuple[TrackPoint, ...] = ()
    flight_plan: Tuple[TrackPoint, ...] = ()
    airport_icao: Optional[str] = None
    airport_position: Optional[Tuple[float, float]] = None
    generation: int = 0
    settled: bool = False

    @property
    def is_active(self) -> bool:
        return self.phase != SelectionPhase.IDLE

    def with_route(self, route: RouteData) -> "Selection":
        return replace(
            self,
            phase=SelectionPhase.PROTECTED,
            flown_route=route.flown_route,
            flight_plan=route.flight_plan,
        )


class SearchCategory(str, Enum):
    AIRCRAFT = "aircraft"
    AIRPORT = "airport"
    USER = "user"


@dataclass(frozen=True)
class SearchIndexEntry:
    """One search result row."""
    type: SearchCategory
    id: str
    title: str
    subtitle: str
    ref: object = field(default=None, compare=False)
    traffic: int = 0


@dataclass(frozen=True)
class Notice:
    """A transient user-visible notification."""
    message: str
    severity: str = "information"
