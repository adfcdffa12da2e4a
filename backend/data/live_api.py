"""
Live API client for fetching servers, flights, airport activity and routes.

Every endpoint answers with the envelope ``{"errorCode": int, "result": T}``.
A non-zero error code is an application-level failure, distinct from an HTTP
or network failure. Both are raised as subclasses of LiveApiError so callers
can keep their last good snapshot and carry on.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from backend.config.constants import (
    LIVE_API_BASE_URL,
    LIVE_API_KEY,
    LIVE_API_TIMEOUT,
    SERVER_TYPES,
)
from backend.core.models import (
    AirportActivity,
    AtcFacility,
    FlightRecord,
    Position,
    RouteData,
    ServerContext,
    TrackPoint,
)
from common import logger as debug_logger


class LiveApiError(Exception):
    """Base class for all recoverable live API failures."""


class TransportError(LiveApiError):
    """Network, timeout or HTTP status failure."""


class ApplicationError(LiveApiError):
    """The API answered but reported a non-zero error code."""

    def __init__(self, error_code: int, path: str):
        super().__init__(f"API error code {error_code} for {path}")
        self.error_code = error_code
        self.path = path


class DataShapeError(LiveApiError):
    """The response did not have the expected structure."""


def get_server_type(world_type: Any) -> str:
    """Map a session worldType to its display type."""
    return SERVER_TYPES.get(world_type, "Unknown")


def _parse_timestamp(value: Optional[str]) -> Optional[float]:
    """Parse an ISO 8601 date into epoch seconds, or None."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()
    except (TypeError, ValueError):
        return None


def parse_server(raw: Dict[str, Any]) -> ServerContext:
    return ServerContext(
        id=str(raw["id"]),
        name=raw["name"],
        type=get_server_type(raw.get("worldType")),
        max_users=raw.get("maxUsers") or 0,
        user_count=raw.get("userCount") or 0,
    )


def parse_flight(raw: Dict[str, Any]) -> FlightRecord:
    return FlightRecord(
        id=str(raw["flightId"]),
        position=Position(
            latitude=float(raw["latitude"]),
            longitude=float(raw["longitude"]),
            altitude=float(raw.get("altitude") or 0.0),
        ),
        heading=float(raw.get("heading") or 0.0),
        speed=float(raw.get("speed") or 0.0),
        vertical_speed=float(raw.get("verticalSpeed") or 0.0),
        callsign=raw.get("callsign") or "",
        username=raw.get("username") or None,
        connected=bool(raw.get("isConnected", True)),
        user_id=raw.get("userId"),
        aircraft_id=raw.get("aircraftId"),
        livery_id=raw.get("liveryId"),
        virtual_organization=raw.get("virtualOrganization"),
        last_report=raw.get("lastReport"),
    )


def parse_atc_facility(raw: Dict[str, Any]) -> AtcFacility:
    return AtcFacility(
        frequency_id=str(raw.get("frequencyId", "")),
        user_id=str(raw.get("userId", "")),
        username=raw.get("username") or None,
        airport_name=raw.get("airportName") or "",
        type=int(raw.get("type") or 0),
        latitude=raw.get("latitude"),
        longitude=raw.get("longitude"),
        start_time=raw.get("startTime"),
    )


def parse_airport_status(raw: Dict[str, Any]) -> AirportActivity:
    inbound = tuple(str(fid) for fid in raw.get("inboundFlights") or [])
    outbound = tuple(str(fid) for fid in raw.get("outboundFlights") or [])
    return AirportActivity(
        icao=raw["airportIcao"],
        name=raw.get("airportName") or "",
        inbound_count=int(raw.get("inboundFlightsCount", len(inbound))),
        inbound_ids=inbound,
        outbound_count=int(raw.get("outboundFlightsCount", len(outbound))),
        outbound_ids=outbound,
        atc_facilities=tuple(parse_atc_facility(f) for f in raw.get("atcFacilities") or []),
    )


def parse_position_report(raw: Dict[str, Any]) -> TrackPoint:
    return TrackPoint(
        latitude=float(raw["latitude"]),
        longitude=float(raw["longitude"]),
        altitude=float(raw.get("altitude") or 0.0),
        heading=float(raw.get("track") or 0.0),
        speed=float(raw.get("groundSpeed") or 0.0),
        timestamp=_parse_timestamp(raw.get("date")),
    )


def flatten_flight_plan_items(items: Optional[List[Dict[str, Any]]]) -> List[TrackPoint]:
    """
    Flatten a nested flight plan item tree into track points, depth first.

    Procedures (SIDs, STARs, approaches) arrive as items with children; only
    items carrying a usable location become points.
    """
    points: List[TrackPoint] = []
    for item in items or []:
        location = item.get("location") or {}
        lat = location.get("latitude")
        lon = location.get("longitude")
        if lat is not None and lon is not None and not (lat == 0 and lon == 0):
            points.append(TrackPoint(
                latitude=float(lat),
                longitude=float(lon),
                altitude=float(item.get("altitude") or location.get("altitude") or 0.0),
                waypoint_name=item.get("identifier") or item.get("name") or None,
            ))
        points.extend(flatten_flight_plan_items(item.get("children")))
    return points


class LiveApiClient:
    """
    Blocking client for the live session API.

    Handles:
    - API key authentication (query string and bearer header)
    - Envelope unwrapping and error code checks
    - Translation of requests/JSON failures into LiveApiError subclasses
    """

    def __init__(
        self,
        base_url: str = LIVE_API_BASE_URL,
        api_key: str = LIVE_API_KEY,
        timeout: float = LIVE_API_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})
        else:
            debug_logger.warning("Live API client running without an API key")

    def _get(self, path: str) -> Any:
        """GET an endpoint and return the unwrapped envelope result."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params={"apikey": self.api_key}, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            debug_logger.warning(f"Live API timeout for {path}")
            raise TransportError(f"Timeout fetching {path}") from e
        except requests.RequestException as e:
            debug_logger.warning(f"Live API error for {path}: {e}")
            raise TransportError(str(e)) from e

        try:
            data = response.json()
        except ValueError as e:
            debug_logger.warning(f"Live API JSON decode error for {path}: {e}")
            raise DataShapeError(f"Invalid JSON from {path}") from e

        if not isinstance(data, dict) or "errorCode" not in data:
            raise DataShapeError(f"Missing response envelope from {path}")

        error_code = data.get("errorCode")
        if error_code != 0:
            debug_logger.warning(f"Live API returned error code {error_code} for {path}")
            raise ApplicationError(error_code, path)

        return data.get("result")

    def _get_list(self, path: str) -> List[Dict[str, Any]]:
        result = self._get(path)
        if not isinstance(result, list):
            raise DataShapeError(f"Expected a list from {path}, got {type(result).__name__}")
        return result

    def get_servers(self) -> List[ServerContext]:
        """Fetch all available servers."""
        raw_servers = self._get_list("/sessions")
        try:
            servers = [parse_server(raw) for raw in raw_servers]
        except (KeyError, TypeError, ValueError) as e:
            raise DataShapeError(f"Malformed session entry: {e}") from e
        debug_logger.info(f"Retrieved {len(servers)} servers")
        return servers

    def get_flights(self, server_id: str) -> List[FlightRecord]:
        """Fetch the flight snapshot for a server."""
        raw_flights = self._get_list(f"/sessions/{server_id}/flights")
        try:
            flights = [parse_flight(raw) for raw in raw_flights]
        except (KeyError, TypeError, ValueError) as e:
            raise DataShapeError(f"Malformed flight entry: {e}") from e
        debug_logger.debug(f"Retrieved {len(flights)} flights for server {server_id}")
        return flights

    def get_world(self, server_id: str) -> List[AirportActivity]:
        """Fetch the airport activity (world status) snapshot for a server."""
        raw_airports = self._get_list(f"/sessions/{server_id}/world")
        try:
            airports = [parse_airport_status(raw) for raw in raw_airports]
        except (KeyError, TypeError, ValueError) as e:
            raise DataShapeError(f"Malformed airport status entry: {e}") from e
        debug_logger.debug(f"Retrieved {len(airports)} active airports for server {server_id}")
        return airports

    def get_flown_route(self, server_id: str, flight_id: str) -> List[TrackPoint]:
        """Fetch the route a flight has flown so far."""
        reports = self._get_list(f"/sessions/{server_id}/flights/{flight_id}/route")
        try:
            return [parse_position_report(raw) for raw in reports]
        except (KeyError, TypeError, ValueError) as e:
            raise DataShapeError(f"Malformed position report: {e}") from e

    def get_flight_plan(self, server_id: str, flight_id: str) -> List[TrackPoint]:
        """Fetch the filed flight plan of a flight as track points."""
        result = self._get(f"/sessions/{server_id}/flights/{flight_id}/flightplan")
        if result is None:
            return []
        if not isinstance(result, dict):
            raise DataShapeError("Expected a flight plan object")
        try:
            return flatten_flight_plan_items(result.get("flightPlanItems"))
        except (AttributeError, TypeError, ValueError) as e:
            raise DataShapeError(f"Malformed flight plan: {e}") from e

    def get_flight_route(self, server_id: str, flight_id: str) -> RouteData:
        """
        Fetch both the flown route and the flight plan.

        The two parts are fetched independently: a failed part is logged and
        left empty. Only when both parts fail is the last error raised.
        """
        flown: List[TrackPoint] = []
        plan: List[TrackPoint] = []
        last_error: Optional[LiveApiError] = None

        try:
            flown = self.get_flown_route(server_id, flight_id)
        except LiveApiError as e:
            last_error = e
            debug_logger.warning(f"Flown route unavailable for flight {flight_id}: {e}")

        try:
            plan = self.get_flight_plan(server_id, flight_id)
        except LiveApiError as e:
            if last_error is not None:
                raise
            debug_logger.warning(f"Flight plan unavailable for flight {flight_id}: {e}")

        debug_logger.info(
            f"Route for flight {flight_id}: {len(flown)} flown points, {len(plan)} flight plan points"
        )
        return RouteData(flown_route=tuple(flown), flight_plan=tuple(plan))
