import pytest
import requests

from backend.data.live_api import (
    ApplicationError,
    DataShapeError,
    LiveApiClient,
    TransportError,
    flatten_flight_plan_items,
)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    """Minimal requests.Session stand-in keyed by URL path."""

    def __init__(self, responses):
        self.headers = {}
        self.responses = responses
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params, timeout))
        path = url.split("/v2", 1)[-1]
        response = self.responses[path]
        if isinstance(response, Exception):
            raise response
        return response


def envelope(result, error_code=0):
    return FakeResponse({"errorCode": error_code, "result": result})


def make_client(responses):
    session = FakeSession(responses)
    client = LiveApiClient(base_url="https://api.example.com/public/v2", api_key="secret", timeout=5, session=session)
    return client, session


def test_servers_are_parsed_and_key_is_sent_both_ways():
    client, session = make_client({
        "/sessions": envelope([
            {"id": "abc", "name": "Casual Server", "worldType": 1, "maxUsers": 500, "userCount": 42},
            {"id": "def", "name": "Expert Server", "worldType": 3},
            {"id": "ghi", "name": "Odd", "worldType": 9},
        ]),
    })
    servers = client.get_servers()

    assert [(s.id, s.name, s.type) for s in servers] == [
        ("abc", "Casual Server", "Casual"),
        ("def", "Expert Server", "Expert"),
        ("ghi", "Odd", "Unknown"),
    ]
    assert servers[0].user_count == 42
    url, params, timeout = session.requests[0]
    assert url == "https://api.example.com/public/v2/sessions"
    assert params == {"apikey": "secret"}
    assert timeout == 5
    assert session.headers["Authorization"] == "Bearer secret"


def test_flights_and_world_are_parsed():
    client, _ = make_client({
        "/sessions/abc/flights": envelope([{
            "flightId": "F1", "latitude": 50.0, "longitude": 8.5, "altitude": 35000,
            "heading": 270, "speed": 450, "verticalSpeed": -500, "callsign": "DLH123",
            "username": "pilot", "isConnected": True,
        }]),
        "/sessions/abc/world": envelope([{
            "airportIcao": "EDDF", "airportName": "Frankfurt",
            "inboundFlightsCount": 2, "inboundFlights": ["F1", "F2"],
            "outboundFlightsCount": 1, "outboundFlights": ["F3"],
            "atcFacilities": [{"frequencyId": "x", "userId": "u", "username": "atc", "type": 1,
                               "latitude": 50.03, "longitude": 8.57}],
        }]),
    })

    flight = client.get_flights("abc")[0]
    assert flight.id == "F1"
    assert flight.position.altitude == 35000.0
    assert flight.vertical_speed == -500.0

    airport = client.get_world("abc")[0]
    assert airport.icao == "EDDF"
    assert airport.traffic == 3
    assert airport.inbound_ids == ("F1", "F2")
    assert airport.atc_facilities[0].latitude == 50.03


def test_non_zero_error_code_is_application_error():
    client, _ = make_client({"/sessions": envelope(None, error_code=5)})
    with pytest.raises(ApplicationError) as excinfo:
        client.get_servers()
    assert excinfo.value.error_code == 5


@pytest.mark.parametrize("response", [
    FakeResponse({"result": []}),
    FakeResponse(invalid_json=True),
    envelope({"not": "a list"}),
])
def test_bad_shapes_are_data_shape_errors(response):
    client, _ = make_client({"/sessions": response})
    with pytest.raises(DataShapeError):
        client.get_servers()


@pytest.mark.parametrize("response", [
    requests.ConnectionError("refused"),
    requests.Timeout("slow"),
    FakeResponse(status_code=503),
])
def test_transport_failures_are_transport_errors(response):
    client, _ = make_client({"/sessions": response})
    with pytest.raises(TransportError):
        client.get_servers()


def test_flight_plan_is_flattened_depth_first_skipping_unplaced_items():
    items = [
        {"identifier": "EDDF", "location": {"latitude": 50.03, "longitude": 8.57}},
        {"identifier": "SID", "location": {"latitude": 0, "longitude": 0}, "children": [
            {"identifier": "TOBAK", "location": {"latitude": 49.9, "longitude": 8.9}},
            {"identifier": "NOLOC"},
        ]},
        {"identifier": "EGLL", "location": {"latitude": 51.47, "longitude": -0.46}},
    ]
    points = flatten_flight_plan_items(items)
    assert [p.waypoint_name for p in points] == ["EDDF", "TOBAK", "EGLL"]


def test_flight_route_tolerates_one_failed_part():
    client, _ = make_client({
        "/sessions/abc/flights/F1/route": envelope([
            {"latitude": 50.0, "longitude": 8.5, "altitude": 1000, "track": 90, "groundSpeed": 150,
             "date": "2024-01-01T12:00:00Z"},
        ]),
        "/sessions/abc/flights/F1/flightplan": requests.ConnectionError("reset"),
    })
    route = client.get_flight_route("abc", "F1")
    assert len(route.flown_route) == 1
    assert route.flown_route[0].heading == 90.0
    assert route.flown_route[0].timestamp is not None
    assert route.flight_plan == ()


def test_flight_route_raises_when_both_parts_fail():
    client, _ = make_client({
        "/sessions/abc/flights/F1/route": requests.ConnectionError("reset"),
        "/sessions/abc/flights/F1/flightplan": envelope(None, error_code=6),
    })
    with pytest.raises(ApplicationError):
        client.get_flight_route("abc", "F1")


def test_missing_flight_plan_is_empty():
    client, _ = make_client({"/sessions/abc/flights/F1/flightplan": envelope(None)})
    assert client.get_flight_plan("abc", "F1") == []
