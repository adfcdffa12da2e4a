"""
Configuration constants and settings for Live Flight Map.
"""

import os

# Live API endpoint and key (overridable from the environment)
LIVE_API_BASE_URL = os.environ.get("LIVE_API_BASE_URL", "https://api.infiniteflight.com/public/v2")
LIVE_API_KEY = os.environ.get("LIVE_API_KEY", "")
LIVE_API_TIMEOUT = 10  # seconds per request

# Poll kinds
POLL_SERVERS = "servers"
POLL_FLIGHTS = "flights"
POLL_WORLD = "world"

# Polling intervals (in seconds). Airport activity changes more slowly than
# aircraft positions, so the two kinds run on independent cadences.
FLIGHT_POLL_INTERVAL = 15
WORLD_POLL_INTERVAL = 30
SERVER_RETRY_INTERVAL = 30

# Server list cache duration (in seconds)
SERVER_CACHE_DURATION = 60

# Selection settling window after a route fetch resolves (in seconds)
ROUTE_SETTLE_WINDOW = 2.0

# Search settings
SEARCH_DEBOUNCE = 0.25  # seconds
MIN_QUERY_LENGTH = 2
SEARCH_RESULT_LIMIT = 100

# Server picked on startup when its name contains this text
DEFAULT_SERVER_HINT = "casual"

# Session worldType -> server type
SERVER_TYPES = {
    1: "Casual",
    2: "Training",
    3: "Expert",
}

# ATC frequency type -> display name
ATC_FACILITY_TYPES = {
    0: "Ground",
    1: "Tower",
    2: "Unicom",
    3: "Clearance",
    4: "Approach",
    5: "Departure",
    6: "Center",
    7: "ATIS",
}
