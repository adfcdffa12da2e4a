#!/usr/bin/env python3
"""
Live Flight Map - Main Entry Point
Tracks live flights and airport activity on the Infinite Flight Live API
"""

import argparse
import sys

from backend.config import constants as backend_constants
from backend.core.live_state import LiveStateSettings
from backend.data.live_api import LiveApiClient
from backend.data.loaders import load_static_airports
from common import logger as debug_logger
from common.paths import ensure_user_directories, get_static_airports_file
from ui import LiveMapApp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Live flight map for the Infinite Flight Live API")
    parser.add_argument("--flight-interval", type=float, default=backend_constants.FLIGHT_POLL_INTERVAL,
                        help=f"Flight poll interval in seconds (default: {backend_constants.FLIGHT_POLL_INTERVAL})")
    parser.add_argument("--world-interval", type=float, default=backend_constants.WORLD_POLL_INTERVAL,
                        help=f"Airport activity poll interval in seconds (default: {backend_constants.WORLD_POLL_INTERVAL})")
    parser.add_argument("--settle-window", type=float, default=backend_constants.ROUTE_SETTLE_WINDOW,
                        help=f"Seconds a new selection stays settling after its route loads (default: {backend_constants.ROUTE_SETTLE_WINDOW})")
    parser.add_argument("--search-debounce", type=float, default=backend_constants.SEARCH_DEBOUNCE,
                        help=f"Search debounce delay in seconds (default: {backend_constants.SEARCH_DEBOUNCE})")
    parser.add_argument("--server",
                        help="Server id or name to open on startup (default: the Casual server)")
    parser.add_argument("--api-key", default=backend_constants.LIVE_API_KEY,
                        help="Live API key (default: $LIVE_API_KEY)")
    parser.add_argument("--api-url", default=backend_constants.LIVE_API_BASE_URL,
                        help="Live API base URL (default: $LIVE_API_BASE_URL or the public v2 endpoint)")
    return parser


def settings_from_args(args: argparse.Namespace) -> LiveStateSettings:
    """Collect the runtime knobs from parsed arguments"""
    return LiveStateSettings(
        flight_interval=args.flight_interval,
        world_interval=args.world_interval,
        settle_window=args.settle_window,
        search_debounce=args.search_debounce,
        preferred_server=args.server,
    )


MISSING_API_KEY_WARNING = "No API key set (use --api-key or LIVE_API_KEY); requests will likely be rejected"


def warn_if_missing_api_key(api_key) -> bool:
    """Log and print a warning when no API key is configured. Returns True if one was issued."""
    if api_key:
        return False
    debug_logger.warning(MISSING_API_KEY_WARNING)
    print(f"Warning: {MISSING_API_KEY_WARNING}", file=sys.stderr)
    return True


def main(argv=None):
    args = build_parser().parse_args(argv)

    ensure_user_directories()
    debug_logger.info("Application starting")

    warn_if_missing_api_key(args.api_key)

    static_airports = load_static_airports(get_static_airports_file())
    client = LiveApiClient(base_url=args.api_url, api_key=args.api_key)

    # Try to set terminal title before Textual takes over
    try:
        sys.stderr.write("\033]0;Live Flight Map\007")
        sys.stderr.flush()
    except (OSError, IOError, AttributeError):
        pass  # Terminal may not support escape sequences

    app = LiveMapApp(client, static_airports, settings_from_args(args))
    app.run()


if __name__ == "__main__":
    main()
