"""
Caching utilities for backend data.

This module provides a thread-safe, short-lived cache for the server list so
that name <-> id lookups and repeated startups don't hit the sessions endpoint
every time. Server lists are fetched from executor threads, hence the lock.
"""

import threading
from typing import Callable, List, Optional

from cachetools import TTLCache

from backend.config.constants import SERVER_CACHE_DURATION
from backend.core.models import ServerContext
from common import logger as debug_logger

_SERVER_CACHE_KEY = "servers"

_SERVER_CACHE_LOCK = threading.Lock()

# {'servers': [ServerContext, ...]}
_SERVER_CACHE: TTLCache = TTLCache(maxsize=1, ttl=SERVER_CACHE_DURATION)


def get_cached_servers() -> Optional[List[ServerContext]]:
    """Get the cached server list, or None if absent or expired."""
    with _SERVER_CACHE_LOCK:
        return _SERVER_CACHE.get(_SERVER_CACHE_KEY)


def set_cached_servers(servers: List[ServerContext]) -> None:
    """Replace the cached server list."""
    with _SERVER_CACHE_LOCK:
        _SERVER_CACHE[_SERVER_CACHE_KEY] = list(servers)


def clear_server_cache() -> None:
    with _SERVER_CACHE_LOCK:
        _SERVER_CACHE.clear()


def load_servers_cached(fetch: Callable[[], List[ServerContext]]) -> List[ServerContext]:
    """
    Return the cached server list, fetching it on a miss.

    Empty results are not cached so an outage isn't remembered past its end.
    """
    servers = get_cached_servers()
    if servers is not None:
        debug_logger.debug(f"Using cached server list ({len(servers)} servers)")
        return servers

    servers = fetch()
    if servers:
        set_cached_servers(servers)
    return servers


def find_server(servers: List[ServerContext], key: str) -> Optional[ServerContext]:
    """Look up a server by id, or by name case-insensitively."""
    for server in servers:
        if server.id == key:
            return server
    lowered = key.lower()
    for server in servers:
        if server.name.lower() == lowered:
            return server
    return None
