"""
Live Flight Map Backend
Live-state engine: polling, airport unification, selection and search over the
live session API.
"""

# Import the live state context and its settings
from backend.core.live_state import LiveState, LiveStateSettings

# Import engine components
from backend.core.poller import Poller
from backend.core.selection import SelectionStateMachine
from backend.core.search import SearchIndex, search, parse_query
from backend.core.unifier import unify, resolve_coordinates, top_airports
from backend.core.reconcile import MarkerDiff, MarkerLayer, reconcile

# Import data access
from backend.data.live_api import LiveApiClient
from backend.data.loaders import load_static_airports

__version__ = "1.0.0"

# Export public API
__all__ = [
    'LiveState',
    'LiveStateSettings',
    'Poller',
    'SelectionStateMachine',
    'SearchIndex',
    'search',
    'parse_query',
    'unify',
    'resolve_coordinates',
    'top_airports',
    'MarkerDiff',
    'MarkerLayer',
    'reconcile',
    'LiveApiClient',
    'load_static_airports',
]
