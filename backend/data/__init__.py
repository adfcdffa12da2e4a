"""
Data access layer for the live API, the static airport registry and preferences.
"""

from .live_api import (
    LiveApiClient,
    LiveApiError,
    TransportError,
    ApplicationError,
    DataShapeError,
)
from .loaders import load_static_airports

__all__ = [
    'LiveApiClient',
    'LiveApiError',
    'TransportError',
    'ApplicationError',
    'DataShapeError',
    'load_static_airports',
]
