"""
UI Module for the Live Flight Map
Provides Textual-based user interface components
"""

from .app import LiveMapApp
from .modals import SearchScreen, ServerSelectScreen, FlightInfoScreen, AirportInfoScreen, OnboardingScreen
from .tables import KeyedTableManager, flight_row, airport_row
from .config import (
    ColumnConfig,
    TableConfig,
    create_flights_table_config,
    create_airports_table_config,
)

__all__ = [
    # Main app
    'LiveMapApp',

    # Modal screens
    'SearchScreen',
    'ServerSelectScreen',
    'FlightInfoScreen',
    'AirportInfoScreen',
    'OnboardingScreen',

    # Table management
    'KeyedTableManager',
    'flight_row',
    'airport_row',

    # Configuration
    'ColumnConfig',
    'TableConfig',
    'create_flights_table_config',
    'create_airports_table_config',
]

__version__ = '1.0.0'
