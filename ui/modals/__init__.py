"""
Modal Screens Package
Contains all modal dialog screens (Search, Server Select, Flight Info, Airport Info, Onboarding)
"""

from .search_modal import SearchScreen
from .server_select import ServerSelectScreen
from .flight_info import FlightInfoScreen
from .airport_info import AirportInfoScreen
from .onboarding import OnboardingScreen

__all__ = [
    'SearchScreen',
    'ServerSelectScreen',
    'FlightInfoScreen',
    'AirportInfoScreen',
    'OnboardingScreen',
]
