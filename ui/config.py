"""
UI Configuration and Constants
Contains table column definitions and display limits
"""

from dataclasses import dataclass
from typing import Literal, Optional

# Rows shown in the airports table (traffic-ranked)
TOP_AIRPORTS_LIMIT = 50

# Airports listed in the header's "top active airports" line
HEADER_TOP_AIRPORTS = 3


@dataclass
class ColumnConfig:
    """Configuration for a single table column"""
    name: str
    key: str
    content_align: Literal["left", "center", "right"] = "left"
    width: Optional[int] = None


@dataclass
class TableConfig:
    """Configuration for a complete table"""
    columns: list[ColumnConfig]


def create_flights_table_config() -> TableConfig:
    """Create the live flights table configuration"""
    return TableConfig(columns=[
        ColumnConfig("CALLSIGN", "callsign", width=14),
        ColumnConfig("PILOT", "username", width=20),
        ColumnConfig("ALT (ft)", "altitude", content_align="right"),
        ColumnConfig("GS (kt)", "speed", content_align="right"),
        ColumnConfig("HDG", "heading", content_align="right"),
        ColumnConfig("V/S (fpm)", "vertical_speed", content_align="right"),
    ])


def create_airports_table_config() -> TableConfig:
    """Create the traffic-ranked airports table configuration"""
    return TableConfig(columns=[
        ColumnConfig("ICAO", "icao", width=6),
        ColumnConfig("NAME", "name"),
        ColumnConfig("TRAFFIC", "traffic", content_align="right"),
        ColumnConfig("IN", "inbound", content_align="right"),
        ColumnConfig("OUT", "outbound", content_align="right"),
        ColumnConfig("ATC", "atc"),
    ])
