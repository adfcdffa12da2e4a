"""
Static airport registry loader.

Reads the bundled airports.json, keyed by airport code:
{
    'EDDF': {
        'icao': 'EDDF',
        'iata': 'FRA',
        'name': 'Frankfurt am Main Airport',
        'city': 'Frankfurt am Main',
        'country': 'DE',
        'lat': 50.0333,
        'lon': 8.5706
    }
}

The registry is immutable once loaded; entries without usable coordinates
are skipped.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from backend.core.models import AirportRegistryEntry
from common import logger as debug_logger


def _safe_strip(value: Any, default: str = '') -> str:
    return value.strip() if isinstance(value, str) else default


def parse_registry_entry(code: str, details: Dict[str, Any]) -> AirportRegistryEntry:
    """Build a registry entry from one airports.json record."""
    icao = _safe_strip(details.get('icao')) or code.strip()
    return AirportRegistryEntry(
        icao=icao,
        name=_safe_strip(details.get('name')) or icao,
        latitude=float(details['lat']),
        longitude=float(details['lon']),
        iata=_safe_strip(details.get('iata')) or None,
        city=_safe_strip(details.get('city')),
        country=_safe_strip(details.get('country')),
    )


def load_static_airports(airports_json_path: Union[str, Path]) -> List[AirportRegistryEntry]:
    """
    Load the static airport registry.

    A missing or unreadable file yields an empty registry: the map still works
    with live airports only.
    """
    try:
        with open(airports_json_path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except FileNotFoundError:
        debug_logger.warning(f"Static airport registry not found: {airports_json_path}")
        return []
    except (OSError, json.JSONDecodeError) as e:
        debug_logger.error(f"Error loading static airport registry: {e}")
        return []

    airports: List[AirportRegistryEntry] = []
    skipped = 0
    for code, details in raw.items():
        if not isinstance(details, dict):
            skipped += 1
            continue
        try:
            airports.append(parse_registry_entry(code, details))
        except (KeyError, TypeError, ValueError):
            skipped += 1

    debug_logger.info(f"Loaded {len(airports)} static airports ({skipped} skipped)")
    return airports
