"""
Search over live flights, users and airports.

`search()` is a pure generator that works through one category at a time.
`SearchIndex` wraps it with the interactive behaviour: the query is
debounced, each recomputation yields to the event loop between chunks, and a
newer keystroke abandons any recomputation still running so only the latest
query's results are published.

Query prefixes narrow the categories:
    @ airports only
    # aircraft only
    ~ users only
"""

import asyncio
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from backend.config.constants import MIN_QUERY_LENGTH, SEARCH_DEBOUNCE, SEARCH_RESULT_LIMIT
from backend.core.models import FlightRecord, SearchCategory, SearchIndexEntry, UnifiedAirport
from backend.core.unifier import top_airports
from common import logger as debug_logger

ALL_CATEGORIES: Tuple[SearchCategory, ...] = (
    SearchCategory.AIRCRAFT,
    SearchCategory.AIRPORT,
    SearchCategory.USER,
)

CATEGORY_ORDER = {category: index for index, category in enumerate(ALL_CATEGORIES)}

QUERY_PREFIXES = {
    '@': SearchCategory.AIRPORT,
    '#': SearchCategory.AIRCRAFT,
    '~': SearchCategory.USER,
}


def parse_query(text: str) -> Tuple[str, Tuple[SearchCategory, ...]]:
    """Split a raw query into search text and the categories it targets."""
    text = (text or '').strip()
    if text and text[0] in QUERY_PREFIXES:
        return text[1:].strip(), (QUERY_PREFIXES[text[0]],)
    return text, ALL_CATEGORIES


def _airport_entry(airport: UnifiedAirport) -> SearchIndexEntry:
    subtitle = airport.name
    if airport.iata:
        subtitle = f"{subtitle} ({airport.iata})"
    if airport.live is not None:
        subtitle = f"{subtitle} - {airport.live.inbound_count} in / {airport.live.outbound_count} out"
    return SearchIndexEntry(
        type=SearchCategory.AIRPORT,
        id=airport.icao,
        title=airport.icao,
        subtitle=subtitle,
        ref=airport,
        traffic=airport.traffic,
    )


def _airport_matches(airport: UnifiedAirport, needle: str) -> bool:
    if needle in airport.icao.lower() or needle in airport.name.lower():
        return True
    return bool(airport.iata and needle in airport.iata.lower())


def _aircraft_entry(flight: FlightRecord) -> SearchIndexEntry:
    return SearchIndexEntry(
        type=SearchCategory.AIRCRAFT,
        id=flight.id,
        title=flight.callsign,
        subtitle=flight.username or "Anonymous",
        ref=flight,
    )


def _user_entry(flight: FlightRecord) -> SearchIndexEntry:
    return SearchIndexEntry(
        type=SearchCategory.USER,
        id=flight.id,
        title=flight.username or "",
        subtitle=f"Flying {flight.callsign}",
        ref=flight,
    )


def rank_key(entry: SearchIndexEntry) -> tuple:
    """Category, then traffic descending, then identifier, then id."""
    return (CATEGORY_ORDER[entry.type], -entry.traffic, entry.title, entry.id)


def search(
    query: str,
    categories: Iterable[SearchCategory],
    flights: Sequence[FlightRecord],
    airports: Sequence[UnifiedAirport],
) -> Iterator[SearchIndexEntry]:
    """
    Yield ranked matches for `query`, one category at a time.

    Matching is a case-insensitive substring test on callsign (aircraft),
    username (users) and ICAO/IATA/name (airports). Queries shorter than
    the minimum length match nothing, except that the airport category then
    lists live airports by traffic.

    Each category is matched and sorted only once the previous one has been
    consumed, so a caller that stops early skips the remaining categories.
    """
    categories = set(categories)
    needle = (query or '').strip().lower()

    if len(needle) < MIN_QUERY_LENGTH:
        if SearchCategory.AIRPORT in categories:
            yield from sorted((_airport_entry(a) for a in top_airports(airports)), key=rank_key)
        return

    for category in ALL_CATEGORIES:
        if category not in categories:
            continue
        if category == SearchCategory.AIRCRAFT:
            matches = (_aircraft_entry(f) for f in flights if needle in f.callsign.lower())
        elif category == SearchCategory.AIRPORT:
            matches = (_airport_entry(a) for a in airports if _airport_matches(a, needle))
        else:
            matches = (
                _user_entry(f) for f in flights
                if f.username and needle in f.username.lower()
            )
        yield from sorted(matches, key=rank_key)


class SearchIndex:
    """Debounced, cancellable search over the current live snapshots."""

    def __init__(
        self,
        debounce: float = SEARCH_DEBOUNCE,
        on_results: Optional[Callable[[List[SearchIndexEntry]], None]] = None,
        limit: Optional[int] = SEARCH_RESULT_LIMIT,
        chunk_size: int = 200,
    ):
        self.debounce = debounce
        self.limit = limit
        self.chunk_size = chunk_size
        self._on_results = on_results
        self._query = ""
        self._debounced_query: Optional[str] = None
        self._flights: Sequence[FlightRecord] = ()
        self._airports: Sequence[UnifiedAirport] = ()
        self._results: List[SearchIndexEntry] = []
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self.recompute_count = 0

    @property
    def query(self) -> str:
        return self._query

    @property
    def debounced_query(self) -> Optional[str]:
        """The query the current results were (or are being) computed for."""
        return self._debounced_query

    @property
    def results(self) -> List[SearchIndexEntry]:
        return list(self._results)

    @property
    def is_searching(self) -> bool:
        return self._timer is not None or (self._task is not None and not self._task.done())

    def set_query(self, text: str) -> None:
        """Record a keystroke; the recomputation runs once the query is stable."""
        self._query = text
        self._abandon_recompute()
        if self._timer is not None:
            self._timer.cancel()
        self._timer = asyncio.get_event_loop().call_later(self.debounce, self._on_debounce_elapsed)

    def update_sources(self, flights: Sequence[FlightRecord], airports: Sequence[UnifiedAirport]) -> None:
        """Swap in new snapshots and refresh the results of the settled query."""
        self._flights = flights
        self._airports = airports
        if self._debounced_query is not None and self._timer is None:
            self._start_recompute()

    def clear(self) -> None:
        """Drop the query, pending work and results."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._abandon_recompute()
        self._query = ""
        self._debounced_query = None
        self._results = []

    def _abandon_recompute(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _on_debounce_elapsed(self) -> None:
        self._timer = None
        self._debounced_query = self._query
        self._start_recompute()

    def _start_recompute(self) -> None:
        self._generation += 1
        self.recompute_count += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.get_event_loop().create_task(
            self._recompute(self._generation, self._debounced_query or "")
        )

    async def _recompute(self, generation: int, text: str) -> None:
        query, categories = parse_query(text)
        results: List[SearchIndexEntry] = []
        for entry in search(query, categories, self._flights, self._airports):
            if self.limit is not None and len(results) >= self.limit:
                break
            results.append(entry)
            if len(results) % self.chunk_size == 0:
                await asyncio.sleep(0)
                if generation != self._generation:
                    return

        if generation != self._generation:
            return

        debug_logger.debug(f"Search '{text}': {len(results)} results")
        self._results = results
        if self._on_results is not None:
            self._on_results(list(results))
