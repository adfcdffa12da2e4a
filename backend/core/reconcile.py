"""
Keyed marker reconciliation.

Each update computes the full desired marker set (keyed by flight id or ICAO)
and diffs it against what was rendered last time. Only the differences are
handed to the presentation layer, so rows and markers are never rebuilt
wholesale on a poll tick.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Mapping


@dataclass
class MarkerDiff:
    """Operations needed to turn the rendered set into the desired set."""
    added: Dict[Hashable, Any] = field(default_factory=dict)
    removed: List[Hashable] = field(default_factory=list)
    updated: Dict[Hashable, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.updated)


def reconcile(previous: Mapping[Hashable, Any], desired: Mapping[Hashable, Any]) -> MarkerDiff:
    """
    Diff two keyed marker sets.

    Keys only in `desired` are added, keys only in `previous` are removed and
    keys in both whose payload changed are updated. Removals keep the order of
    `previous`; additions and updates keep the order of `desired`.
    """
    diff = MarkerDiff()
    for key, payload in desired.items():
        if key not in previous:
            diff.added[key] = payload
        elif previous[key] != payload:
            diff.updated[key] = payload
    diff.removed = [key for key in previous if key not in desired]
    return diff


class MarkerLayer:
    """The rendered marker set of one layer (flights, airports, overlay)."""

    def __init__(self, name: str):
        self.name = name
        self._rendered: Dict[Hashable, Any] = {}

    @property
    def markers(self) -> Dict[Hashable, Any]:
        return dict(self._rendered)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._rendered

    def __len__(self) -> int:
        return len(self._rendered)

    def apply(self, desired: Mapping[Hashable, Any]) -> MarkerDiff:
        """Replace the rendered set with `desired` and return what changed."""
        diff = reconcile(self._rendered, desired)
        self._rendered = dict(desired)
        return diff

    def clear(self) -> MarkerDiff:
        return self.apply({})
