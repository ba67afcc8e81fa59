"""
Network alias table.

Historical data spells the same network several ways ("CBC Gem", "CBC Web",
"web", "Radio-Canada"...). The canonical labels and their matching substrings
live in one table, resolved once against the networks registry into stable
ids; nothing re-matches names per request.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

NETWORK_ALIASES: dict[str, tuple[str, ...]] = {
    "CBC TV": ("cbc tv",),
    "CBC Gem": ("cbc gem", "gem", "cbc web"),
    "R-C TV/WEB": ("r-c", "rc tv", "radio-canada"),
}

# Exact names that only count as a match on their own
_EXACT_ALIASES: dict[str, tuple[str, ...]] = {
    "CBC Gem": ("web",),
}


def canonical_network(name: str | None, aliases: Mapping[str, Iterable[str]] = NETWORK_ALIASES) -> str | None:
    """Canonical label for a network name, or None when no alias matches."""
    if not name:
        return None
    lowered = name.strip().lower()
    for label, needles in aliases.items():
        if lowered == label.lower() or any(needle in lowered for needle in needles):
            return label
        if lowered in _EXACT_ALIASES.get(label, ()):
            return label
    return None


@dataclass(frozen=True)
class NetworkDirectory:
    """Canonical label -> network id, built once from the registry rows."""

    ids: Mapping[str, str]

    @classmethod
    def resolve(cls, networks: Iterable[Mapping[str, Any]]) -> "NetworkDirectory":
        ids: dict[str, str] = {}
        for network in networks:
            label = canonical_network(network.get("name"))
            if label is not None and label not in ids:
                ids[label] = str(network["id"])
        return cls(ids=ids)

    def id_for(self, name: str | None) -> str | None:
        label = canonical_network(name)
        return self.ids.get(label) if label else None
