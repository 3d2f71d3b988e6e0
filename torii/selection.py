"""Endpoint selection: filter, health-gate, then draw at random.

Draws are made with replacement. The picker stays stateless across calls
and O(1) per draw; when ``max_results`` exceeds the number of healthy
endpoints the same endpoint can appear more than once in a selection.
"""

import logging
import random
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple

from torii.health import EndpointFilter, HealthRegistry, accept_all
from torii.vpn.model import Endpoint
from torii.vpn.provider import Provider

LOGGER = logging.getLogger(__name__)

REASON_NO_ENDPOINTS = "no-endpoints"
REASON_FILTERED_OUT = "filtered-out"
REASON_UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class Selection:
    """Endpoints drawn for one request.

    ``reason`` is set only when the selection is empty and says why: the
    provider had no endpoints, the filter rejected all of them, or the
    health gate rejected every endpoint the filter kept.
    """

    endpoints: Tuple[Endpoint, ...] = field(default_factory=tuple)
    reason: Optional[str] = None

    def __len__(self) -> int:
        return len(self.endpoints)

    def __iter__(self) -> Iterator[Endpoint]:
        return iter(self.endpoints)

    def __bool__(self) -> bool:
        return bool(self.endpoints)


Selector = Callable[[Provider], Selection]


def by_country(cc: str) -> EndpointFilter:
    """Filter keeping endpoints whose stored country code is exactly ``cc``."""

    def matches(endpoint: Endpoint) -> bool:
        return endpoint.country_code == cc

    return matches


class SelectionEngine:
    """Randomized, health-aware endpoint picker.

    Args:
        health: Oracle registry consulted for every provider.
        rng: Random source; pass a seeded ``random.Random`` for reproducible
            draws. Access is serialized, so one engine can serve concurrent
            requests.
    """

    def __init__(self, health: Optional[HealthRegistry] = None, rng: Optional[random.Random] = None) -> None:
        self._health = health or HealthRegistry()
        self._rng = rng or random.Random()
        self._rng_lock = threading.Lock()

    @property
    def health(self) -> HealthRegistry:
        return self._health

    def _draw(self, pool: List[Endpoint], count: int) -> List[Endpoint]:
        picks: List[Endpoint] = []
        with self._rng_lock:
            for _ in range(count):
                index = self._rng.randrange(len(pool))
                LOGGER.debug("Picked endpoint %d/%d", index + 1, len(pool))
                picks.append(pool[index])
        return picks

    def filter_and_randomize(
        self,
        provider: Provider,
        endpoint_filter: EndpointFilter,
        max_results: int,
    ) -> Selection:
        """Draw ``max_results`` endpoints from those passing filter and gate."""
        candidates = provider.endpoints()
        if not candidates:
            return Selection(reason=REASON_NO_ENDPOINTS)

        healthy = self._health.gate(provider.name)
        matching = [endpoint for endpoint in candidates if endpoint_filter(endpoint)]
        retained = [endpoint for endpoint in matching if healthy(endpoint)]
        if not retained:
            reason = REASON_UNHEALTHY if matching else REASON_FILTERED_OUT
            LOGGER.info(
                "No endpoints retained for %s (%s): %d candidates, %d matched filter",
                provider.name,
                reason,
                len(candidates),
                len(matching),
            )
            return Selection(reason=reason)

        return Selection(endpoints=tuple(self._draw(retained, max(0, max_results))))


def random_endpoint_picker(engine: SelectionEngine) -> Selector:
    """Selector picking one random endpoint from any country."""

    def select(provider: Provider) -> Selection:
        return engine.filter_and_randomize(provider, accept_all, 1)

    return select


def by_country_endpoint_picker(engine: SelectionEngine, cc: str, max_results: int) -> Selector:
    """Selector picking ``max_results`` endpoints located in ``cc``.

    The match is case-sensitive against the lower-case codes providers
    store; callers normalize user input.
    """
    country_filter = by_country(cc)

    def select(provider: Provider) -> Selection:
        return engine.filter_and_randomize(provider, country_filter, max_results)

    return select


__all__ = [
    "REASON_FILTERED_OUT",
    "REASON_NO_ENDPOINTS",
    "REASON_UNHEALTHY",
    "Selection",
    "SelectionEngine",
    "Selector",
    "by_country",
    "by_country_endpoint_picker",
    "random_endpoint_picker",
]
