"""Health gate: turn a per-provider reachability oracle into a filter.

The gate fails open twice over:

- a provider without a registered oracle passes every endpoint;
- an oracle that raises for an endpoint lets that endpoint through.

A broken health subsystem must never make a provider look like it has no
usable endpoints; handing out a dead gateway costs one failed measurement,
handing out nothing blocks every measurement for that provider.
"""

import logging
import threading
from typing import Callable, Dict, Optional, Protocol

from torii.vpn.model import Endpoint

LOGGER = logging.getLogger(__name__)

EndpointFilter = Callable[[Endpoint], bool]


class HealthOracle(Protocol):
    """Reachability oracle owned by a health collaborator.

    ``healthy`` answers from whatever the collaborator knows about
    ``address`` (``ip:port``) over ``transport``. It raises when it cannot
    answer. Implementations must bound their own latency.
    """

    def healthy(self, address: str, transport: str) -> bool: ...


def accept_all(endpoint: Endpoint) -> bool:
    return True


class HealthRegistry:
    """Provider name to oracle mapping; absent entries are expected."""

    def __init__(self) -> None:
        self._oracles: Dict[str, HealthOracle] = {}
        self._lock = threading.Lock()

    def register(self, provider_name: str, oracle: HealthOracle) -> None:
        with self._lock:
            self._oracles[provider_name] = oracle

    def unregister(self, provider_name: str) -> None:
        with self._lock:
            self._oracles.pop(provider_name, None)

    def get(self, provider_name: str) -> Optional[HealthOracle]:
        with self._lock:
            return self._oracles.get(provider_name)

    def gate(self, provider_name: str) -> EndpointFilter:
        """Return the health predicate for ``provider_name``."""
        oracle = self.get(provider_name)
        if oracle is None:
            return accept_all

        def is_healthy(endpoint: Endpoint) -> bool:
            try:
                return bool(oracle.healthy(endpoint.address, endpoint.transport))
            except Exception as exc:  # noqa: BLE001 - fail open, see module docstring
                LOGGER.warning(
                    "Health check failed for %s %s/%s, treating as healthy: %s",
                    provider_name,
                    endpoint.address,
                    endpoint.transport,
                    exc,
                )
                return True

        return is_healthy


__all__ = ["EndpointFilter", "HealthOracle", "HealthRegistry", "accept_all"]
