"""Provider contract shared by every VPN backend.

A provider is bootstrapped once, at startup, before any selection runs.
After that, ``endpoints()`` and ``auth()`` are read-only snapshots that can
be queried from several threads. Re-bootstrapping replaces the endpoint list
as a whole and must not overlap with reads.
"""

import abc
from typing import List, Sequence

from torii.vpn.model import AuthDetails, Endpoint


class Provider(abc.ABC):
    """Base class for VPN providers."""

    def __init__(self) -> None:
        self._endpoints: List[Endpoint] = []
        self._auth = AuthDetails()

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Stable identifier, used as registry key and in rendered inputs."""

    @property
    def long_name(self) -> str:
        """Display identifier; the plain name unless a variant overrides it."""
        return self.name

    @abc.abstractmethod
    def bootstrap(self) -> bool:
        """Fetch whatever the provider needs; return False on failure."""

    def endpoints(self) -> List[Endpoint]:
        """Return a snapshot of the known endpoints (empty before bootstrap)."""
        return list(self._endpoints)

    def auth(self) -> AuthDetails:
        """Return the current credential bundle."""
        return self._auth

    def _replace_endpoints(self, endpoints: Sequence[Endpoint]) -> None:
        self._endpoints = list(endpoints)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, endpoints={len(self._endpoints)})"


__all__ = ["Provider"]
