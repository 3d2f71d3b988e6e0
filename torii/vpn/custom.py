"""Ad-hoc provider wrapping caller-supplied endpoints."""

import dataclasses
from typing import Optional

from torii.vpn.model import AuthDetails, Endpoint
from torii.vpn.provider import Provider

CUSTOM_NAME = "unknown"


class CustomProvider(Provider):
    """A provider synthesized on demand, outside the provider registry.

    It is fully specified at construction time, so ``bootstrap`` has nothing
    to do. Credentials can be borrowed from a registered provider with
    ``auth_from_provider``; the bundle is copied, not shared.
    """

    def __init__(self, name: str = "", custom_name: Optional[str] = None) -> None:
        super().__init__()
        self._name = name
        self.custom_name = custom_name

    @property
    def name(self) -> str:
        return self._name or CUSTOM_NAME

    @property
    def long_name(self) -> str:
        return self.custom_name or self.name

    def add_endpoint(self, endpoint: Endpoint) -> None:
        self._replace_endpoints([*self._endpoints, endpoint])

    def set_auth(self, auth: AuthDetails) -> None:
        self._auth = dataclasses.replace(auth)

    def auth_from_provider(self, provider: Provider) -> None:
        self.set_auth(provider.auth())

    def bootstrap(self) -> bool:
        return True


__all__ = ["CUSTOM_NAME", "CustomProvider"]
