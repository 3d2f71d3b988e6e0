"""Process-wide provider registry.

The registry is built once at startup, bootstrapped sequentially, and then
handed to the selection and rendering layers. It is read-mostly afterwards.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from torii.config import AppConfig
from torii.logging_utils import perf_span
from torii.vpn.provider import Provider
from torii.vpn.riseup import RiseupProvider
from torii.vpn.tunnelbear import TunnelbearProvider

LOGGER = logging.getLogger(__name__)


class UnknownProviderError(KeyError):
    """Raised when a provider name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown provider: {self.name}"


class BootstrapError(RuntimeError):
    """Raised by a strict bootstrap when at least one provider failed."""

    def __init__(self, failed: List[str]) -> None:
        super().__init__(f"bootstrap failed for: {', '.join(failed)}")
        self.failed = failed


class ProviderRegistry:
    """Name-keyed collection of providers."""

    def __init__(self, providers: Iterable[Provider] = ()) -> None:
        self._providers: Dict[str, Provider] = {}
        for provider in providers:
            self.register(provider)

    def register(self, provider: Provider) -> None:
        if provider.name in self._providers:
            raise ValueError(f"provider already registered: {provider.name}")
        self._providers[provider.name] = provider

    def get(self, name: str) -> Provider:
        try:
            return self._providers[name]
        except KeyError:
            raise UnknownProviderError(name) from None

    def is_known(self, name: str) -> bool:
        return name in self._providers

    def names(self) -> List[str]:
        return sorted(self._providers)

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __iter__(self) -> Iterator[Provider]:
        return iter(list(self._providers.values()))

    def __len__(self) -> int:
        return len(self._providers)

    def bootstrap_all(self, strict: bool = False) -> Dict[str, bool]:
        """Bootstrap every provider in registration order.

        Args:
            strict: Raise ``BootstrapError`` after the loop if any provider
                failed, instead of only reporting it.

        Returns:
            Mapping of provider name to bootstrap outcome.
        """
        LOGGER.info("Initializing all providers: %s", ", ".join(self._providers))
        results: Dict[str, bool] = {}
        for provider in self:
            with perf_span("providers.bootstrap", tags={"provider": provider.name}, logger=LOGGER):
                results[provider.name] = provider.bootstrap()
            if not results[provider.name]:
                LOGGER.error("Provider %s failed to bootstrap", provider.name)

        failed = [name for name, ok in results.items() if not ok]
        if failed and strict:
            raise BootstrapError(failed)
        return results


def build_registry(config: AppConfig, providers: Optional[Iterable[str]] = None) -> ProviderRegistry:
    """Create the registry for the provider names enabled in ``config``."""
    factories = {
        "riseup": RiseupProvider,
        "tunnelbear": lambda: TunnelbearProvider(config.data_directory),
    }
    registry = ProviderRegistry()
    for name in providers or config.providers:
        if name not in factories:
            raise UnknownProviderError(name)
        registry.register(factories[name]())
    return registry


__all__ = ["BootstrapError", "ProviderRegistry", "UnknownProviderError", "build_registry"]
