"""Request-level entry points for descriptor generation.

One method per public route: a random endpoint of a provider, an endpoint
in a given country, or the endpoints described by a stored experiment. A
web layer maps ``UnknownProviderError``/``ExperimentNotFoundError`` to 404
and ``NoConfigError`` to 504, using ``error_string`` for the body. A stored
experiment whose ``endpoint_remote`` is not ``ip:port`` raises ``ValueError``;
callers report it like ``NoConfigError``.
"""

import logging
from typing import Optional

from torii.experiments import Experiment, new_custom_provider_from_experiment
from torii.render import Descriptor, render_config_for_provider
from torii.selection import SelectionEngine, by_country_endpoint_picker, random_endpoint_picker
from torii.store import ExperimentNotFoundError, ExperimentStore
from torii.vpn.registry import ProviderRegistry

LOGGER = logging.getLogger(__name__)

ERR_TRY_AGAIN = "try again later"


class DescriptorService:
    """Resolve providers and render descriptors for callers."""

    def __init__(
        self,
        providers: ProviderRegistry,
        engine: SelectionEngine,
        experiments: Optional[ExperimentStore] = None,
        debug: bool = False,
    ) -> None:
        self._providers = providers
        self._engine = engine
        self._experiments = experiments
        self._debug = debug

    def random_descriptor(self, provider_name: str) -> Descriptor:
        provider = self._providers.get(provider_name)
        return render_config_for_provider(provider, random_endpoint_picker(self._engine))

    def country_descriptor(self, provider_name: str, cc: str, max_results: int = 1) -> Descriptor:
        provider = self._providers.get(provider_name)
        selector = by_country_endpoint_picker(self._engine, cc, max_results)
        return render_config_for_provider(provider, selector)

    def descriptor_for_experiment(self, exp: Experiment) -> Descriptor:
        """Render ``exp``: its pinned remote if it has one, else country + max.

        Raises:
            UnknownProviderError: if ``exp.provider`` is not registered.
            ValueError: if ``exp.endpoint_remote`` is set but not ``ip:port``.
            NoConfigError: if no endpoint survives selection.
        """
        if exp.has_custom_endpoint:
            provider = new_custom_provider_from_experiment(exp, self._providers)
            LOGGER.info("Rendering custom remote %s for experiment %s", exp.endpoint_remote, exp.name)
            return render_config_for_provider(provider, random_endpoint_picker(self._engine))

        provider = self._providers.get(exp.provider)
        selector = by_country_endpoint_picker(self._engine, exp.country_code, exp.max_results)
        return render_config_for_provider(provider, selector)

    def experiment_descriptor(self, exp_uuid: str) -> Descriptor:
        if self._experiments is None:
            raise ExperimentNotFoundError("experiment store is not configured")
        exp = self._experiments.get_by_uuid(exp_uuid)
        if exp is None:
            raise ExperimentNotFoundError(exp_uuid)
        return self.descriptor_for_experiment(exp)

    def error_string(self, exc: BaseException) -> str:
        """Error text for callers: the detail in debug mode, a generic hint otherwise."""
        if self._debug:
            return str(exc)
        return ERR_TRY_AGAIN


__all__ = ["DescriptorService", "ERR_TRY_AGAIN"]
