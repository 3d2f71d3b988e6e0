"""Render a provider and an endpoint selection into a nettest descriptor."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from torii.logging_utils import perf
from torii.selection import Selector
from torii.vpn.model import Endpoint, Options
from torii.vpn.options import options_for
from torii.vpn.provider import Provider

LOGGER = logging.getLogger(__name__)

AUTHOR_NAME = "Ain Ghazal <ain@openobservatory.org>"
ERR_NO_CONFIG = "cannot build config"


class NoConfigError(Exception):
    """No endpoint survived selection, so no descriptor can be built.

    ``str()`` is always ``"cannot build config"``; ``reason`` carries the
    selection's reason code for diagnostics.
    """

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(ERR_NO_CONFIG)
        self.reason = reason


@dataclass(frozen=True)
class NetTest:
    test_name: str
    inputs: Tuple[str, ...]
    options: Options

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test_name": self.test_name,
            "inputs": list(self.inputs),
            "options": self.options.to_dict(),
        }


@dataclass(frozen=True)
class Descriptor:
    name: str
    description: str
    author: str
    net_tests: Tuple[NetTest, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "author": self.author,
            "nettests": [test.to_dict() for test in self.net_tests],
        }

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), **kwargs)


def endpoint_input(provider_name: str, endpoint: Endpoint) -> str:
    """Return the ``vpn://`` input URL a measurement client connects to."""
    return (
        f"vpn://{endpoint.proto}.{provider_name}/"
        f"?addr={endpoint.ip}:{endpoint.port}&transport={endpoint.transport}"
    )


@perf("render.config_for_provider", tags={"component": "render"})
def render_config_for_provider(provider: Provider, selector: Selector) -> Descriptor:
    """Run ``selector`` against ``provider`` and build the descriptor.

    Raises:
        NoConfigError: when the selection is empty.
    """
    selection = selector(provider)
    if not selection:
        raise NoConfigError(selection.reason)

    options = options_for(provider.name, provider.auth())
    net_tests = tuple(
        NetTest(
            test_name=endpoint.proto,
            inputs=(endpoint_input(provider.name, endpoint),),
            options=options,
        )
        for endpoint in selection
    )
    LOGGER.debug("Rendered %d nettests for %s", len(net_tests), provider.name)
    return Descriptor(
        name=f"openvpn-{provider.name}",
        description=f"measure vpn connection to random {provider.long_name} gateways",
        author=AUTHOR_NAME,
        net_tests=net_tests,
    )


__all__ = [
    "AUTHOR_NAME",
    "Descriptor",
    "ERR_NO_CONFIG",
    "NetTest",
    "NoConfigError",
    "endpoint_input",
    "render_config_for_provider",
]
