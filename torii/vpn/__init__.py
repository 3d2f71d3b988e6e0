"""VPN providers and the value types they expose.

Exports:
- ``Endpoint``, ``AuthDetails``, ``Options``: shared value types.
- ``Provider``: the contract every backend implements.
- ``RiseupProvider``, ``TunnelbearProvider``, ``CustomProvider``: the backends.
- ``ProviderRegistry``, ``build_registry``: name-keyed provider lookup.
"""

from torii.vpn.custom import CUSTOM_NAME, CustomProvider
from torii.vpn.model import AuthDetails, Endpoint, Options
from torii.vpn.options import options_for
from torii.vpn.provider import Provider
from torii.vpn.registry import (
    BootstrapError,
    ProviderRegistry,
    UnknownProviderError,
    build_registry,
)
from torii.vpn.riseup import RiseupProvider
from torii.vpn.tunnelbear import TunnelbearProvider

__all__ = [
    "AuthDetails",
    "BootstrapError",
    "CUSTOM_NAME",
    "CustomProvider",
    "Endpoint",
    "Options",
    "Provider",
    "ProviderRegistry",
    "RiseupProvider",
    "TunnelbearProvider",
    "UnknownProviderError",
    "build_registry",
    "options_for",
]
