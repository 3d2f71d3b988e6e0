"""User-submitted experiment records and custom-provider synthesis.

An experiment either narrows a registered provider by country and count,
or pins a single ``ip:port`` remote for replaying an anomaly. In the second
case a throwaway ``CustomProvider`` is built around that remote, borrowing
credentials from the provider the experiment names.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

import petname

from torii.vpn.custom import CUSTOM_NAME, CustomProvider
from torii.vpn.model import Endpoint
from torii.vpn.registry import ProviderRegistry


def random_petname() -> str:
    """Return a two-word name such as ``"fluffy-walrus"``."""
    return petname.generate(2, "-")


def parse_max(value: Optional[str]) -> int:
    """Parse the experiment ``max`` field; empty or invalid means 1."""
    if not value:
        return 1
    try:
        return int(value.strip())
    except ValueError:
        return 1


def split_remote(remote: str) -> Tuple[str, str]:
    """Split an ``ip:port`` remote.

    Raises:
        ValueError: if either half is missing or the port is not numeric.
    """
    ip, sep, port = (remote or "").strip().rpartition(":")
    if not sep or not ip or not port.isdigit():
        raise ValueError(f"endpoint remote must look like ip:port, got {remote!r}")
    return ip, port


@dataclass
class Experiment:
    """A stored experiment definition.

    Field names follow Python conventions; ``to_dict``/``from_dict`` use the
    wire keys of the experiment API (``cc``, ``endpoint_remote``, ``ID``...).
    """

    provider: str
    name: str = ""
    country_code: str = ""
    comment: str = ""
    max: str = ""
    endpoint_remote: str = ""
    uuid: str = ""
    id: int = 0

    _WIRE_KEYS = {
        "id": "ID",
        "name": "name",
        "provider": "provider",
        "country_code": "cc",
        "comment": "comment",
        "max": "max",
        "endpoint_remote": "endpoint_remote",
        "uuid": "UUID",
    }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Experiment":
        values: Dict[str, Any] = {}
        for attr, key in cls._WIRE_KEYS.items():
            if key in data and data[key] is not None:
                values[attr] = data[key]
        if "provider" not in values:
            raise ValueError("experiment requires a provider")
        values["id"] = int(values.get("id") or 0)
        for attr in ("provider", "name", "country_code", "comment", "max", "endpoint_remote", "uuid"):
            if attr in values:
                values[attr] = str(values[attr])
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {self._WIRE_KEYS[attr]: value for attr, value in asdict(self).items()}

    @property
    def max_results(self) -> int:
        return parse_max(self.max)

    @property
    def has_custom_endpoint(self) -> bool:
        return bool(self.endpoint_remote)


def new_custom_provider_from_experiment(exp: Experiment, providers: ProviderRegistry) -> CustomProvider:
    """Build a single-remote provider for ``exp``.

    The auth bundle is copied from the registered provider the experiment
    names, unless it names the ``"unknown"`` placeholder.

    Raises:
        UnknownProviderError: if the referenced provider is not registered.
        ValueError: if ``exp.endpoint_remote`` is not ``ip:port``.
    """
    ip, port = split_remote(exp.endpoint_remote)
    provider = CustomProvider(exp.provider, custom_name=f"{exp.provider}-{exp.name}")
    if exp.provider != CUSTOM_NAME:
        provider.auth_from_provider(providers.get(exp.provider))

    provider.add_endpoint(
        Endpoint(
            label=exp.name,
            ip=ip,
            port=port,
            proto="openvpn",
            transport="tcp",
            obfuscation="none",
            country_code=exp.country_code,
        )
    )
    return provider


__all__ = [
    "Experiment",
    "new_custom_provider_from_experiment",
    "parse_max",
    "random_petname",
    "split_remote",
]
