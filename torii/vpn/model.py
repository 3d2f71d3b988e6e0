"""Value types shared by providers, selection and rendering."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Endpoint:
    """A single reachable gateway instance for a VPN connection.

    Args:
        label: Human tag (gateway host, experiment name, ``cc-N``).
        ip: Gateway IP address.
        port: Gateway port, kept as text the way catalogs publish it.
        proto: VPN protocol, e.g. ``"openvpn"``.
        transport: ``"tcp"`` or ``"udp"``.
        obfuscation: ``"none"`` or ``"obfs4"``.
        country_code: Lower-case ISO country code, or empty when unknown.
    """

    label: str
    ip: str
    port: str
    proto: str = "openvpn"
    transport: str = "tcp"
    obfuscation: str = "none"
    country_code: str = ""

    @property
    def address(self) -> str:
        """Return the ``ip:port`` form used by probes and rendered inputs."""
        return f"{self.ip}:{self.port}"


@dataclass(frozen=True)
class AuthDetails:
    """Credential bundle; each field is empty or a ``base64:``-prefixed PEM."""

    ca: str = ""
    cert: str = ""
    key: str = ""

    def is_empty(self) -> bool:
        return not (self.ca or self.cert or self.key)


@dataclass(frozen=True)
class Options:
    """Cipher and credential options attached to one rendered nettest."""

    cipher: str
    auth: str
    compress: str = ""
    safe_ca: str = ""
    safe_cert: str = ""
    safe_key: str = ""
    safe_local_creds: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"Cipher": self.cipher, "Auth": self.auth}
        if self.compress:
            data["Compress"] = self.compress
        data.update(
            {
                "SafeCa": self.safe_ca,
                "SafeCert": self.safe_cert,
                "SafeKey": self.safe_key,
                "SafeLocalCreds": self.safe_local_creds,
            }
        )
        return data


__all__ = ["AuthDetails", "Endpoint", "Options"]
