"""Riseup VPN provider.

Bootstrap pulls the gateway catalog (``eip-service.json``) and a fresh client
certificate from the Riseup API. Both requests are verified against the
bundled Riseup root CA only, not the system trust store.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import requests

from torii.vpn.certs import CertificateBundleError, split_combined_pem, to_base64
from torii.vpn.model import AuthDetails, Endpoint
from torii.vpn.provider import Provider

LOGGER = logging.getLogger(__name__)

RISEUP_NAME = "riseup"
API_URL = "https://api.black.riseup.net/3/config/eip-service.json"
CERT_URL = "https://api.black.riseup.net/3/cert"

DATA_DIR = Path(__file__).resolve().parent / "data"
API_CA_PATH = DATA_DIR / "riseup-api-ca.pem"
VPN_CA_PATH = DATA_DIR / "riseup-vpn-ca.pem"

# port 53 is proving to be problematic
PORTS_TO_AVOID = frozenset({53})


def should_avoid_port(port: str) -> bool:
    """Return True for denylisted or non-numeric ports."""
    try:
        number = int(port)
    except (TypeError, ValueError):
        LOGGER.warning("Bad port %r in catalog", port)
        return True
    return number in PORTS_TO_AVOID


def parse_eip_service(eip: Mapping[str, Any]) -> List[Endpoint]:
    """Flatten an ``eip-service.json`` document into endpoints.

    One endpoint is produced per (gateway, transport protocol, port). The
    catalog's ``protocols`` list holds tcp/udp, which is what we call
    transport; its transport ``type`` tells us the obfuscation.
    """
    locations: Mapping[str, Any] = eip.get("locations") or {}
    endpoints: List[Endpoint] = []
    for gateway in eip.get("gateways") or []:
        location = locations.get(gateway.get("location", ""), {}) or {}
        country_code = (location.get("country_code") or "").lower()
        transports = (gateway.get("capabilities") or {}).get("transport") or []
        for transport in transports:
            obfuscation = "obfs4" if transport.get("type") == "obfs4" else "none"
            for proto in transport.get("protocols") or []:
                for port in transport.get("ports") or []:
                    if should_avoid_port(port):
                        continue
                    endpoints.append(
                        Endpoint(
                            label=gateway.get("host", ""),
                            ip=gateway["ip_address"],
                            port=str(port),
                            proto="openvpn",
                            transport=proto,
                            obfuscation=obfuscation,
                            country_code=country_code,
                        )
                    )
    return endpoints


class RiseupProvider(Provider):
    """Provider backed by the Riseup (LEAP) API."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 15.0,
        api_url: str = API_URL,
        cert_url: str = CERT_URL,
    ) -> None:
        super().__init__()
        self._session = session or requests.Session()
        self._timeout = timeout
        self._api_url = api_url
        self._cert_url = cert_url

    @property
    def name(self) -> str:
        return RISEUP_NAME

    def _get(self, url: str) -> requests.Response:
        response = self._session.get(url, timeout=self._timeout, verify=str(API_CA_PATH))
        if response.status_code != 200:
            raise requests.HTTPError(f"err code: {response.status_code} for {url}", response=response)
        return response

    def fetch_endpoints(self) -> List[Endpoint]:
        eip: Dict[str, Any] = self._get(self._api_url).json()
        return parse_eip_service(eip)

    def fetch_auth(self) -> AuthDetails:
        key, cert = split_combined_pem(self._get(self._cert_url).content)
        return AuthDetails(
            ca=to_base64(VPN_CA_PATH.read_bytes()),
            cert=to_base64(cert),
            key=to_base64(key),
        )

    # TODO: the client certificate expires after a few days; schedule a refresh.
    def bootstrap(self) -> bool:
        """Fetch the gateway catalog and a fresh client certificate."""
        LOGGER.info("Bootstrapping %s", self.name)
        try:
            endpoints = self.fetch_endpoints()
        except (requests.RequestException, ValueError, KeyError, TypeError, AttributeError) as exc:
            LOGGER.error("Error parsing %s endpoints: %s", self.name, exc)
            return False
        LOGGER.info("Got %d %s endpoint combinations", len(endpoints), self.name)

        try:
            auth = self.fetch_auth()
        except (requests.RequestException, CertificateBundleError, OSError) as exc:
            LOGGER.error("Error fetching %s certificate: %s", self.name, exc)
            return False

        self._replace_endpoints(endpoints)
        self._auth = auth
        return True


__all__ = ["RiseupProvider", "parse_eip_service", "should_avoid_port", "API_URL", "CERT_URL"]
