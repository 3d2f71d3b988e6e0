"""Tunnelbear provider.

Tunnelbear has no catalog API; the endpoints come from the OpenVPN config
bundle it publishes for Linux users. Each ``remote <domain> <port>`` line
names a country-specific domain (``de.lazerpenguin.com``), and every IPv4
address that domain resolves to becomes one endpoint.
"""

import logging
import socket
import zipfile
from pathlib import Path
from typing import Dict, List, Optional

import requests

from torii.vpn.grep import find_in_dir
from torii.vpn.model import Endpoint
from torii.vpn.provider import Provider

LOGGER = logging.getLogger(__name__)

TUNNELBEAR_NAME = "tunnelbear"
CONFIG_URL = "https://tunnelbear.s3.amazonaws.com/support/linux/openvpn.zip"
CONFIG_FILE_NAME = "openvpn.zip"


def country_code_from_domain(domain: str) -> str:
    """Return the leading DNS label, which Tunnelbear uses as country code."""
    return domain.split(".", 1)[0]


def extract_country_domains(config_dir: Path) -> Dict[str, str]:
    """Map country code to ``domain:port`` from ``remote`` lines below ``config_dir``."""
    domains: Dict[str, str] = {}
    for line in find_in_dir("remote", [config_dir]):
        words = line.split()
        if len(words) < 3 or words[0] != "remote":
            continue
        domain, port = words[1], words[2]
        domains[country_code_from_domain(domain)] = f"{domain}:{port}"
    return domains


def resolve_ips(domain: str) -> List[str]:
    """Resolve ``domain`` to its distinct IPv4 addresses, in resolver order."""
    try:
        infos = socket.getaddrinfo(domain, None, socket.AF_INET, socket.SOCK_STREAM)
    except OSError as exc:
        LOGGER.warning("Cannot resolve %s: %s", domain, exc)
        return []
    return list(dict.fromkeys(info[4][0] for info in infos))


class TunnelbearProvider(Provider):
    """Provider built from Tunnelbear's downloadable OpenVPN configs."""

    def __init__(
        self,
        data_directory: Path,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        config_url: str = CONFIG_URL,
    ) -> None:
        super().__init__()
        self._base_dir = Path(data_directory) / TUNNELBEAR_NAME
        self._session = session or requests.Session()
        self._timeout = timeout
        self._config_url = config_url
        self.domain_map: Dict[str, str] = {}

    @property
    def name(self) -> str:
        return TUNNELBEAR_NAME

    @property
    def zip_path(self) -> Path:
        return self._base_dir / CONFIG_FILE_NAME

    @property
    def openvpn_config_path(self) -> Path:
        return self._base_dir / "config" / "openvpn"

    def download_and_extract_config(self) -> None:
        """Download the config bundle and unpack it under ``config/``."""
        self._base_dir.mkdir(parents=True, exist_ok=True)
        partial = self.zip_path.with_suffix(".part")
        try:
            with self._session.get(self._config_url, timeout=self._timeout, stream=True) as response:
                response.raise_for_status()
                with partial.open("wb") as handle:
                    for chunk in response.iter_content(chunk_size=64 * 1024):
                        handle.write(chunk)
            LOGGER.info(
                "Downloaded config file %s with size %d",
                self._config_url,
                partial.stat().st_size,
            )
            with zipfile.ZipFile(partial) as archive:
                archive.extractall(self._base_dir / "config")
            # only a bundle that unpacked cleanly counts as downloaded
            partial.replace(self.zip_path)
        finally:
            partial.unlink(missing_ok=True)

    def _endpoints_from_domains(self) -> List[Endpoint]:
        endpoints: List[Endpoint] = []
        # TODO: resolve domains concurrently; there is one lookup per country.
        for cc, remote in sorted(self.domain_map.items()):
            domain, port = remote.rsplit(":", 1)
            for index, ip in enumerate(resolve_ips(domain)):
                endpoints.append(
                    Endpoint(
                        label=f"{cc}-{index}",
                        ip=ip,
                        port=port,
                        proto="openvpn",
                        transport="tcp",
                        obfuscation="none",
                        country_code=cc,
                    )
                )
        return endpoints

    def bootstrap(self) -> bool:
        """Make sure the config bundle is on disk, then build the endpoint list."""
        LOGGER.info("Bootstrapping %s", self.name)
        if not self.zip_path.exists():
            try:
                self.download_and_extract_config()
            except (requests.RequestException, zipfile.BadZipFile, OSError) as exc:
                LOGGER.error("Cannot fetch %s config bundle: %s", self.name, exc)
                return False

        self.domain_map = extract_country_domains(self.openvpn_config_path)
        LOGGER.info("Got %d %s endpoint domains", len(self.domain_map), self.name)

        endpoints = self._endpoints_from_domains()
        self._replace_endpoints(endpoints)
        LOGGER.info("Got %d %s endpoints", len(endpoints), self.name)
        return True


__all__ = [
    "TunnelbearProvider",
    "country_code_from_domain",
    "extract_country_domains",
    "resolve_ips",
]
