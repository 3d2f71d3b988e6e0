"""Per-provider OpenVPN cipher policy."""

from dataclasses import dataclass
from typing import Dict

from torii.vpn.model import AuthDetails, Options


@dataclass(frozen=True)
class OptionsPolicy:
    """Default cipher settings and the credential style of a provider.

    Providers with ``cert_auth`` authenticate with a client certificate, so
    the rendered options carry CA, cert and key. The rest only get the CA.
    """

    cipher: str = "AES-256-GCM"
    auth: str = "SHA512"
    compress: str = ""
    cert_auth: bool = True
    local_creds: bool = False

    def options_for(self, details: AuthDetails) -> Options:
        return Options(
            cipher=self.cipher,
            auth=self.auth,
            compress=self.compress,
            safe_ca=details.ca,
            safe_cert=details.cert if self.cert_auth else "",
            safe_key=details.key if self.cert_auth else "",
            safe_local_creds=self.local_creds,
        )


DEFAULT_POLICY = OptionsPolicy()

POLICIES: Dict[str, OptionsPolicy] = {
    "riseup": OptionsPolicy(cipher="AES-256-GCM", auth="SHA512"),
    # user/password auth, credentials live on the probe
    "tunnelbear": OptionsPolicy(
        cipher="AES-256-CBC",
        auth="SHA256",
        compress="lzo-no",
        cert_auth=False,
        local_creds=True,
    ),
}


def policy_for(provider_name: str) -> OptionsPolicy:
    return POLICIES.get(provider_name, DEFAULT_POLICY)


def options_for(provider_name: str, details: AuthDetails) -> Options:
    """Build the rendered options for ``provider_name`` from its auth bundle."""
    return policy_for(provider_name).options_for(details)


__all__ = ["DEFAULT_POLICY", "OptionsPolicy", "POLICIES", "options_for", "policy_for"]
