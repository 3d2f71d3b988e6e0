"""PEM helpers for provider credential bundles."""

import base64
import re
from typing import List, Tuple

TYPE_PRIVATE_KEY = "RSA PRIVATE KEY"
TYPE_CERTIFICATE = "CERTIFICATE"
BASE64_PREFIX = "base64:"

_PEM_BLOCK = re.compile(
    r"-----BEGIN (?P<type>[A-Z0-9 ]+)-----\r?\n"
    r"(?P<body>.*?)"
    r"-----END (?P=type)-----",
    re.DOTALL,
)


class CertificateBundleError(ValueError):
    """Raised when a combined PEM bundle is not exactly one key and one cert."""


def to_base64(pem: bytes) -> str:
    """Encode a PEM block as a ``base64:``-prefixed URL-safe string."""
    return BASE64_PREFIX + base64.urlsafe_b64encode(pem).decode("ascii")


def _encode_block(block_type: str, body: str) -> bytes:
    lines = [line.strip() for line in body.splitlines() if line.strip()]
    text = f"-----BEGIN {block_type}-----\n" + "\n".join(lines) + f"\n-----END {block_type}-----\n"
    return text.encode("ascii")


def pem_blocks(data: bytes) -> List[Tuple[str, bytes]]:
    """Return ``(type, pem_bytes)`` for every PEM block found in ``data``."""
    text = data.decode("ascii", errors="replace")
    return [
        (match.group("type"), _encode_block(match.group("type"), match.group("body")))
        for match in _PEM_BLOCK.finditer(text)
    ]


def split_combined_pem(combined: bytes) -> Tuple[bytes, bytes]:
    """Split a key+certificate bundle into ``(key, cert)`` PEM bytes.

    The bundle must hold exactly two blocks, one private key and one
    certificate, in either order.

    Raises:
        CertificateBundleError: for any other shape.
    """
    blocks = pem_blocks(combined)
    if len(blocks) != 2:
        raise CertificateBundleError(f"expected 2 PEM blocks, found {len(blocks)}")

    by_type = dict(blocks)
    if TYPE_PRIVATE_KEY not in by_type:
        raise CertificateBundleError("cannot decode key")
    if TYPE_CERTIFICATE not in by_type:
        raise CertificateBundleError("cannot decode cert")
    return by_type[TYPE_PRIVATE_KEY], by_type[TYPE_CERTIFICATE]


__all__ = [
    "BASE64_PREFIX",
    "CertificateBundleError",
    "pem_blocks",
    "split_combined_pem",
    "to_base64",
]
