"""torii: VPN connection descriptors for network-measurement clients."""

__version__ = "0.1.0"
