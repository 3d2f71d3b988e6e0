"""Network reachability helpers.

Exports:
- ``ProbeHealthOracle``: periodic TCP prober usable as a health oracle.
- ``EndpointProbe``: one probe outcome.
- ``probe_endpoint``: a single timed TCP connect.
"""

from torii.network.probe import EndpointProbe, ProbeHealthOracle, probe_endpoint

__all__ = ["EndpointProbe", "ProbeHealthOracle", "probe_endpoint"]
