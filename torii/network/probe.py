"""TCP reachability probing for provider endpoints.

``ProbeHealthOracle`` implements the health-oracle contract consumed by
``torii.health``:

1) ``refresh`` sweeps all TCP endpoints of one provider concurrently, timing
   a plain TCP connect to each.
2) Results are cached per ``(address, transport)``.
3) ``healthy`` answers from the cache and raises ``LookupError`` for
   endpoints it has no result for (UDP endpoints, or before the first sweep),
   which the health gate treats as healthy.

``start``/``stop`` run the sweep periodically on a daemon thread.
"""

import logging
import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from torii.logging_utils import perf_span
from torii.vpn.model import Endpoint
from torii.vpn.provider import Provider

LOGGER = logging.getLogger(__name__)

ProbeKey = Tuple[str, str]


@dataclass(frozen=True)
class EndpointProbe:
    """Outcome of one connect attempt.

    Attributes:
        endpoint: The probed endpoint.
        ok: Whether the TCP handshake completed within the timeout.
        latency_ms: Time spent, in milliseconds.
        error: Error text when the probe failed.
    """

    endpoint: Endpoint
    ok: bool
    latency_ms: float
    error: Optional[str] = None


def probe_endpoint(endpoint: Endpoint, *, timeout: float = 3.0) -> EndpointProbe:
    """Open and close a TCP connection to ``endpoint``."""
    start_ns = time.perf_counter_ns()
    try:
        with socket.create_connection((endpoint.ip, int(endpoint.port)), timeout=timeout):
            pass
    except (OSError, ValueError) as exc:
        elapsed_ms = (time.perf_counter_ns() - start_ns) / 1_000_000.0
        return EndpointProbe(endpoint=endpoint, ok=False, latency_ms=elapsed_ms, error=str(exc))
    elapsed_ms = (time.perf_counter_ns() - start_ns) / 1_000_000.0
    return EndpointProbe(endpoint=endpoint, ok=True, latency_ms=elapsed_ms)


def _run_probes(endpoints: Sequence[Endpoint], timeout: float, max_workers: int) -> List[EndpointProbe]:
    results: List[EndpointProbe] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(probe_endpoint, e, timeout=timeout): e for e in endpoints}
        for fut in as_completed(futures):
            try:
                results.append(fut.result())
            except Exception as exc:  # noqa: BLE001
                results.append(
                    EndpointProbe(
                        endpoint=futures[fut],
                        ok=False,
                        latency_ms=float("inf"),
                        error=str(exc),
                    )
                )
    return results


class ProbeHealthOracle:
    """Health oracle for one provider, fed by periodic TCP probes."""

    def __init__(
        self,
        provider: Provider,
        *,
        timeout: float = 3.0,
        max_workers: int = 16,
        latency_threshold_ms: Optional[float] = None,
    ) -> None:
        self._provider = provider
        self._timeout = timeout
        self._max_workers = max(1, int(max_workers))
        self._latency_threshold_ms = latency_threshold_ms
        self._results: Dict[ProbeKey, bool] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def healthy(self, address: str, transport: str) -> bool:
        with self._lock:
            try:
                return self._results[(address, transport)]
            except KeyError:
                raise LookupError(f"no probe result for {address}/{transport}") from None

    def _is_ok(self, probe: EndpointProbe) -> bool:
        if not probe.ok:
            return False
        return self._latency_threshold_ms is None or probe.latency_ms <= self._latency_threshold_ms

    def refresh(self) -> Dict[str, int]:
        """Probe every TCP endpoint once and replace the cached results.

        Returns:
            Counts of probed and healthy endpoints.
        """
        targets = list(
            {e.address: e for e in self._provider.endpoints() if e.transport == "tcp"}.values()
        )
        if not targets:
            return {"probed": 0, "healthy": 0}

        with perf_span("probe.refresh", tags={"provider": self._provider.name}, logger=LOGGER):
            probes = _run_probes(targets, self._timeout, self._max_workers)

        results = {(p.endpoint.address, p.endpoint.transport): self._is_ok(p) for p in probes}
        with self._lock:
            self._results = results

        counts = {"probed": len(probes), "healthy": sum(results.values())}
        LOGGER.info(
            "Probed %s endpoints: probed=%d healthy=%d",
            self._provider.name,
            counts["probed"],
            counts["healthy"],
        )
        return counts

    def _loop(self, interval: float) -> None:
        while not self._stop.is_set():
            try:
                self.refresh()
            except Exception:  # noqa: BLE001 - keep the prober alive
                LOGGER.exception("Probe sweep failed for %s", self._provider.name)
            self._stop.wait(interval)

    def start(self, interval: float) -> None:
        """Sweep now and then every ``interval`` seconds on a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop,
            args=(interval,),
            name=f"probe-{self._provider.name}",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


__all__ = ["EndpointProbe", "ProbeHealthOracle", "probe_endpoint"]
