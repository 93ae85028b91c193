#!/usr/bin/env python

"""Parallel traceroute built on single TTL-limited pings.

Rather than shelling out to traceroute/tracert, every TTL is probed with one
ping whose TTL is capped. Probes run in batches on a thread pool so a full
30-hop sweep costs a few probe timeouts instead of thirty.

Example:
    >>> hops = discover_hops("8.8.8.8")
    >>> [(hop.index, hop.address) for hop in hops]
    [(1, '192.168.1.1'), (2, '10.20.0.1'), (5, '8.8.8.8')]
"""

from __future__ import annotations

import logging
import threading
from functools import partial
from multiprocessing.pool import ThreadPool

from .classifier import classify_hop_output
from .config import DiscoveryConfig, KnowYourRouteConfig, load_config
from .models import Hop, ProbeResult
from .ping import PingExecutor, ProbeExecutionError, ProbeExecutor


class DiscoveryError(Exception):
    """The probe capability is unusable, so no path can be discovered."""

    pass


def probe_ttl(
    executor: ProbeExecutor, target: str, timeout: int, ttl: int
) -> tuple[int, ProbeResult]:
    """Send one TTL-limited probe and classify the reply.

    Execution failures are reported as timeouts carrying the error text.
    """
    try:
        raw = executor.execute(target, ttl=ttl, timeout=timeout)
    except ProbeExecutionError as e:
        logging.warning(f"Probe to {target} with ttl={ttl} failed: {e}")
        return ttl, ProbeResult(error=str(e))
    return ttl, classify_hop_output(raw, target)


def truncate_at_destination(hops: list[Hop], target: str) -> list[Hop]:
    """Sort hops by TTL and drop everything after the first destination hop."""
    path = []
    for hop in sorted(hops, key=lambda h: h.index):
        path.append(hop)
        if hop.address == target:
            break
    return path


def discover_hops(
    target: str,
    executor: ProbeExecutor | None = None,
    config: KnowYourRouteConfig | DiscoveryConfig | None = None,
    cancel: threading.Event | None = None,
) -> list[Hop]:
    """Discover the routers between this host and ``target``.

    Args:
        target: Destination IP address.
        executor: Probe executor, the system ping by default.
        config: Configuration; only the discovery section is used.
        cancel: Checked between batches; once set no new batch starts.

    Returns:
        Hops in ascending TTL order. Timeouts leave no entry. When the
        destination answered it is the last hop; otherwise it is absent.

    Raises:
        DiscoveryError: If the executor is unavailable or every probe failed
            to execute.
    """
    if executor is None:
        executor = PingExecutor()
    if config is None:
        config = load_config()
    if isinstance(config, KnowYourRouteConfig):
        config = config.discovery

    if not executor.is_available():
        raise DiscoveryError("No usable ping command found on system")

    hops: list[Hop] = []
    issued = 0
    failed = 0
    reached = False

    probe = partial(probe_ttl, executor, target, config.timeout)

    with ThreadPool(processes=config.batch_size) as pool:
        for start in range(1, config.max_ttl + 1, config.batch_size):
            if cancel is not None and cancel.is_set():
                logging.info(f"Discovery to {target} cancelled before ttl={start}")
                break

            end = min(start + config.batch_size - 1, config.max_ttl)
            logging.debug(f"Probing {target} ttl {start}-{end}")
            results = pool.map(probe, range(start, end + 1))

            for ttl, result in results:
                issued += 1
                if result.error is not None:
                    failed += 1
                if result.is_timeout:
                    continue
                hops.append(Hop(index=ttl, address=result.address))
                if result.is_destination or result.address == target:
                    reached = True

            hops.sort(key=lambda h: h.index)
            if reached:
                break

    if issued and failed == issued:
        raise DiscoveryError(f"Every probe to {target} failed to execute")

    path = truncate_at_destination(hops, target)
    logging.info(
        f"Discovered {len(path)} hops to {target}"
        + ("" if reached else " (destination not reached)")
    )
    return path
