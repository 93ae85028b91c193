#!/usr/bin/env python

"""MTR-style statistics gathered over repeated probe cycles.

Each cycle pings every known hop once, all hops in parallel, then publishes a
snapshot of the running statistics. Cycles never overlap: the next one starts
only after the progress callback for the previous one has returned.

Example:
    >>> hops = discover_hops("8.8.8.8")
    >>> reports = run_cycles(hops, 3, on_cycle=lambda s: print(s.cycle))
    1
    2
    3
    >>> reports[-1].loss_percent
    0.0
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from functools import partial
from multiprocessing.pool import ThreadPool

from .classifier import classify_echo_output
from .config import KnowYourRouteConfig, StatisticsConfig, load_config
from .models import CycleSnapshot, Hop, HopReport, HopStatistics
from .ping import PingExecutor, ProbeExecutionError, ProbeExecutor


def probe_hop(executor: ProbeExecutor, timeout: int, stat: HopStatistics) -> None:
    """Ping one hop directly and fold the outcome into its statistics."""
    address = stat.hop.address
    try:
        raw = executor.execute(address, ttl=None, timeout=timeout)
    except ProbeExecutionError as e:
        logging.warning(f"Probe to hop {stat.hop.index} ({address}) failed: {e}")
        stat.record(None)
        return
    stat.record(classify_echo_output(raw, address).rtt_ms)


def snapshot(stats: list[HopStatistics], cycle: int, total_cycles: int) -> CycleSnapshot:
    return CycleSnapshot(
        cycle=cycle,
        total_cycles=total_cycles,
        hops=[stat.to_row() for stat in stats],
    )


def run_cycles(
    hops: list[Hop],
    cycles: int,
    on_cycle: Callable[[CycleSnapshot], None] | None = None,
    executor: ProbeExecutor | None = None,
    config: KnowYourRouteConfig | StatisticsConfig | None = None,
    cancel: threading.Event | None = None,
) -> list[HopReport]:
    """Probe every hop ``cycles`` times and aggregate the results.

    Hops without an address never probe; they stay at 100% loss and do not
    count attempts.

    Args:
        hops: Hops to measure, usually the output of discover_hops.
        cycles: Number of cycles, at least 1.
        on_cycle: Called synchronously with a snapshot after every cycle.
        executor: Probe executor, the system ping by default.
        config: Configuration; only the statistics section is used.
        cancel: Checked between cycles; once set no new cycle starts.

    Returns:
        One report per hop, in the order of ``hops``.

    Raises:
        ValueError: If ``cycles`` is smaller than 1.
    """
    if cycles < 1:
        raise ValueError(f"cycles must be at least 1, got {cycles}")
    if executor is None:
        executor = PingExecutor()
    if config is None:
        config = load_config()
    if isinstance(config, KnowYourRouteConfig):
        config = config.statistics

    stats = [HopStatistics(hop=hop) for hop in hops]
    live = [stat for stat in stats if not stat.is_dead]
    probe = partial(probe_hop, executor, config.timeout)

    with ThreadPool(processes=max(1, len(live))) as pool:
        for cycle in range(1, cycles + 1):
            if cancel is not None and cancel.is_set():
                logging.info(f"Statistics cancelled before cycle {cycle}/{cycles}")
                break

            started = time.monotonic()
            # map() returns once every hop of the cycle is resolved
            pool.map(probe, live)
            logging.debug(
                f"Cycle {cycle}/{cycles} done in {time.monotonic() - started:.2f}s"
            )

            if on_cycle is not None:
                on_cycle(snapshot(stats, cycle, cycles))

            if cycle == cycles:
                break
            if cancel is None:
                time.sleep(config.interval / 1000)
            else:
                cancel.wait(config.interval / 1000)

    return [stat.to_report() for stat in stats]
