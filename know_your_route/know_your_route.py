#!/usr/bin/env python

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .config import KnowYourRouteConfig, load_config
from .models import CycleSnapshot, DiagnosisResult, Hop
from .mtr import run_cycles
from .ping import PingExecutor, ProbeExecutor
from .traceroute import discover_hops


def ensure_destination(hops: list[Hop], target: str) -> list[Hop]:
    """Append the target as a final hop unless the path already ends there.

    Routers that drop TTL-exceeded replies can hide the destination from
    discovery; the appended hop is probed like any other.

    Example:
        ensure_destination([], '8.8.8.8')
    """
    if hops and hops[-1].address == target:
        return list(hops)
    index = hops[-1].index + 1 if hops else 1
    return [*hops, Hop(index=index, address=target)]


def diagnose_path(
    target: str,
    cycles: int | None = None,
    on_progress: Callable[[CycleSnapshot], None] | None = None,
    *,
    config: KnowYourRouteConfig | None = None,
    executor: ProbeExecutor | None = None,
    cancel: threading.Event | None = None,
) -> DiagnosisResult:
    """Discover the path to an IP address and measure every hop on it

    Args:
        target (str): an IP address
        cycles (int): number of measurement cycles, from config when None
        on_progress: receives a snapshot after every cycle
        config: Typed configuration object.
        executor: probe executor, the system ping by default
        cancel: stops between batches and cycles once set

    Returns:
        DiagnosisResult: per-hop statistics, destination last

    Raises:
        DiscoveryError: if no probe can be executed at all
        ValueError: if cycles is smaller than 1, before any probe is sent

    Example:
        diagnose_path('8.8.8.8', 5, print)
    """
    if config is None:
        config = load_config()
    if executor is None:
        executor = PingExecutor()
    if cycles is None:
        cycles = config.statistics.cycles
    if cycles < 1:
        raise ValueError(f"cycles must be at least 1, got {cycles}")

    logging.info(f"Tracing path to {target}")
    hops = discover_hops(target, executor=executor, config=config, cancel=cancel)
    path = ensure_destination(hops, target)
    if len(path) > len(hops):
        logging.info(
            f"Destination {target} not seen during discovery, "
            f"appended as hop {path[-1].index}"
        )

    def forward(snapshot: CycleSnapshot) -> None:
        if on_progress is not None:
            on_progress(snapshot)

    logging.info(f"Measuring {len(path)} hops to {target} over {cycles} cycles")
    reports = run_cycles(
        path,
        cycles,
        on_cycle=forward,
        executor=executor,
        config=config,
        cancel=cancel,
    )
    logging.info(f"Finished diagnosis of {target}")

    return DiagnosisResult(target=target, hops=reports)
