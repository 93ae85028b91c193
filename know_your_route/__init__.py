"""Know Your Route

A Python package to diagnose the network path to an IP address:
- Hop discovery (parallel TTL-limited pings)
- Per-hop packet loss and round-trip statistics over repeated cycles
- Live progress snapshots after every cycle (MTR-style report)

Works with the system ping command on Linux, macOS and Windows, without
raw sockets or root privileges.
"""

from importlib.metadata import version

__version__ = version("know_your_route")

from .classifier import classify_echo_output, classify_hop_output
from .config import KnowYourRouteConfig, load_config
from .know_your_route import diagnose_path, ensure_destination
from .models import (
    CycleSnapshot,
    DiagnosisResult,
    Hop,
    HopReport,
    HopRow,
    ProbeResult,
)
from .mtr import run_cycles
from .ping import PingExecutor, ProbeExecutionError, ProbeExecutor
from .traceroute import DiscoveryError, discover_hops

__all__ = [
    "KnowYourRouteConfig",
    "load_config",
    "classify_hop_output",
    "classify_echo_output",
    "discover_hops",
    "run_cycles",
    "diagnose_path",
    "ensure_destination",
    "ProbeExecutor",
    "PingExecutor",
    "ProbeExecutionError",
    "DiscoveryError",
    "ProbeResult",
    "Hop",
    "HopReport",
    "HopRow",
    "CycleSnapshot",
    "DiagnosisResult",
]
