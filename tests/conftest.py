"""Shared fixtures: a scripted executor standing in for the system ping."""

import threading
from collections import deque

import pytest

from know_your_route.config import KnowYourRouteConfig
from know_your_route.ping import ProbeExecutionError, ProbeExecutor


def ttl_exceeded(address: str, target: str) -> str:
    return (
        f"PING {target} ({target}) 56(84) bytes of data.\n"
        f"From {address} icmp_seq=1 Time to live exceeded\n"
        "\n"
        f"--- {target} ping statistics ---\n"
        "1 packets transmitted, 0 received, +1 errors, 100% packet loss, time 0ms\n"
    )


def echo_reply(address: str, rtt: float) -> str:
    return (
        f"PING {address} ({address}) 56(84) bytes of data.\n"
        f"64 bytes from {address}: icmp_seq=1 ttl=58 time={rtt} ms\n"
        "\n"
        f"--- {address} ping statistics ---\n"
        "1 packets transmitted, 1 received, 0% packet loss, time 0ms\n"
    )


def no_reply(address: str) -> str:
    return (
        f"PING {address} ({address}) 56(84) bytes of data.\n"
        "\n"
        f"--- {address} ping statistics ---\n"
        "1 packets transmitted, 0 received, 100% packet loss, time 0ms\n"
    )


class ScriptedExecutor(ProbeExecutor):
    """Answers probes from a script instead of running ping.

    ``script`` maps ``(target, ttl)`` to either a single output, an exception
    instance, or a list consumed one entry per call. Unscripted probes get
    ``no_reply`` output.
    """

    def __init__(self, script=None, available=True):
        self.script = {}
        for key, value in (script or {}).items():
            self.script[key] = deque(value) if isinstance(value, list) else value
        self.available = available
        self.calls = []
        self._lock = threading.Lock()

    def is_available(self):
        return self.available

    def execute(self, target, ttl=None, timeout=1000):
        with self._lock:
            self.calls.append((target, ttl))
            entry = self.script.get((target, ttl))
            if isinstance(entry, deque):
                entry = entry.popleft() if entry else None
        if isinstance(entry, Exception):
            raise entry
        if entry is None:
            return no_reply(target)
        return entry


class BrokenExecutor(ProbeExecutor):
    """Every probe fails to start."""

    def __init__(self):
        self.calls = 0

    def execute(self, target, ttl=None, timeout=1000):
        self.calls += 1
        raise ProbeExecutionError("Ping command not found on system")


@pytest.fixture
def config():
    return KnowYourRouteConfig(statistics={"interval": 0})


@pytest.fixture
def make_executor():
    return ScriptedExecutor
