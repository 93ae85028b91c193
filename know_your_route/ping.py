#!/usr/bin/env python

"""Single-shot ping execution using subprocess for cross-platform compatibility.

This module runs the system ping command once per probe, optionally with a
limited TTL, and hands back the raw text for classification. It avoids the
complexity and security requirements of raw sockets.

Example:
    >>> executor = PingExecutor()
    >>> raw = executor.execute("8.8.8.8", ttl=3, timeout=1000)
    >>> print(raw)
    PING 8.8.8.8 (8.8.8.8) 56(84) bytes of data.
    From 10.20.0.1 icmp_seq=1 Time to live exceeded
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
import subprocess
from abc import ABC, abstractmethod


class ProbeExecutionError(Exception):
    """The probe process could not be started or crashed."""

    pass


class ProbeExecutor(ABC):
    """Runs one probe towards a target and returns its raw text output."""

    @abstractmethod
    def execute(self, target: str, ttl: int | None = None, timeout: int = 1000) -> str:
        """Send exactly one probe.

        Args:
            target: IP address to probe.
            ttl: Time-to-live for the probe, or None for a direct probe.
            timeout: Timeout in milliseconds.

        Returns:
            Raw output of the probe.

        Raises:
            ProbeExecutionError: If the probe could not be executed.
        """
        raise NotImplementedError

    def is_available(self) -> bool:
        """Whether this executor can run probes on the current host."""
        return True


def build_ping_command(
    target: str, ttl: int | None = None, timeout: int = 1000, system: str | None = None
) -> list[str]:
    """Build the platform-specific ping command for a single echo request.

    Args:
        target: IP address to ping.
        ttl: Time-to-live, or None to leave the system default.
        timeout: Timeout in milliseconds.
        system: Operating system name, defaults to the current one.

    Returns:
        Command tokens suitable for :func:`subprocess.run`.
    """
    if system is None:
        system = platform.system().lower()

    match system:
        case "windows":
            cmd = ["ping", "-n", "1", "-w", str(timeout)]
            if ttl is not None:
                cmd.extend(["-i", str(ttl)])

        case "darwin":
            cmd = ["ping", "-c", "1", "-W", str(timeout)]
            if ttl is not None:
                cmd.extend(["-m", str(ttl)])

        case _:  # Linux or other Unix-like
            # Convert timeout from milliseconds to whole seconds
            timeout_sec = max(1, -(-timeout // 1000))
            cmd = ["ping", "-c", "1", "-W", str(timeout_sec)]
            if ttl is not None:
                cmd.extend(["-t", str(ttl)])

    cmd.append(target)
    return cmd


class PingExecutor(ProbeExecutor):
    """Probe executor backed by the system ping command.

    Output is forced to the C locale where the platform honours it, which
    keeps the text close to what the classifier expects. Windows ignores
    ``LC_ALL``, which is why classification stays locale-tolerant.
    """

    def __init__(self, system: str | None = None) -> None:
        self.system = system or platform.system().lower()

    def is_available(self) -> bool:
        return shutil.which("ping") is not None

    def execute(self, target: str, ttl: int | None = None, timeout: int = 1000) -> str:
        cmd = build_ping_command(target, ttl=ttl, timeout=timeout, system=self.system)
        env = {**os.environ, "LC_ALL": "C"}

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                env=env,
                timeout=timeout / 1000 + 5,  # Add buffer to subprocess timeout
            )
        except subprocess.TimeoutExpired as e:
            logging.debug(f"Ping to {target} (ttl={ttl}) timed out")
            output = e.stdout or ""
            if isinstance(output, bytes):
                output = output.decode(errors="replace")
            return output
        except FileNotFoundError as e:
            raise ProbeExecutionError("Ping command not found on system") from e
        except OSError as e:
            raise ProbeExecutionError(f"Ping to {target} failed to start: {e}") from e

        # Unanswered and TTL-exceeded probes exit non-zero; the text decides.
        return result.stdout
