"""Data types shared by discovery, aggregation and the diagnosis façade."""

from __future__ import annotations

import math
import statistics
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict


def round_half_up(value: float) -> float:
    """Round to one decimal, ties away from zero on the exact binary value."""
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class ProbeResult(BaseModel):
    """Classification of a single probe.

    ``address`` is None for a timeout. ``error`` carries the reason when the
    probe process could not be executed at all; such a result is treated
    exactly like a timeout.
    """

    model_config = ConfigDict(frozen=True)

    address: str | None = None
    is_destination: bool = False
    rtt_ms: float | None = None
    error: str | None = None

    @property
    def is_timeout(self) -> bool:
        return self.address is None


class Hop(BaseModel):
    """A router discovered at a given TTL."""

    model_config = ConfigDict(frozen=True)

    index: int
    address: str | None = None


class HopReport(BaseModel):
    """Rounded per-hop statistics as reported to callers."""

    model_config = ConfigDict(frozen=True)

    hop: int
    address: str | None
    loss_percent: float
    avg_ms: float
    best_ms: float
    worst_ms: float
    stdev_ms: float


class HopRow(HopReport):
    """A snapshot row: a hop report plus the number of attempts so far."""

    sent: int


class CycleSnapshot(BaseModel):
    """Progress event emitted once per completed cycle."""

    model_config = ConfigDict(frozen=True)

    type: Literal["cycle_update"] = "cycle_update"
    cycle: int
    total_cycles: int
    hops: list[HopRow]


class DiagnosisResult(BaseModel):
    """Final outcome of a path diagnosis, destination last."""

    model_config = ConfigDict(frozen=True)

    target: str
    hops: list[HopReport]


@dataclass
class HopStatistics:
    """Running statistics for one hop.

    Owned by a single aggregation call; within a cycle only the task probing
    this hop writes to it.
    """

    hop: Hop
    sent: int = 0
    received: int = 0
    rtts: list[float] = field(default_factory=list)
    best: float = math.inf
    worst: float = 0.0
    sum: float = 0.0
    loss_percent: float = 0.0
    avg_ms: float = 0.0
    stdev_ms: float = 0.0

    def __post_init__(self) -> None:
        if self.is_dead:
            self.loss_percent = 100.0

    @property
    def is_dead(self) -> bool:
        return not self.hop.address

    def record(self, rtt_ms: float | None) -> None:
        """Account for one attempt; ``rtt_ms`` is None when it was lost."""
        self.sent += 1
        if rtt_ms is not None:
            self.received += 1
            self.rtts.append(rtt_ms)
            self.sum += rtt_ms
            self.best = min(self.best, rtt_ms)
            self.worst = max(self.worst, rtt_ms)
        self.recompute()

    def recompute(self) -> None:
        if self.is_dead:
            self.loss_percent = 100.0
            return
        self.avg_ms = self.sum / self.received if self.received else 0.0
        if self.sent:
            self.loss_percent = 100.0 * (self.sent - self.received) / self.sent
        # population stdev, zero under two samples
        self.stdev_ms = statistics.pstdev(self.rtts) if len(self.rtts) >= 2 else 0.0

    def _rounded(self) -> dict:
        return {
            "hop": self.hop.index,
            "address": self.hop.address,
            "loss_percent": round_half_up(self.loss_percent),
            "avg_ms": round_half_up(self.avg_ms),
            "best_ms": 0.0 if self.best == math.inf else round_half_up(self.best),
            "worst_ms": round_half_up(self.worst),
            "stdev_ms": round_half_up(self.stdev_ms),
        }

    def to_report(self) -> HopReport:
        return HopReport(**self._rounded())

    def to_row(self) -> HopRow:
        return HopRow(sent=self.sent, **self._rounded())
