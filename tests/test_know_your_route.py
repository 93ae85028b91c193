"""Tests for the path diagnosis façade."""

import pytest
from conftest import echo_reply, ttl_exceeded

from know_your_route import DiagnosisResult, DiscoveryError, diagnose_path
from know_your_route.know_your_route import ensure_destination
from know_your_route.models import Hop

TARGET = "198.51.100.7"


class TestEnsureDestination:
    """Test destination repair of a discovered path."""

    def test_empty_path(self):
        assert ensure_destination([], TARGET) == [Hop(index=1, address=TARGET)]

    def test_path_without_destination(self):
        hops = [Hop(index=1, address="10.0.0.1"), Hop(index=4, address="10.0.0.4")]
        assert ensure_destination(hops, TARGET)[-1] == Hop(index=5, address=TARGET)

    def test_path_with_destination_unchanged(self):
        hops = [Hop(index=1, address="10.0.0.1"), Hop(index=2, address=TARGET)]
        assert ensure_destination(hops, TARGET) == hops


class TestDiagnosePath:
    """Test discovery followed by aggregation."""

    def test_full_path(self, make_executor, config):
        script = {
            (TARGET, 1): ttl_exceeded("10.0.0.1", TARGET),
            (TARGET, 2): echo_reply(TARGET, 30),
            ("10.0.0.1", None): [echo_reply("10.0.0.1", 1), echo_reply("10.0.0.1", 3)],
            (TARGET, None): [echo_reply(TARGET, 30), echo_reply(TARGET, 32)],
        }
        snapshots = []
        result = diagnose_path(
            TARGET, 2, snapshots.append, config=config, executor=make_executor(script)
        )

        assert isinstance(result, DiagnosisResult)
        assert result.target == TARGET
        assert [h.address for h in result.hops] == ["10.0.0.1", TARGET]
        assert [h.avg_ms for h in result.hops] == [2.0, 31.0]
        assert [s.cycle for s in snapshots] == [1, 2]
        assert [row.hop for row in snapshots[-1].hops] == [1, 2]

    def test_silent_path_gets_synthetic_destination(self, make_executor, config):
        """Nothing answers TTL probes, yet the destination answers direct pings."""
        executor = make_executor({(TARGET, None): [echo_reply(TARGET, 12)] * 3})
        result = diagnose_path(TARGET, 3, config=config, executor=executor)

        assert len(result.hops) == 1
        assert result.hops[0].hop == 1
        assert result.hops[0].address == TARGET
        assert result.hops[0].loss_percent == 0.0
        assert result.hops[0].avg_ms == 12.0
        assert executor.calls.count((TARGET, None)) == 3

    def test_destination_appended_after_last_hop(self, make_executor, config):
        script = {(TARGET, 3): ttl_exceeded("10.0.0.3", TARGET)}
        result = diagnose_path(TARGET, 1, config=config, executor=make_executor(script))

        assert [(h.hop, h.address) for h in result.hops] == [(3, "10.0.0.3"), (4, TARGET)]

    def test_discovery_failure_skips_statistics(self, make_executor, config):
        executor = make_executor({}, available=False)
        progress = []

        with pytest.raises(DiscoveryError):
            diagnose_path(TARGET, 2, progress.append, config=config, executor=executor)
        assert progress == []
        assert executor.calls == []

    def test_cycles_default_from_config(self, make_executor, config):
        config.statistics.cycles = 2
        snapshots = []
        diagnose_path(TARGET, on_progress=snapshots.append, config=config, executor=make_executor())

        assert [s.total_cycles for s in snapshots] == [2, 2]

    def test_result_dumps_to_plain_dicts(self, make_executor, config):
        result = diagnose_path(TARGET, 1, config=config, executor=make_executor())

        assert result.model_dump() == {
            "target": TARGET,
            "hops": [
                {
                    "hop": 1,
                    "address": TARGET,
                    "loss_percent": 100.0,
                    "avg_ms": 0.0,
                    "best_ms": 0.0,
                    "worst_ms": 0.0,
                    "stdev_ms": 0.0,
                }
            ],
        }

    def test_zero_cycles_rejected_before_discovery(self, make_executor, config):
        executor = make_executor()

        with pytest.raises(ValueError, match="cycles"):
            diagnose_path(TARGET, 0, config=config, executor=executor)
        assert executor.calls == []
