"""
Unit Tests for SystemMetricsSampler

psutil.Process is replaced with a MagicMock so CPU and memory readings are
deterministic.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from qa_platform.infrastructure.monitoring.system_metrics import SystemMetricsSampler


@pytest.fixture
def process():
    proc = MagicMock()
    proc.memory_info.return_value = SimpleNamespace(rss=50_000_000, vms=200_000_000)
    proc.cpu_times.return_value = SimpleNamespace(user=1.0, system=0.5)
    return proc


@pytest.fixture
def sampler(metrics_registry, settings, process, clock):
    return SystemMetricsSampler(
        metrics_registry, interval_seconds=60, settings=settings, process=process, clock=clock
    )


def gauge(registry, name, labels=None):
    return registry.registry.get_sample_value(name, labels or {})


@pytest.mark.unit
class TestCollect:

    def test_memory_gauges(self, sampler, metrics_registry):
        sampler.collect()

        assert gauge(metrics_registry, "memory_usage_bytes", {"type": "rss"}) == 50_000_000
        assert gauge(metrics_registry, "memory_usage_bytes", {"type": "vms"}) == 200_000_000

    def test_cpu_percent_from_cpu_time_over_wall_time(self, sampler, metrics_registry, process, clock):
        # 1.0s of CPU over 2.0s of wall time -> 50%
        process.cpu_times.return_value = SimpleNamespace(user=2.0, system=0.5)
        clock.advance(2.0)

        sampler.collect()

        assert gauge(metrics_registry, "cpu_usage_percent") == pytest.approx(50.0)

    def test_no_cpu_sample_without_elapsed_time(self, sampler, metrics_registry):
        sampler.collect()
        assert gauge(metrics_registry, "cpu_usage_percent") == 0.0


@pytest.mark.unit
class TestLifecycle:

    async def test_start_samples_immediately(self, sampler, metrics_registry):
        await sampler.start()
        try:
            assert gauge(metrics_registry, "memory_usage_bytes", {"type": "rss"}) == 50_000_000
            assert sampler.is_running
        finally:
            await sampler.stop()

    async def test_start_is_idempotent(self, sampler, process):
        await sampler.start()
        first_task = sampler._task
        await sampler.start()

        assert sampler._task is first_task
        assert process.memory_info.call_count == 1

        await sampler.stop()

    async def test_stop_cancels_task(self, sampler):
        await sampler.start()
        task = sampler._task

        await sampler.stop()

        assert task.cancelled()
        assert not sampler.is_running

    async def test_stop_without_start_is_noop(self, sampler):
        await sampler.stop()

    async def test_background_loop_keeps_sampling(self, metrics_registry, settings, process):
        sampler = SystemMetricsSampler(
            metrics_registry, interval_seconds=0.01, settings=settings, process=process
        )
        await sampler.start()
        await asyncio.sleep(0.05)
        await sampler.stop()

        assert process.memory_info.call_count >= 2


@pytest.mark.unit
class TestConnectionsAndSnapshot:

    def test_connection_helpers(self, sampler, metrics_registry):
        sampler.set_active_connections(3)
        sampler.increment_active_connections()
        sampler.decrement_active_connections()
        sampler.decrement_active_connections()

        assert gauge(metrics_registry, "active_connections", {"type": "http"}) == 2

    def test_snapshot_fields(self, sampler, clock):
        clock.advance(12.5)

        snapshot = sampler.get_system_snapshot()

        assert snapshot["memory"] == {"rss": 50_000_000, "vms": 200_000_000}
        assert snapshot["cpu"] == {"user": 1.0, "system": 0.5}
        assert snapshot["uptime_seconds"] == 12.5
        for field in ("platform", "python_version", "cpu_count", "total_memory", "free_memory", "load_average"):
            assert field in snapshot
