"""
System Metrics Sampler

Periodically samples process memory and CPU usage into the metrics
registry gauges:

    memory_usage_bytes{type="rss"|"vms"}
    cpu_usage_percent = (delta user + system CPU time) / delta wall time * 100

The first sample is taken immediately on start(); afterwards every
SYSTEM_METRICS_INTERVAL_SECONDS on a background asyncio task.

Author: Platform Team
Date: 2025-12-15
"""

import asyncio
import platform
import sys
import time
from collections.abc import Callable
from typing import Any

import psutil

from qa_platform.core.config.settings import Settings, get_settings
from qa_platform.core.logging.logger import get_logger
from qa_platform.infrastructure.monitoring.metrics_registry import (
    MetricsRegistry,
    get_metrics_registry,
)

logger = get_logger(__name__)


class SystemMetricsSampler:
    """
    Background sampler for process-level system metrics.

    Usage:
        sampler = SystemMetricsSampler(metrics)
        await sampler.start()
        ...
        await sampler.stop()
    """

    def __init__(
        self,
        registry: MetricsRegistry | None = None,
        interval_seconds: float | None = None,
        settings: Settings | None = None,
        process: psutil.Process | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = settings or get_settings()
        self._registry = registry or get_metrics_registry()
        self._interval = interval_seconds or settings.metrics.SYSTEM_METRICS_INTERVAL_SECONDS
        self._process = process or psutil.Process()
        self._clock = clock
        self._task: asyncio.Task | None = None
        self._started_at = clock()

        cpu = self._process.cpu_times()
        self._last_cpu_seconds = cpu.user + cpu.system
        self._last_wall = clock()

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Sample once, then keep sampling in the background. No-op if running."""
        if self.is_running:
            return
        self.collect()
        self._task = asyncio.create_task(self._run(), name="system-metrics-sampler")
        logger.info("System metrics sampler started", stage="M.SYS", interval=self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("System metrics sampler stopped", stage="M.SYS")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.collect()
            except (psutil.Error, OSError) as e:
                logger.error("System metrics collection failed", stage="M.SYS", error=str(e))

    def collect(self) -> None:
        """Take one sample and write it to the gauges."""
        memory = self._process.memory_info()
        self._registry.set_memory_usage("rss", memory.rss)
        self._registry.set_memory_usage("vms", memory.vms)

        cpu = self._process.cpu_times()
        cpu_seconds = cpu.user + cpu.system
        now = self._clock()

        elapsed = now - self._last_wall
        if elapsed > 0:
            percent = (cpu_seconds - self._last_cpu_seconds) / elapsed * 100
            self._registry.set_cpu_usage(max(percent, 0.0))

        self._last_cpu_seconds = cpu_seconds
        self._last_wall = now

    # -------------------------------------------------------------------------
    # Connection gauges
    # -------------------------------------------------------------------------

    def set_active_connections(self, count: int, connection_type: str = "http") -> None:
        self._registry.set_active_connections(count, connection_type)

    def increment_active_connections(self, connection_type: str = "http") -> None:
        self._registry.increment_connections(connection_type)

    def decrement_active_connections(self, connection_type: str = "http") -> None:
        self._registry.decrement_connections(connection_type)

    # -------------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------------

    def get_system_snapshot(self) -> dict[str, Any]:
        """
        Point-in-time view of process and host resources.

        Returns:
            Dict with memory, cpu times, uptime, platform, python version,
            cpu count, total/available memory and load average
        """
        memory = self._process.memory_info()
        cpu = self._process.cpu_times()
        virtual = psutil.virtual_memory()
        try:
            load_average = list(psutil.getloadavg())
        except (AttributeError, OSError):
            load_average = []

        return {
            "memory": {"rss": memory.rss, "vms": memory.vms},
            "cpu": {"user": cpu.user, "system": cpu.system},
            "uptime_seconds": round(self._clock() - self._started_at, 3),
            "platform": platform.system().lower(),
            "python_version": sys.version.split()[0],
            "cpu_count": psutil.cpu_count(),
            "total_memory": virtual.total,
            "free_memory": virtual.available,
            "load_average": load_average,
        }
