"""Snapshot providers for the syslens agent."""

import logging
from typing import Protocol

import psutil

from syslens.models import Snapshot

logger = logging.getLogger(__name__)

# Blocking window between the two CPU counter reads (seconds)
SAMPLE_INTERVAL = 0.1

UNAVAILABLE = -1


class SnapshotProvider(Protocol):
    """Anything that can produce a Snapshot on demand."""

    def snapshot(self) -> Snapshot: ...


class PsutilProvider:
    """
    Provider that samples the local machine using psutil.

    psutil hides the platform differences (Linux /proc, macOS Mach host
    statistics). A metric that cannot be read is reported as -1 instead of
    failing the whole snapshot.
    """

    def __init__(self, sample_interval: float = SAMPLE_INTERVAL) -> None:
        """
        Initialize the PsutilProvider.

        Args:
            sample_interval: How long to wait between CPU counter reads.
        """
        self._sample_interval = max(0.0, sample_interval)

    @property
    def sample_interval(self) -> float:
        """Get the CPU sampling window."""
        return self._sample_interval

    def snapshot(self) -> Snapshot:
        """Collect a snapshot of the current system state."""
        return Snapshot(
            cpu_load=self._cpu_load(),
            mem_available=self._mem_available(),
            processes_active=self._processes_active(),
        )

    def _cpu_load(self) -> float:
        try:
            # Blocks for sample_interval, comparing two readings
            return float(psutil.cpu_percent(interval=self._sample_interval))
        except (psutil.Error, OSError):
            logger.warning("CPU load unavailable", exc_info=True)
            return float(UNAVAILABLE)

    def _mem_available(self) -> int:
        try:
            return psutil.virtual_memory().available // (1024 * 1024)
        except (psutil.Error, OSError):
            logger.warning("available memory unavailable", exc_info=True)
            return UNAVAILABLE

    def _processes_active(self) -> int:
        try:
            return len(psutil.pids())
        except (psutil.Error, OSError):
            logger.warning("process count unavailable", exc_info=True)
            return UNAVAILABLE


class StaticProvider:
    """Provider that always returns the same snapshot."""

    def __init__(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot

    def snapshot(self) -> Snapshot:
        return self._snapshot
