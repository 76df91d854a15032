"""Output sinks the collector renders decoded snapshots to."""

import sys
import threading
import time
from dataclasses import dataclass, field
from queue import Queue
from typing import TextIO

from syslens.models import Snapshot

BANNER = (
    "====================================\n"
    "     SYSLENS SYSTEM MONITOR v1.0    \n"
    "====================================\n"
)


@dataclass(slots=True, frozen=True)
class Report:
    """A snapshot as received by the collector."""

    snapshot: Snapshot
    peer: str | None = None
    received_at: float = field(default_factory=time.time)


class OutputSink:
    """
    Shared destination for decoded snapshots.

    Every handler gets a reference to the same sink. The sink owns its lock,
    so one display block is never interleaved with another.
    """

    def __init__(self) -> None:
        """Initialize the OutputSink."""
        self._lock = threading.Lock()
        self._displayed = 0

    @property
    def displayed(self) -> int:
        """Number of snapshots rendered so far."""
        with self._lock:
            return self._displayed

    def display(self, snapshot: Snapshot, peer: str | None = None) -> None:
        """Render one snapshot while holding the sink lock."""
        report = Report(snapshot=snapshot, peer=peer)
        with self._lock:
            self._render(report)
            self._displayed += 1

    def _render(self, report: Report) -> None:
        raise NotImplementedError


class ConsoleSink(OutputSink):
    """Sink that prints a banner and the snapshot line to a text stream."""

    def __init__(self, stream: TextIO | None = None) -> None:
        """
        Initialize the ConsoleSink.

        Args:
            stream: Where to write. Defaults to sys.stdout at render time.
        """
        super().__init__()
        self._stream = stream

    def _render(self, report: Report) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        # Written piecewise; the lock keeps the block contiguous
        for line in BANNER.splitlines(keepends=True):
            stream.write(line)
        stream.write(f"{report.snapshot}\n")
        stream.flush()


class QueueSink(OutputSink):
    """Sink that hands reports to another thread through a queue."""

    def __init__(self, queue: Queue[Report]) -> None:
        """
        Initialize the QueueSink.

        Args:
            queue: Thread-safe queue the consumer drains.
        """
        super().__init__()
        self._queue = queue

    def _render(self, report: Report) -> None:
        self._queue.put(report)
