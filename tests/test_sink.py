"""Tests for the collector output sinks."""

import io
import threading
from queue import Queue

import pytest

from syslens.models import Snapshot
from syslens.sink import BANNER, ConsoleSink, OutputSink, QueueSink, Report

EXAMPLE = Snapshot(cpu_load=37.5, mem_available=2048, processes_active=312)


class TestConsoleSink:
    """Tests for ConsoleSink."""

    def test_display_block(self):
        """Test a display block is the banner plus the snapshot line."""
        output = io.StringIO()
        sink = ConsoleSink(output)

        sink.display(EXAMPLE, "127.0.0.1:5000")

        assert output.getvalue() == (
            "====================================\n"
            "     SYSLENS SYSTEM MONITOR v1.0    \n"
            "====================================\n"
            "[CPU Load: 37.5% | RAM Available: 2048MB | Active Processes: 312]\n"
        )

    def test_displayed_counter(self):
        """Test the sink counts rendered blocks."""
        sink = ConsoleSink(io.StringIO())

        sink.display(EXAMPLE)
        sink.display(EXAMPLE)

        assert sink.displayed == 2

    def test_each_sink_owns_its_lock(self):
        """Test sinks do not share a lock."""
        first = ConsoleSink(io.StringIO())
        second = ConsoleSink(io.StringIO())

        assert first._lock is not second._lock

    def test_concurrent_display_not_interleaved(self):
        """Test blocks from many threads never interleave."""
        output = io.StringIO()
        sink = ConsoleSink(output)
        start = threading.Barrier(20)

        def worker(n: int) -> None:
            start.wait()
            for _ in range(10):
                sink.display(Snapshot(float(n), n, n))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        lines = output.getvalue().splitlines(keepends=True)
        banner = BANNER.splitlines(keepends=True)
        assert len(lines) == 200 * 4
        for i in range(0, len(lines), 4):
            assert lines[i : i + 3] == banner
            assert lines[i + 3].startswith("[CPU Load: ")


class TestQueueSink:
    """Tests for QueueSink."""

    def test_report_queued(self):
        """Test a displayed snapshot is queued as a report."""
        queue: Queue[Report] = Queue()
        sink = QueueSink(queue)

        sink.display(EXAMPLE, "10.0.0.2:4242")

        report = queue.get_nowait()
        assert report.snapshot == EXAMPLE
        assert report.peer == "10.0.0.2:4242"
        assert report.received_at > 0
        assert sink.displayed == 1


def test_base_sink_is_abstract():
    """Test OutputSink requires a concrete renderer."""
    with pytest.raises(NotImplementedError):
        OutputSink().display(EXAMPLE)
