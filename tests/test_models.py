"""Tests for syslens data models."""

from syslens.models import UNAVAILABLE_CPU, UNAVAILABLE_U32, Snapshot


def test_snapshot_creation():
    """Test Snapshot dataclass creation."""
    snapshot = Snapshot(cpu_load=37.5, mem_available=2048, processes_active=312)

    assert snapshot.cpu_load == 37.5
    assert snapshot.mem_available == 2048
    assert snapshot.processes_active == 312


def test_snapshot_is_frozen():
    """Test that Snapshot is immutable (frozen)."""
    snapshot = Snapshot(cpu_load=1.0, mem_available=1, processes_active=1)

    try:
        snapshot.cpu_load = 99.0
        raise AssertionError("Should have raised FrozenInstanceError")
    except AttributeError:
        pass  # Expected behavior for frozen dataclass


def test_snapshot_uses_slots():
    """Test that Snapshot uses __slots__ for memory efficiency."""
    snapshot = Snapshot(cpu_load=1.0, mem_available=1, processes_active=1)

    assert not hasattr(snapshot, "__dict__")


def test_snapshot_equality():
    """Test snapshots with equal fields compare equal."""
    assert Snapshot(12.3, 4, 5) == Snapshot(12.3, 4, 5)
    assert Snapshot(12.3, 4, 5) != Snapshot(12.4, 4, 5)


def test_snapshot_display_line():
    """Test the rendered display line."""
    snapshot = Snapshot(cpu_load=37.5, mem_available=2048, processes_active=312)

    assert str(snapshot) == (
        "[CPU Load: 37.5% | RAM Available: 2048MB | Active Processes: 312]"
    )


def test_snapshot_display_one_decimal():
    """Test CPU load is shown with exactly one decimal digit."""
    snapshot = Snapshot(cpu_load=40.0, mem_available=0, processes_active=0)

    assert "CPU Load: 40.0%" in str(snapshot)


class TestUnavailableFields:
    """Tests for sentinel (not collected) values."""

    def test_negative_values_are_unknown(self):
        """Test negative sentinels from a provider render as n/a."""
        snapshot = Snapshot(cpu_load=-1.0, mem_available=-1, processes_active=-1)

        assert not snapshot.cpu_known
        assert not snapshot.mem_known
        assert not snapshot.processes_known
        assert str(snapshot) == (
            "[CPU Load: n/a | RAM Available: n/a | Active Processes: n/a]"
        )

    def test_wrapped_sentinels_are_unknown(self):
        """Test sentinels that crossed the wire render as n/a."""
        snapshot = Snapshot(
            cpu_load=UNAVAILABLE_CPU,
            mem_available=UNAVAILABLE_U32,
            processes_active=UNAVAILABLE_U32,
        )

        assert not snapshot.cpu_known
        assert not snapshot.mem_known
        assert not snapshot.processes_known

    def test_regular_values_are_known(self):
        """Test ordinary values are treated as collected."""
        snapshot = Snapshot(cpu_load=0.0, mem_available=0, processes_active=0)

        assert snapshot.cpu_known
        assert snapshot.mem_known
        assert snapshot.processes_known

    def test_unavailable_cpu_value(self):
        """Test the wrapped CPU sentinel is -10 tenths modulo 65536."""
        assert UNAVAILABLE_CPU == 6552.6
