"""Data models for syslens."""

from dataclasses import dataclass

# Wrapped wire values of the -1 "not collected" sentinel.
UNAVAILABLE_U32 = 0xFFFFFFFF
UNAVAILABLE_CPU = ((-10) & 0xFFFF) / 10.0  # 6552.6


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Immutable point-in-time resource snapshot of one machine."""

    cpu_load: float  # Percentage, one decimal digit survives the wire
    mem_available: int  # Megabytes
    processes_active: int

    @property
    def cpu_known(self) -> bool:
        """Check if the CPU load was actually sampled."""
        return 0.0 <= self.cpu_load and self.cpu_load != UNAVAILABLE_CPU

    @property
    def mem_known(self) -> bool:
        """Check if the available memory was actually sampled."""
        return 0 <= self.mem_available < UNAVAILABLE_U32

    @property
    def processes_known(self) -> bool:
        """Check if the process count was actually sampled."""
        return 0 <= self.processes_active < UNAVAILABLE_U32

    def __str__(self) -> str:
        cpu = f"{self.cpu_load:.1f}%" if self.cpu_known else "n/a"
        mem = f"{self.mem_available}MB" if self.mem_known else "n/a"
        procs = str(self.processes_active) if self.processes_known else "n/a"
        return f"[CPU Load: {cpu} | RAM Available: {mem} | Active Processes: {procs}]"
