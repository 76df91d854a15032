"""
Wire codec for syslens frames.

A frame is 10 bytes in network byte order, no header and no padding:

    offset 0  uint16  cpu_load * 10 (fixed point, one decimal digit)
    offset 2  uint32  mem_available in MB
    offset 6  uint32  processes_active

One frame is sent per TCP connection; the connection boundary delimits it.
"""

import socket
import struct
from typing import BinaryIO

from syslens.errors import FrameError, ShortReadError
from syslens.models import Snapshot

FRAME = struct.Struct(">HII")
FRAME_SIZE = FRAME.size  # 10

_CPU_FIELD = struct.Struct(">H")
_U32_FIELD = struct.Struct(">I")


def encode_cpu(cpu_load: float) -> int:
    """
    Convert a CPU percentage to its 16-bit fixed-point wire value.

    Values past 6553.5 wrap modulo 65536 rather than saturating, and
    negative sentinels wrap the same way.
    """
    return round(cpu_load * 10) & 0xFFFF


def encode_snapshot(snapshot: Snapshot) -> bytes:
    """Encode a snapshot into exactly FRAME_SIZE bytes."""
    return FRAME.pack(
        encode_cpu(snapshot.cpu_load),
        snapshot.mem_available & 0xFFFFFFFF,
        snapshot.processes_active & 0xFFFFFFFF,
    )


def decode_snapshot(frame: bytes) -> Snapshot:
    """
    Decode a complete frame.

    Raises:
        ShortReadError: fewer than FRAME_SIZE bytes were given.
        FrameError: more than FRAME_SIZE bytes were given.
    """
    if len(frame) < FRAME_SIZE:
        raise ShortReadError(FRAME_SIZE, len(frame))
    if len(frame) > FRAME_SIZE:
        raise FrameError(f"frame too long: {len(frame)} bytes")
    cpu_fixed, mem_available, processes_active = FRAME.unpack(frame)
    return Snapshot(
        cpu_load=cpu_fixed / 10.0,
        mem_available=mem_available,
        processes_active=processes_active,
    )


def _read_exact(stream: BinaryIO, size: int, already: int) -> bytes:
    """Read exactly size bytes or raise ShortReadError on EOF."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            raise ShortReadError(FRAME_SIZE, already + size - remaining)
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_snapshot(stream: BinaryIO) -> Snapshot:
    """
    Read one frame from a binary stream, field by field.

    The stream is typically ``conn.makefile("rb")``. Blocks until the whole
    frame has arrived.

    Raises:
        ShortReadError: the stream hit EOF before FRAME_SIZE bytes.
    """
    (cpu_fixed,) = _CPU_FIELD.unpack(_read_exact(stream, _CPU_FIELD.size, 0))
    (mem_available,) = _U32_FIELD.unpack(_read_exact(stream, _U32_FIELD.size, 2))
    (processes_active,) = _U32_FIELD.unpack(_read_exact(stream, _U32_FIELD.size, 6))
    return Snapshot(
        cpu_load=cpu_fixed / 10.0,
        mem_available=mem_available,
        processes_active=processes_active,
    )


def write_snapshot(sock: socket.socket, snapshot: Snapshot) -> None:
    """Send one encoded frame in a single logical write."""
    sock.sendall(encode_snapshot(snapshot))
