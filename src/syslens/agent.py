"""Sender agent: pushes one snapshot to a collector and exits."""

import argparse
import logging
import socket
import sys

from syslens.errors import AgentConnectionError
from syslens.log import LOG_LEVELS, setup_logging
from syslens.models import Snapshot
from syslens.protocol import write_snapshot
from syslens.provider import PsutilProvider, SnapshotProvider

logger = logging.getLogger(__name__)


def send_snapshot(
    host: str,
    port: int,
    provider: SnapshotProvider,
    timeout: float | None = None,
) -> Snapshot:
    """
    Deliver exactly one snapshot to host:port.

    Connects first and only then samples the provider, so a failed connect
    costs no sampling time. The socket is closed on every exit path.
    There is no retry.

    Args:
        host: Collector address.
        port: Collector port.
        provider: Source of the snapshot to send.
        timeout: Optional socket timeout for connect and send (seconds).

    Returns:
        The snapshot that was sent.

    Raises:
        AgentConnectionError: the connection could not be established.
        OSError: the connection broke while sending.
    """
    try:
        sock = socket.create_connection((host, port), timeout=timeout)
    except OSError as exc:
        raise AgentConnectionError(host, port, exc) from exc

    with sock:
        snapshot = provider.snapshot()
        write_snapshot(sock, snapshot)

    logger.info("Sent %s to %s:%d", snapshot, host, port)
    return snapshot


def _port(value: str) -> int:
    port = int(value)
    if not 0 < port < 65536:
        raise argparse.ArgumentTypeError(f"port out of range: {value}")
    return port


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="syslens-agent",
        description="Send one resource snapshot to a syslens collector.",
    )
    p.add_argument("host", help="Collector IP address or hostname")
    p.add_argument("port", type=_port, help="Collector port")
    p.add_argument("--timeout", type=float, default=None, help="Socket timeout in seconds")
    p.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default="WARNING")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the syslens agent."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(args.log_level)

    try:
        send_snapshot(args.host, args.port, PsutilProvider(), timeout=args.timeout)
    except AgentConnectionError as exc:
        print(f"Connection Failed. Did you start the collector first? {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Send failed: {exc}", file=sys.stderr)
        return 1

    print("Message sent!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
