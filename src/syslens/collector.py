"""Collector service: accepts agent connections and displays their snapshots."""

import argparse
import logging
import socket
import sys
import threading

from syslens.errors import ShortReadError
from syslens.log import LOG_LEVELS, setup_logging
from syslens.protocol import read_snapshot
from syslens.sink import ConsoleSink, OutputSink

logger = logging.getLogger(__name__)

DEFAULT_HOST = ""  # All interfaces
DEFAULT_PORT = 8080
DEFAULT_BACKLOG = 3
ACCEPT_TIMEOUT = 0.5
ACCEPT_ERROR_DELAY = 0.05


def format_peer(address: object) -> str:
    """Format a socket peer address as host:port."""
    if isinstance(address, tuple) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address)


def handle_connection(conn: socket.socket, peer: str, sink: OutputSink) -> None:
    """
    Read one frame from an accepted connection and display it.

    The connection is closed on every path. Reading finishes before the
    sink lock is taken, so a slow peer never blocks other handlers' output.
    """
    with conn:
        try:
            with conn.makefile("rb") as stream:
                snapshot = read_snapshot(stream)
        except ShortReadError as exc:
            logger.warning("Dropping %s: %s", peer, exc)
            return
        except OSError as exc:
            logger.warning("Read from %s failed: %s", peer, exc)
            return

        logger.debug("Frame from %s decoded", peer)
        try:
            sink.display(snapshot, peer)
        except OSError:
            logger.exception("Display for %s failed", peer)


class CollectorService:
    """
    TCP collector that spawns one handler thread per connection.

    Handlers are fire-and-forget daemon threads; the accept loop never waits
    for them. The only state they share is the sink.
    """

    def __init__(
        self,
        sink: OutputSink,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        backlog: int = DEFAULT_BACKLOG,
        accept_timeout: float = ACCEPT_TIMEOUT,
    ) -> None:
        """
        Initialize the CollectorService.

        Args:
            sink: Shared output sink handed to every handler.
            host: Interface to bind. Empty string binds all interfaces.
            port: Port to listen on. 0 picks an ephemeral port.
            backlog: Pending connection queue length.
            accept_timeout: How often the accept loop checks for stop (seconds).
        """
        self._sink = sink
        self._host = host
        self._port = port
        self._backlog = backlog
        self._accept_timeout = accept_timeout
        self._server: socket.socket | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._serving = False

    @property
    def sink(self) -> OutputSink:
        """Get the shared output sink."""
        return self._sink

    @property
    def address(self) -> tuple[str, int]:
        """Get the bound (host, port), or the configured one before bind."""
        if self._server is not None:
            host, port = self._server.getsockname()[:2]
            return host, port
        return self._host, self._port

    @property
    def is_running(self) -> bool:
        """Check if the accept loop thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def bind(self) -> tuple[str, int]:
        """Create the listening socket if needed and return the bound address."""
        self._listen()
        return self.address

    def _listen(self) -> socket.socket:
        """Return the listening socket, creating it on first use."""
        if self._server is not None:
            return self._server

        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server.bind((self._host, self._port))
            server.listen(self._backlog)
            server.settimeout(self._accept_timeout)
        except OSError:
            server.close()
            raise
        self._server = server
        logger.info("Listening on %s", format_peer(self.address))
        return server

    def serve_forever(self) -> None:
        """
        Run the accept loop until stop() is called.

        A failed accept is logged and skipped; it never ends the loop.
        """
        server = self._listen()
        self._serving = True
        try:
            while not self._stop_event.is_set():
                try:
                    conn, address = server.accept()
                except TimeoutError:
                    continue
                except OSError:
                    if self._stop_event.is_set():
                        break
                    logger.exception("accept() failed")
                    self._stop_event.wait(ACCEPT_ERROR_DELAY)
                    continue
                self._dispatch(conn, format_peer(address))
        finally:
            server.close()
            self._server = None
            self._serving = False

    def _dispatch(self, conn: socket.socket, peer: str) -> None:
        """Start a detached handler thread that owns the connection."""
        logger.debug("Accepted %s", peer)
        try:
            handler = threading.Thread(
                target=handle_connection,
                args=(conn, peer, self._sink),
                daemon=True,
                name=f"Handler-{peer}",
            )
            handler.start()
        except RuntimeError:
            logger.exception("Cannot start handler for %s", peer)
            conn.close()

    def start(self) -> None:
        """Bind and start the accept loop in a background thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self.bind()
        self._thread = threading.Thread(
            target=self.serve_forever,
            daemon=True,
            name="CollectorService",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop accepting connections.

        In-flight handlers are not drained; they finish on their own.

        Args:
            timeout: How long to wait for the accept loop to exit (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        if self._server is not None and not self._serving:
            self._server.close()
            self._server = None


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="syslens-collector",
        description="Receive and display syslens snapshots.",
    )
    p.add_argument("--host", default=DEFAULT_HOST, help="Interface to bind (default: all)")
    p.add_argument("--port", type=int, default=DEFAULT_PORT)
    p.add_argument("--backlog", type=int, default=DEFAULT_BACKLOG)
    p.add_argument("--tui", action="store_true", help="Show reports in a live dashboard")
    p.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default="INFO")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the syslens collector."""
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    if args.tui:
        # Imported lazily so the console collector does not load textual
        from syslens.app import CollectorApp

        app = CollectorApp(host=args.host, port=args.port, backlog=args.backlog)
        app.run()
        return 0

    setup_logging(args.log_level)
    service = CollectorService(
        ConsoleSink(), host=args.host, port=args.port, backlog=args.backlog
    )
    try:
        _, port = service.bind()
    except OSError as exc:
        print(f"Cannot listen on port {args.port}: {exc}", file=sys.stderr)
        return 1

    print(f"Server listening on {port}... Waiting for client.", flush=True)
    try:
        service.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        service.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
