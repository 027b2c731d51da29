"""Datagram transports that carry formatted stat lines to the aggregator."""

import logging
import socket
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

STATSD_PORT = 8125
CONNECT_TIMEOUT_SEC = 5.0


def _resolve(host: str, port: int, timeout: float) -> list[tuple[Any, ...]]:
    """Look up the datagram address of `host` within `timeout` seconds.

    `getaddrinfo` has no deadline of its own, so it runs on a worker thread.
    A lookup that outlives the timeout is abandoned, not cancelled.

    Raises:
        TimeoutError if the lookup does not finish in time.
    """
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="brubeck-resolve")
    try:
        future = executor.submit(socket.getaddrinfo, host, port, type=socket.SOCK_DGRAM)
        return future.result(timeout=timeout)
    finally:
        executor.shutdown(wait=False)


class DropReason(str, Enum):
    """Enum for the reasons a stat line never reached the network."""

    CONNECT = "connect"
    NO_TRANSPORT = "no_transport"
    SEND = "send"


# Diagnostic callback invoked with the reason, the affected line (if any) and the
# exception that caused the drop (if any).
DropHook = Callable[[DropReason, str | None, Exception | None], None]


class Transport(Protocol):
    """Protocol for the write-only byte sink that a MetricsClient owns."""

    def send(self, data: bytes) -> None:  # pragma: no cover
        """Write one datagram."""
        ...

    def close(self) -> None:  # pragma: no cover
        """Release any resources held by the transport."""
        ...


class UDPTransport:
    """A connected UDP socket. Sends never block; a full socket buffer raises
    `BlockingIOError` like any other send failure.
    """

    sock: socket.socket

    def __init__(
        self,
        host: str,
        port: int = STATSD_PORT,
        timeout: float = CONNECT_TIMEOUT_SEC,
    ) -> None:
        """Resolve `host` and connect a datagram socket to it. Resolution and
        connecting share the `timeout` budget.

        Raises:
            OSError if the address cannot be resolved or the socket cannot be
            connected within `timeout` seconds.
            ValueError (UnicodeError) if `host` is not a valid IDNA name.
        """
        deadline = time.monotonic() + timeout
        family, socktype, proto, _, sockaddr = _resolve(host, port, timeout)[0]
        sock = socket.socket(family, socktype, proto)
        try:
            sock.settimeout(max(deadline - time.monotonic(), 0.0))
            sock.connect(sockaddr)
            sock.setblocking(False)
        except OSError:
            sock.close()
            raise
        self.sock = sock

    def send(self, data: bytes) -> None:
        """Write `data` as a single datagram."""
        self.sock.send(data)

    def close(self) -> None:
        """Close the socket."""
        self.sock.close()


class LoggingTransport:
    """Transport that logs datagrams instead of writing them to a socket.
    The purpose is to make it easy to see the metrics in development environments.
    """

    def send(self, data: bytes) -> None:
        """Log the datagram at debug level."""
        logger.debug("sending metrics", extra={"data": data.decode("utf8")})

    def close(self) -> None:
        """Nothing to release."""
