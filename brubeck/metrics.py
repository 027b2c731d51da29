"""Client class for recording and sending StatsD metrics to brubeck."""

import inspect
import logging
import time
from contextlib import contextmanager
from functools import cache
from typing import Any, Callable, Iterator

from wrapt import decorator

from brubeck import sampling
from brubeck.config import settings
from brubeck.formatting import StatKind, format_stat
from brubeck.sampling import RandomSource
from brubeck.transport import (
    DropHook,
    DropReason,
    LoggingTransport,
    Transport,
    UDPTransport,
)

logger = logging.getLogger(__name__)


class MetricsClient:
    """Fire-and-forget statsd client.

    Counters and timers are formatted into the statsd line protocol and written
    as one datagram each. Delivery is best effort: nothing raised by the
    transport ever reaches the caller. Failures can be observed through the
    optional `on_drop` hook.

    A disabled client never opens a socket and every emission returns
    immediately.

    Not intended to be constructed more than once per application; use
    `get_metrics_client()`.
    """

    prefix: str
    host: str
    disabled: bool
    transport: Transport | None
    rng: RandomSource
    on_drop: DropHook | None

    def __init__(
        self,
        prefix: str,
        host: str,
        disabled: bool = False,
        *,
        rng: RandomSource | None = None,
        on_drop: DropHook | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.prefix = prefix
        self.host = host
        self.disabled = disabled
        self.rng = rng if rng is not None else sampling.DEFAULT_RANDOM_SOURCE
        self.on_drop = on_drop
        self.transport = None
        if not disabled:
            self.transport = transport if transport is not None else self._connect()

    @property
    def enabled(self) -> bool:
        """Return True if the client sends stats."""
        return not self.disabled

    def _connect(self) -> Transport | None:
        try:
            return UDPTransport(self.host)
        except (OSError, ValueError) as exc:
            logger.warning(
                f"Unable to connect to statsd server at {self.host}, stats will be dropped",
                extra={"host": self.host, "error": str(exc)},
            )
            self._report_drop(DropReason.CONNECT, None, exc)
            return None

    def _report_drop(
        self, reason: DropReason, line: str | None, exc: Exception | None
    ) -> None:
        if self.on_drop is None:
            return
        try:
            self.on_drop(reason, line, exc)
        except Exception:
            logger.exception("Metrics drop hook raised an exception")

    def close(self) -> None:
        """Close the transport. Later emissions are dropped."""
        transport, self.transport = self.transport, None
        if transport is None:
            return
        try:
            transport.close()
        except OSError as exc:
            logger.debug(f"Error closing metrics transport: {exc}")

    def format_stat(self, stat: str, kind: StatKind, value: int | float) -> str:
        """Format `stat` under this client's prefix."""
        return format_stat(self.prefix, stat, kind, value)

    def sampled(self, sample_rate: float) -> bool:
        """Return True if a stat observed at `sample_rate` should be sent."""
        return sampling.sampled(sample_rate, self.rng)

    def rescale_count(self, count: int, sample_rate: float) -> int:
        """Inflate `count` for a sampled counter; see `sampling.rescale_count`."""
        return sampling.rescale_count(count, sample_rate, self.rng)

    def _send(self, stat: str, kind: StatKind, value: int | float) -> None:
        line = None
        try:
            line = self.format_stat(stat, kind, value)
            if self.transport is None:
                self._report_drop(DropReason.NO_TRANSPORT, line, None)
                return
            self.transport.send(line.encode("utf8"))
        except Exception as exc:
            logger.debug(f"Dropped stat {stat}: {exc}", extra={"data": line})
            self._report_drop(DropReason.SEND, line, exc)

    def _selected(self, stat: str, sample_rate: float) -> bool:
        try:
            return self.sampled(sample_rate)
        except Exception as exc:
            logger.debug(f"Dropped stat {stat}: {exc}")
            self._report_drop(DropReason.SEND, None, exc)
            return False

    def _sampled_count(self, stat: str, count: int, sample_rate: float) -> int | None:
        """Return the rescaled count to send, or None if the stat is skipped."""
        if not self._selected(stat, sample_rate):
            return None
        try:
            return self.rescale_count(count, sample_rate)
        except Exception as exc:
            logger.debug(f"Dropped stat {stat}: {exc}")
            self._report_drop(DropReason.SEND, None, exc)
            return None

    def increment(self, stat: str) -> None:
        """Increment a counter by one."""
        self.increment_by(stat, 1)

    def decrement(self, stat: str) -> None:
        """Decrement a counter by one."""
        self.decrement_by(stat, 1)

    def increment_by(self, stat: str, count: int) -> None:
        """Increment a counter by `count`."""
        if self.disabled:
            return
        self._send(stat, StatKind.COUNTER, count)

    def decrement_by(self, stat: str, count: int) -> None:
        """Decrement a counter by `count`."""
        if self.disabled:
            return
        self._send(stat, StatKind.COUNTER, -count)

    def increment_sampled(self, stat: str, count: int, sample_rate: float) -> None:
        """Increment a counter by `count`, sending only a `sample_rate` share of
        calls. Sent values are inflated so the aggregated total stays the same.
        """
        if self.disabled:
            return
        sampled_count = self._sampled_count(stat, count, sample_rate)
        if sampled_count is not None:
            self.increment_by(stat, sampled_count)

    def decrement_sampled(self, stat: str, count: int, sample_rate: float) -> None:
        """Decrement a counter by `count` with sampling between 0 and 1."""
        if self.disabled:
            return
        sampled_count = self._sampled_count(stat, count, sample_rate)
        if sampled_count is not None:
            self.decrement_by(stat, sampled_count)

    def record_time(self, stat: str, milliseconds: float) -> None:
        """Send a timing in milliseconds."""
        if self.disabled:
            return
        self._send(stat, StatKind.TIMER, milliseconds)

    def record_time_sampled(self, stat: str, milliseconds: float, sample_rate: float) -> None:
        """Send a timing in milliseconds with sampling between 0 and 1.
        Timings are point observations and are sent unmodified.
        """
        if self.disabled:
            return
        if self._selected(stat, sample_rate):
            self.record_time(stat, milliseconds)

    @contextmanager
    def timer(self, stat: str, sample_rate: float = 1.0) -> Iterator[None]:
        """Time the body of a `with` block. The timing is sent even if the body
        raises.
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.record_time_sampled(stat, elapsed_ms, sample_rate)

    def timed(self, stat: str, sample_rate: float = 1.0) -> Callable:
        """Return a decorator that times every call of the wrapped function,
        awaiting it first if it is a coroutine function.
        """

        @decorator
        def wrapper(wrapped: Callable, instance: Any, args: tuple, kwargs: dict) -> Any:
            if inspect.iscoroutinefunction(wrapped):

                async def _timed_coroutine() -> Any:
                    with self.timer(stat, sample_rate):
                        return await wrapped(*args, **kwargs)

                return _timed_coroutine()

            with self.timer(stat, sample_rate):
                return wrapped(*args, **kwargs)

        return wrapper


@cache
def get_metrics_client() -> MetricsClient:
    """Instantiate and memoize the metrics client from settings."""
    transport = LoggingTransport() if settings.metrics.dev_logger else None
    return MetricsClient(
        prefix=settings.metrics.prefix,
        host=settings.metrics.host,
        disabled=settings.metrics.disabled,
        transport=transport,
    )
