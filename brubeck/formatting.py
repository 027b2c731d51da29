"""Serialization of stats into the statsd line protocol.

Every line has the form ``<root>.<prefix>.<stat>:<value>|<unit>``. Timers and
counters live under different roots so the aggregator can tell the series
apart by name alone.
"""

from enum import Enum

NAMESPACE_ROOT = "brubeck.stats_d"
TIMER_NAMESPACE_ROOT = f"{NAMESPACE_ROOT}.timers"


class StatKind(str, Enum):
    """Enum for the supported stat types, valued by their statsd unit tag."""

    COUNTER = "c"
    TIMER = "ms"

    @property
    def namespace_root(self) -> str:
        """Return the namespace root that stats of this kind are reported under."""
        return TIMER_NAMESPACE_ROOT if self is StatKind.TIMER else NAMESPACE_ROOT


def format_stat(prefix: str, stat: str, kind: StatKind, value: int | float) -> str:
    """Build a single statsd line for `stat`.

    Counters render `value` as a decimal integer, timers as a fixed point
    number with two fractional digits. `stat` is not escaped, so names holding
    `:` or `|` produce a corrupt line.
    """
    name = ".".join([kind.namespace_root, prefix, stat])
    match kind:
        case StatKind.TIMER:
            magnitude = f"{value:.2f}"
        case StatKind.COUNTER:
            magnitude = f"{value:d}"
    return f"{name}:{magnitude}|{kind.value}"
