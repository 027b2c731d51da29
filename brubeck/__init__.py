"""Statsd client for the brubeck metrics aggregator."""

from brubeck.formatting import StatKind, format_stat
from brubeck.metrics import MetricsClient, get_metrics_client
from brubeck.transport import DropReason

__all__ = [
    "DropReason",
    "MetricsClient",
    "StatKind",
    "format_stat",
    "get_metrics_client",
]
