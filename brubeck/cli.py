"""Entrypoint for the command line interface.

Sends one-off stats from shell scripts and cron jobs, e.g.

```
brubeck increment deploys --prefix myapp --host statsd.internal
brubeck time backup.duration 81234.5
```
"""

import logging

import typer

from brubeck.config import settings as config
from brubeck.config_logging import configure_logging
from brubeck.metrics import MetricsClient
from brubeck.transport import DropReason, LoggingTransport

logger = logging.getLogger(__name__)

metrics_settings = config.metrics

# Options
prefix_option = typer.Option(
    metrics_settings.prefix,
    "--prefix",
    help="Application identity segment of the stat name",
)

host_option = typer.Option(
    metrics_settings.host,
    "--host",
    help="Address of the statsd aggregator",
)

disabled_option = typer.Option(
    metrics_settings.disabled,
    "--disabled/--enabled",
    help="Do not send anything",
)

dev_logger_option = typer.Option(
    metrics_settings.dev_logger,
    "--dev-logger",
    help="Log the datagram instead of sending it",
)

count_option = typer.Option(1, "--count", "-n", help="Amount to change the counter by")

sample_rate_option = typer.Option(
    1.0,
    "--sample-rate",
    min=0.0,
    max=1.0,
    help="Probability that the stat is sent",
)

cli = typer.Typer(
    name="brubeck",
    help="Send stats to a brubeck statsd aggregator",
    no_args_is_help=True,
    add_completion=False,
)


@cli.callback()
def setup():
    """CLI Entrypoint"""
    configure_logging()


def _log_drop(reason: DropReason, line: str | None, exc: Exception | None) -> None:
    # A failed connect is already logged by the client.
    if reason is DropReason.NO_TRANSPORT:
        return
    logger.warning(f"Stat was not sent: {reason.value}", extra={"data": line})


def _client(prefix: str, host: str, disabled: bool, dev_logger: bool) -> MetricsClient:
    return MetricsClient(
        prefix=prefix,
        host=host,
        disabled=disabled,
        on_drop=_log_drop,
        transport=LoggingTransport() if dev_logger else None,
    )


@cli.command()
def increment(
    stat: str,
    count: int = count_option,
    sample_rate: float = sample_rate_option,
    prefix: str = prefix_option,
    host: str = host_option,
    disabled: bool = disabled_option,
    dev_logger: bool = dev_logger_option,
):
    """Increment a counter."""
    client = _client(prefix, host, disabled, dev_logger)
    client.increment_sampled(stat, count, sample_rate)
    client.close()


@cli.command()
def decrement(
    stat: str,
    count: int = count_option,
    sample_rate: float = sample_rate_option,
    prefix: str = prefix_option,
    host: str = host_option,
    disabled: bool = disabled_option,
    dev_logger: bool = dev_logger_option,
):
    """Decrement a counter."""
    client = _client(prefix, host, disabled, dev_logger)
    client.decrement_sampled(stat, count, sample_rate)
    client.close()


@cli.command()
def time(
    stat: str,
    milliseconds: float,
    sample_rate: float = sample_rate_option,
    prefix: str = prefix_option,
    host: str = host_option,
    disabled: bool = disabled_option,
    dev_logger: bool = dev_logger_option,
):
    """Send a timing in milliseconds."""
    client = _client(prefix, host, disabled, dev_logger)
    client.record_time_sampled(stat, milliseconds, sample_rate)
    client.close()


if __name__ == "__main__":
    cli()
