# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""Module for test configurations for the unit test directory."""

from itertools import cycle
from typing import Any

import pytest
from pytest_mock import MockerFixture

from brubeck.metrics import MetricsClient
from brubeck.transport import UDPTransport

TEST_PREFIX = "appname"
TEST_HOST = "statsd.i.wish.com"


class FixedRandom:
    """Random source that hands out the given values in a loop."""

    def __init__(self, *values: float) -> None:
        self._values = cycle(values)
        self.calls = 0

    def random(self) -> float:
        """Return the next canned value."""
        self.calls += 1
        return next(self._values)


@pytest.fixture(name="transport_mock")
def fixture_transport_mock(mocker: MockerFixture) -> Any:
    """Return mock for the UDP transport."""
    return mocker.MagicMock(spec_set=UDPTransport)


@pytest.fixture(name="drop_hook")
def fixture_drop_hook(mocker: MockerFixture) -> Any:
    """Return mock for the drop diagnostic hook."""
    return mocker.MagicMock()


@pytest.fixture(name="metrics_client")
def fixture_metrics_client(transport_mock, drop_hook) -> MetricsClient:
    """Return an enabled metrics client writing to a mock transport."""
    return MetricsClient(
        TEST_PREFIX,
        TEST_HOST,
        transport=transport_mock,
        on_drop=drop_hook,
    )


@pytest.fixture(name="disabled_client")
def fixture_disabled_client() -> MetricsClient:
    """Return a disabled metrics client."""
    return MetricsClient(TEST_PREFIX, TEST_HOST, True)


@pytest.fixture(name="fixed_random")
def fixture_fixed_random() -> type[FixedRandom]:
    """Return the FixedRandom class so tests can build canned random sources."""
    return FixedRandom
