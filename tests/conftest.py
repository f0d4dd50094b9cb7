"""
Shared fixtures: a simulated clock so oracle latencies are exact and tests
run without real sleeps.
"""

import pytest

from hmac_timing.services.comparator_service import VulnerableComparator
from hmac_timing.services.timing_service import TimingService
from hmac_timing.utils.logger import Logger


class FakeClock:
    """Clock whose time only moves when the comparator 'sleeps'."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class CountingComparator(VulnerableComparator):
    """Vulnerable comparator that counts its invocations."""

    def __init__(self, sleep):
        super().__init__(sleep=sleep)
        self.calls = 0

    async def compare(self, reference, candidate, delay_per_byte):
        self.calls += 1
        return await super().compare(reference, candidate, delay_per_byte)


@pytest.fixture
def logger():
    return Logger(name="TimingAttack.tests", console=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def comparator(clock):
    return CountingComparator(sleep=clock.sleep)


@pytest.fixture
def timing_service(comparator, clock, logger):
    return TimingService(comparator, clock=clock, logger=logger)
