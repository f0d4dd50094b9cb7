"""
Unit tests for the sampler and statistical helpers.

Run with: pytest tests/test_timing_service.py -v
"""

import asyncio
import math

import pytest
from unittest.mock import AsyncMock, Mock

from hmac_timing.services.timing_service import TimingService
from hmac_timing.utils.stats import median, median_absolute_deviation, robust_zscore


REFERENCE = bytes(range(1, 21))


class TestStatisticalFunctions:
    """Test suite for statistical utility functions."""

    def test_median_empty(self):
        assert median([]) == 0

    def test_median_single(self):
        assert median([4.2]) == 4.2

    def test_median_odd(self):
        assert median([1, 2, 3]) == 2

    def test_median_even(self):
        assert median([1, 2, 3, 4]) == 2.5

    def test_median_unsorted_input(self):
        assert median([9.0, 1.0, 5.0]) == 5.0

    def test_median_resists_outlier(self):
        assert median([1.0, 1.1, 1.0, 250.0, 1.2]) == pytest.approx(1.1)

    def test_mad_of_constant_data(self):
        assert median_absolute_deviation([2.0, 2.0, 2.0]) == 0.0

    def test_robust_zscore_standout(self):
        population = [1.0, 1.1, 0.9, 1.05, 0.95]
        assert robust_zscore(5.0, population) > 10

    def test_robust_zscore_no_spread(self):
        assert math.isinf(robust_zscore(2.0, [1.0, 1.0]))
        assert robust_zscore(1.0, [1.0, 1.0]) == 0.0


class TestTimingService:
    """Test suite for the median sampler."""

    def test_sample_count(self, timing_service, comparator):
        samples = asyncio.run(
            timing_service.measure_candidate(REFERENCE[:2] + bytes(18), REFERENCE, 10.0, 7)
        )

        assert len(samples) == 7
        assert comparator.calls == 7
        assert samples == pytest.approx([20.0] * 7)

    def test_estimate_returns_median_in_ms(self, timing_service):
        candidate = REFERENCE[:4] + bytes(16)

        latency = asyncio.run(timing_service.estimate(candidate, REFERENCE, 25.0, 3))

        assert latency == pytest.approx(100.0)

    def test_zero_samples_is_neutral(self, timing_service, comparator):
        latency = asyncio.run(timing_service.estimate(REFERENCE, REFERENCE, 25.0, 0))

        assert latency == 0.0
        assert comparator.calls == 0

    def test_median_taken_over_noisy_samples(self, logger):
        # clock readings: (start, end) pairs giving 2ms, 50ms, 3ms
        readings = iter([0.0, 0.002, 1.0, 1.050, 2.0, 2.003])
        comparator = Mock()
        comparator.compare = AsyncMock(return_value=False)
        service = TimingService(comparator, clock=lambda: next(readings), logger=logger)

        latency = asyncio.run(service.estimate(REFERENCE, REFERENCE, 1.0, 3))

        assert latency == pytest.approx(3.0)
        assert comparator.compare.await_count == 3
