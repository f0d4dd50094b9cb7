"""
Statistical utility functions for timing analysis.

The median is the only statistic that influences which byte is selected;
the spread helpers are used for diagnostic logging.
"""

from typing import Sequence

import numpy as np
from scipy import stats


def median(samples: Sequence[float]) -> float:
    """
    Median of timing samples, 0.0 for an empty sequence.

    Odd count returns the middle element of the sorted samples, even count
    the mean of the two middle elements.

    Example:
        >>> median([1, 2, 3, 4])
        2.5
    """
    if len(samples) == 0:
        return 0.0
    return float(np.median(np.asarray(samples, dtype=float)))


def median_absolute_deviation(samples: Sequence[float]) -> float:
    """
    Median Absolute Deviation (MAD), scaled to be comparable to a standard
    deviation for normally distributed noise.
    """
    if len(samples) == 0:
        return 0.0
    return float(stats.median_abs_deviation(samples, scale="normal"))


def robust_zscore(value: float, population: Sequence[float]) -> float:
    """
    How many MADs ``value`` sits above the median of ``population``.

    Returns +inf when the population has no spread and ``value`` is above
    its median, 0.0 when it has no spread otherwise.
    """
    if len(population) == 0:
        return 0.0

    center = median(population)
    spread = median_absolute_deviation(population)

    if spread == 0:
        return float("inf") if value > center else 0.0

    return (value - center) / spread
