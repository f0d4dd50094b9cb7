"""
Timing measurement service.

Collects repeated latency samples for one candidate signature and reduces
them to a single median estimate. Samples are taken strictly one after
another; overlapping oracle calls would distort the very timings being
measured.
"""

import time
from typing import Callable, List, Optional

from hmac_timing.core.interfaces import (
    DigestLike, IComparator, ILogger, ISampler, as_bytes, bytes_to_hex
)
from hmac_timing.utils.logger import Logger
from hmac_timing.utils.stats import median


Clock = Callable[[], float]


class TimingService(ISampler):
    """
    Sampler for the vulnerable comparator.

    Example:
        >>> service = TimingService(VulnerableComparator())
        >>> latency = await service.estimate(candidate, reference, 25.0, 5)
        >>> print(f"{latency:.2f} ms")
    """

    def __init__(
        self,
        comparator: IComparator,
        clock: Clock = time.perf_counter,
        logger: Optional[ILogger] = None
    ):
        """
        Initialize timing service.

        Args:
            comparator: Oracle to time
            clock: Monotonic clock returning seconds
            logger: Logger instance
        """
        self.comparator = comparator
        self.clock = clock
        self.logger = logger or Logger.for_component("timing")

    async def measure_candidate(
        self,
        candidate: DigestLike,
        reference: DigestLike,
        delay_per_byte: float,
        sample_count: int
    ) -> List[float]:
        """
        Time ``sample_count`` sequential comparisons of the same candidate.

        Returns:
            Latencies in milliseconds, in measurement order
        """
        samples: List[float] = []

        for _ in range(sample_count):
            start_time = self.clock()
            await self.comparator.compare(reference, candidate, delay_per_byte)
            elapsed = self.clock() - start_time
            samples.append(max(elapsed, 0.0) * 1000.0)

        return samples

    async def estimate(
        self,
        candidate: DigestLike,
        reference: DigestLike,
        delay_per_byte: float,
        sample_count: int
    ) -> float:
        """
        Median latency (ms) of ``sample_count`` comparisons; 0.0 if none.
        """
        samples = await self.measure_candidate(
            candidate, reference, delay_per_byte, sample_count
        )
        result = median(samples)

        self.logger.debug(
            f"Candidate {bytes_to_hex(as_bytes(candidate))}: "
            f"median={result:.3f}ms over {len(samples)} samples"
        )

        return result
