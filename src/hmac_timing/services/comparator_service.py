"""
The deliberately vulnerable signature comparator (the timing oracle).

Every matching byte costs one ``delay_per_byte`` suspension and the loop
stops at the first mismatch, so the call latency is proportional to the
length of the correct prefix of the candidate.
"""

import asyncio
from typing import Awaitable, Callable

from hmac_timing.core.interfaces import DigestLike, IComparator, as_bytes


SleepFunc = Callable[[float], Awaitable[None]]


def matched_prefix_length(reference: DigestLike, candidate: DigestLike) -> int:
    """Number of leading bytes the two sequences have in common."""
    count = 0
    for a, b in zip(as_bytes(reference), as_bytes(candidate)):
        if a != b:
            break
        count += 1
    return count


class VulnerableComparator(IComparator):
    """
    Early-exit comparison with a per-matching-byte delay.

    Args:
        sleep: Coroutine function taking seconds; replaced by a simulated
            clock in tests
    """

    def __init__(self, sleep: SleepFunc = asyncio.sleep):
        self._sleep = sleep

    async def compare(
        self,
        reference: DigestLike,
        candidate: DigestLike,
        delay_per_byte: float
    ) -> bool:
        """
        Compare signatures byte by byte, leaking the matched prefix length.

        Args:
            reference: The correct digest
            candidate: Signature under test
            delay_per_byte: Delay in milliseconds per matching byte

        Returns:
            True only if every byte matches
        """
        correct = as_bytes(reference)
        guess = as_bytes(candidate)

        if len(correct) != len(guess):
            return False

        delay_seconds = delay_per_byte / 1000.0
        for i in range(len(correct)):
            if correct[i] != guess[i]:
                return False
            await self._sleep(delay_seconds)

        return True
