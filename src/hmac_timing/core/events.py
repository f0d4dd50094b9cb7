"""
Progress events and cooperative cancellation.

The attack engine publishes an event after every candidate trial so an
observer can redraw the per-candidate chart while the attack runs.
Observers never mutate engine state; they only receive events.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from hmac_timing.core.interfaces import AttackPhase, TimingDataPoint


@dataclass(frozen=True)
class PhaseChanged:
    phase: AttackPhase
    message: str = ""


@dataclass(frozen=True)
class PositionStarted:
    byte_index: int
    total_bytes: int


@dataclass(frozen=True)
class CandidateMeasured:
    """All timings collected so far for the byte under attack."""
    byte_index: int
    records: Tuple[TimingDataPoint, ...]
    best_candidate: Optional[str]


@dataclass(frozen=True)
class ByteResolved:
    byte_index: int
    byte: str
    recovered_prefix: str
    margin: float = 0.0


ProgressObserver = Callable[[object], None]


class ProgressChannel:
    """
    One-to-many event stream from the attack engine to observers.

    Example:
        >>> channel = ProgressChannel()
        >>> seen = []
        >>> channel.subscribe(seen.append)
        >>> channel.publish(PhaseChanged(AttackPhase.RUNNING))
        >>> seen[0].phase.value
        'running'
    """

    def __init__(self):
        self._observers: List[ProgressObserver] = []

    def subscribe(self, observer: ProgressObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: ProgressObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def publish(self, event: object) -> None:
        for observer in list(self._observers):
            observer(event)


class CancellationToken:
    """Flag checked by the engine between candidate trials."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled
