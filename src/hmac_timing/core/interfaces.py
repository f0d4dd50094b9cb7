"""
Data model and abstract interfaces for the timing attack simulator.

The comparator and the sampler are described by interfaces so the attack
engine can be driven by a simulated oracle in tests without touching the
attack logic.
"""

import string
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Union


HEX_DIGITS = frozenset(string.hexdigits)


def bytes_to_hex(data: bytes) -> str:
    """
    Encode bytes as lowercase hex, exactly two digits per byte.

    Example:
        >>> bytes_to_hex(b"\\x00\\x0f\\xff")
        '000fff'
    """
    return bytes(data).hex()


def hex_to_bytes(text: str) -> bytes:
    """
    Decode a hex string produced by :func:`bytes_to_hex`.

    Raises:
        ValueError: If the string has odd length or non-hex characters
    """
    if len(text) % 2 != 0:
        raise ValueError(f"Hex string has odd length: {len(text)}")
    if not set(text) <= HEX_DIGITS:
        raise ValueError(f"Not a hex string: {text!r}")
    return bytes.fromhex(text)


def byte_to_hex(value: int) -> str:
    """Two-digit lowercase hex for a single byte value."""
    return f"{value:02x}"


@dataclass(frozen=True)
class Digest:
    """
    Immutable keyed digest (or digest-shaped candidate signature).

    An empty digest means "not computed yet" or "primitive unavailable";
    callers must not start an attack against it.
    """
    value: bytes = b""

    @classmethod
    def empty(cls) -> "Digest":
        return cls(b"")

    @classmethod
    def from_hex(cls, text: str) -> "Digest":
        return cls(hex_to_bytes(text))

    @property
    def is_empty(self) -> bool:
        return len(self.value) == 0

    def hex(self) -> str:
        return bytes_to_hex(self.value)

    def __len__(self) -> int:
        return len(self.value)

    def __getitem__(self, index):
        return self.value[index]

    def __str__(self) -> str:
        return self.hex()


DigestLike = Union[Digest, bytes]


def as_bytes(data: DigestLike) -> bytes:
    """Accept either a Digest or raw bytes."""
    return data.value if isinstance(data, Digest) else bytes(data)


class AttackPhase(str, Enum):
    """Lifecycle of a single attack run."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class ByteTimingRecord:
    """
    Median latency observed for one candidate value at the current position.

    Attributes:
        candidate: Candidate byte value (0-255)
        latency: Aggregated latency in milliseconds
    """
    candidate: int
    latency: float

    @property
    def byte_hex(self) -> str:
        return byte_to_hex(self.candidate)


@dataclass(frozen=True)
class TimingDataPoint:
    """Chart-ready form of a record: two-hex-digit byte and time in ms."""
    byte: str
    time: float


@dataclass
class RecoveryState:
    """
    Mutable progress of the attack, owned by the attack engine.

    Readers should take a :meth:`snapshot` and accept that it may be stale
    the moment it is returned.
    """
    recovered_prefix: bytes = b""
    current_byte_index: int = 0
    phase: AttackPhase = AttackPhase.IDLE
    records: List[ByteTimingRecord] = field(default_factory=list)
    best_candidate: Optional[int] = None
    message: str = ""

    def snapshot(self) -> "RecoveryState":
        return replace(self, records=list(self.records))

    @property
    def recovered_hex(self) -> str:
        return bytes_to_hex(self.recovered_prefix)


class IComparator(ABC):
    """
    Interface for the signature comparison oracle.

    Implementations are coroutines because the vulnerable comparator
    suspends once per matching byte.
    """

    @abstractmethod
    async def compare(
        self,
        reference: DigestLike,
        candidate: DigestLike,
        delay_per_byte: float
    ) -> bool:
        """
        Compare a candidate signature against the reference.

        Args:
            reference: The correct digest
            candidate: Signature under test
            delay_per_byte: Delay in milliseconds per matching byte

        Returns:
            True if the signatures are identical
        """
        pass


class ISampler(ABC):
    """Interface for turning repeated oracle timings into one estimate."""

    @abstractmethod
    async def estimate(
        self,
        candidate: DigestLike,
        reference: DigestLike,
        delay_per_byte: float,
        sample_count: int
    ) -> float:
        """
        Return a robust latency estimate (milliseconds) for one candidate.
        """
        pass


class ILogger(ABC):
    """Interface for logging functionality."""

    @abstractmethod
    def debug(self, message: str) -> None:
        """Log debug message."""
        pass

    @abstractmethod
    def info(self, message: str) -> None:
        """Log info message."""
        pass

    @abstractmethod
    def warning(self, message: str) -> None:
        """Log warning message."""
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        """Log error message."""
        pass
