"""
Attack session: ties configuration, the victim digest and the attacker
together for a front end.

The session is the one place that decides whether an attack succeeded,
by comparing the recovered signature with the true digest.
"""

import time
from typing import List, Optional, Tuple

from hmac_timing.attack.timing_attacker import AttackConfig, TimingAttacker
from hmac_timing.core.events import (
    ByteResolved, CancellationToken, CandidateMeasured,
    PhaseChanged, PositionStarted, ProgressChannel
)
from hmac_timing.core.exceptions import DigestUnavailableError, TimingAttackException
from hmac_timing.core.interfaces import (
    AttackPhase, Digest, IComparator, ILogger, TimingDataPoint, hex_to_bytes
)
from hmac_timing.services.analysis_service import AnalysisService
from hmac_timing.services.comparator_service import VulnerableComparator
from hmac_timing.services.digest_service import DigestService
from hmac_timing.services.timing_service import Clock, TimingService
from hmac_timing.utils.logger import Logger


class AttackSession:
    """
    Controller for one simulated victim and its attacker.

    Changing the secret or the message recomputes the digest and resets the
    attack, since earlier results would describe a different signature.

    Example:
        >>> session = AttackSession("my-key", "hello", AttackConfig(25.0, 5))
        >>> await session.start()
        >>> session.is_success
        True
    """

    def __init__(
        self,
        secret: str,
        message: str,
        config: Optional[AttackConfig] = None,
        digest_service: Optional[DigestService] = None,
        comparator: Optional[IComparator] = None,
        clock: Clock = time.perf_counter,
        analyzer: Optional[AnalysisService] = None,
        logger: Optional[ILogger] = None
    ):
        self.logger = logger or Logger.for_component("session")
        self.config = config or AttackConfig()
        self.digest_service = digest_service or DigestService(logger=self.logger)
        self.comparator = comparator or VulnerableComparator()
        self.clock = clock
        self.channel = ProgressChannel()
        self.attacker = TimingAttacker(
            sampler=TimingService(self.comparator, clock=clock, logger=self.logger),
            analyzer=analyzer,
            channel=self.channel,
            logger=self.logger
        )

        self._secret = secret
        self._message = message
        self.correct_signature = Digest.empty()
        self.recovered_signature = ""
        self.timing_data: Tuple[TimingDataPoint, ...] = ()
        self.max_time_byte: Optional[str] = None
        self.progress: Tuple[int, int] = (0, 0)
        self.error_message = ""
        self._token: Optional[CancellationToken] = None
        self._reset_pending = False

        self.channel.subscribe(self._on_event)
        self._update_digest()

    # ------------------------------------------------------------------
    # configuration
    # ------------------------------------------------------------------

    @property
    def secret(self) -> str:
        return self._secret

    @secret.setter
    def secret(self, value: str) -> None:
        self._secret = value
        self._update_digest()

    @property
    def message(self) -> str:
        return self._message

    @message.setter
    def message(self, value: str) -> None:
        self._message = value
        self._update_digest()

    @property
    def delay_per_byte(self) -> float:
        return self.config.delay_per_byte

    @delay_per_byte.setter
    def delay_per_byte(self, value: float) -> None:
        self.config.delay_per_byte = value
        self.reset()

    @property
    def samples_per_byte(self) -> int:
        return self.config.samples_per_byte

    @samples_per_byte.setter
    def samples_per_byte(self, value: int) -> None:
        self.config.samples_per_byte = value
        self.reset()

    @property
    def total_bytes(self) -> int:
        return len(self.correct_signature)

    def _update_digest(self) -> None:
        self.cancel()
        self.correct_signature = self.digest_service.compute(self._secret, self._message)
        if self.correct_signature.is_empty:
            self.logger.warning("Digest unavailable; attack disabled until it can be computed")
        self.reset()

    # ------------------------------------------------------------------
    # attack control
    # ------------------------------------------------------------------

    @property
    def phase(self) -> AttackPhase:
        return self.attacker.state.phase

    @property
    def can_start(self) -> bool:
        return not self.correct_signature.is_empty and not self.attacker.is_active

    @property
    def is_success(self) -> bool:
        return (
            self.phase == AttackPhase.COMPLETE
            and self.recovered_signature == self.correct_signature.hex()
        )

    async def start(self) -> Optional[Digest]:
        """
        Reset and run a full attack.

        Errors are reported through ``phase`` and ``error_message``; the
        session stays usable afterwards.

        Returns:
            The recovered signature, or None if cancelled or failed
        """
        if self.attacker.is_active:
            self.logger.warning("Attack already running, ignoring start request")
            return None

        self.reset()
        self._token = CancellationToken()

        try:
            return await self.attacker.run(
                self.correct_signature,
                self.total_bytes,
                self.config.delay_per_byte,
                self.config.samples_per_byte,
                self._token
            )
        except TimingAttackException as e:
            self.error_message = self.error_message or str(e)
            return None
        except Exception as e:
            # the attacker already moved to the error phase
            self.error_message = self.error_message or str(e)
            self.logger.error(f"Unexpected attack failure: {str(e)}")
            return None
        finally:
            self._token = None
            if self._reset_pending:
                self.reset()

    def cancel(self) -> None:
        """Ask a running attack to stop before its next candidate."""
        if self._token is not None:
            self._token.cancel()

    def reset(self) -> None:
        """
        Clear results and return to idle.

        A running attack is cancelled and the reset completes once it stops.
        """
        if self.attacker.is_active:
            self._reset_pending = True
            self.cancel()
            return

        self._reset_pending = False
        self.attacker.reset()
        self.recovered_signature = ""
        self.timing_data = ()
        self.max_time_byte = None
        self.progress = (0, self.total_bytes)
        self.error_message = ""

    async def verify(self, signature_hex: str) -> Tuple[bool, float]:
        """
        Check one user-supplied signature through the vulnerable comparator.

        Returns:
            Tuple of (matches, elapsed milliseconds)

        Raises:
            DigestUnavailableError: If the reference digest is empty
            ValueError: If ``signature_hex`` is not a hex string
        """
        if self.correct_signature.is_empty:
            raise DigestUnavailableError("no signature to verify against")

        candidate = hex_to_bytes(signature_hex.strip().lower())
        start_time = self.clock()
        matches = await self.comparator.compare(
            self.correct_signature, candidate, self.config.delay_per_byte
        )
        return matches, (self.clock() - start_time) * 1000.0

    # ------------------------------------------------------------------
    # progress tracking
    # ------------------------------------------------------------------

    def _on_event(self, event: object) -> None:
        if isinstance(event, PositionStarted):
            self.progress = (event.byte_index + 1, event.total_bytes)
            self.timing_data = ()
            self.max_time_byte = None
        elif isinstance(event, CandidateMeasured):
            self.timing_data = event.records
            self.max_time_byte = event.best_candidate
        elif isinstance(event, ByteResolved):
            self.recovered_signature = event.recovered_prefix
        elif isinstance(event, PhaseChanged) and event.phase == AttackPhase.ERROR:
            self.error_message = event.message

    def subscribe(self, observer) -> None:
        """Register an additional progress observer (e.g. a console printer)."""
        self.channel.subscribe(observer)

    def summary(self) -> List[str]:
        lines = [
            f"Status: {self.phase.value.upper()}",
            f"Correct signature:   {self.correct_signature.hex() or '(unavailable)'}",
            f"Recovered signature: {self.recovered_signature or '...'}",
        ]
        if self.phase == AttackPhase.COMPLETE:
            lines.append(
                "Attack Successful! Signature recovered." if self.is_success
                else "Attack Failed! Signature mismatch."
            )
        elif self.phase == AttackPhase.ERROR:
            lines.append(f"Error: {self.error_message}")
        return lines
