"""
Custom exceptions for the HMAC timing attack simulator.

Length mismatches and cancellation are deliberately absent: the comparator
answers a malformed pair with a plain mismatch and a cancelled attack simply
returns to idle.
"""


class TimingAttackException(Exception):
    """Base exception for all timing attack errors."""
    pass


class DigestUnavailableError(TimingAttackException):
    """Raised when an attack is started without a computed reference digest."""

    def __init__(self, reason: str = "reference digest is empty"):
        self.reason = reason
        super().__init__(f"Digest unavailable: {reason}")


class AttackInProgressError(TimingAttackException):
    """Raised when a second attack is started while one is still running."""

    def __init__(self):
        super().__init__("An attack is already running")


class InvalidPhaseTransition(TimingAttackException):
    """Raised when the attack state machine is asked for a forbidden move."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move attack from '{current}' to '{requested}'"
        )


class ConfigurationError(TimingAttackException):
    """Raised when configuration is invalid or missing."""
    pass
