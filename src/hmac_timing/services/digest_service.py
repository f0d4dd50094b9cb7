"""
Digest service: computes the reference HMAC the attacker tries to recover.
"""

import hashlib
import hmac
from typing import Optional, Union

from hmac_timing.core.interfaces import Digest, ILogger
from hmac_timing.utils.logger import Logger


DEFAULT_ALGORITHM = "sha1"

TextOrBytes = Union[str, bytes]


def _encode(value: TextOrBytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


class DigestService:
    """
    Keyed-hash signer for the victim side.

    With the default algorithm the digest is 20 bytes (40 hex characters).

    Example:
        >>> service = DigestService()
        >>> len(service.compute("k", "m").hex())
        40
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM, logger: Optional[ILogger] = None):
        self.algorithm = algorithm
        self.logger = logger or Logger.for_component("digest")

    @property
    def digest_size(self) -> int:
        """Byte length of digests produced, 0 if the algorithm is unavailable."""
        try:
            return hashlib.new(self.algorithm).digest_size
        except (ValueError, TypeError):
            return 0

    def compute(self, secret: TextOrBytes, message: TextOrBytes) -> Digest:
        """
        Compute HMAC(secret, message).

        Args:
            secret: HMAC key (str is UTF-8 encoded)
            message: Signed content (str is UTF-8 encoded)

        Returns:
            The digest, or ``Digest.empty()`` if the primitive is unavailable
        """
        try:
            mac = hmac.new(_encode(secret), _encode(message), self.algorithm)
        except (ValueError, TypeError) as e:
            self.logger.error(f"HMAC calculation failed ({self.algorithm}): {str(e)}")
            return Digest.empty()

        digest = Digest(mac.digest())
        self.logger.debug(f"HMAC-{self.algorithm.upper()} computed ({len(digest)} bytes)")
        return digest
