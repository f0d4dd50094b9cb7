"""
Unit tests for the digest service and the hex codec.

Run with: pytest tests/test_digest_service.py -v
"""

import hashlib
import hmac

import pytest

from hmac_timing.core.interfaces import Digest, bytes_to_hex, hex_to_bytes
from hmac_timing.services.digest_service import DigestService


class TestHexCodec:
    """Test suite for fixed-width hex encoding."""

    def test_zero_padded_lowercase(self):
        assert bytes_to_hex(b"\x00\x0a\xab\xff") == "000aabff"

    def test_decode_inverts_encode(self):
        data = bytes(range(256))
        assert hex_to_bytes(bytes_to_hex(data)) == data

    def test_decode_accepts_uppercase(self):
        assert hex_to_bytes("0A0b") == b"\x0a\x0b"

    def test_odd_length_rejected(self):
        with pytest.raises(ValueError):
            hex_to_bytes("abc")

    def test_non_hex_rejected(self):
        with pytest.raises(ValueError):
            hex_to_bytes("zz")

    def test_whitespace_rejected(self):
        with pytest.raises(ValueError):
            hex_to_bytes("00 1")

    def test_matches_builtin_hex(self):
        data = bytes([0, 1, 0x7f, 0x80, 0xff])

        assert bytes_to_hex(data) == data.hex()
        assert hex_to_bytes(data.hex()) == bytes.fromhex(data.hex())

    def test_even_length_with_inner_space_rejected(self):
        with pytest.raises(ValueError):
            hex_to_bytes("0 01")


class TestDigest:
    """Test the digest value object."""

    def test_empty_digest(self):
        digest = Digest.empty()

        assert digest.is_empty
        assert digest.hex() == ""
        assert len(digest) == 0

    def test_from_hex(self):
        digest = Digest.from_hex("00ff10")

        assert digest.value == b"\x00\xff\x10"
        assert str(digest) == "00ff10"
        assert digest[1] == 0xff


class TestDigestService:
    """Test suite for HMAC computation."""

    @pytest.fixture
    def service(self, logger):
        return DigestService(logger=logger)

    def test_matches_standard_hmac_sha1(self, service):
        expected = hmac.new(b"k", b"m", hashlib.sha1).hexdigest()

        digest = service.compute("k", "m")

        assert digest.hex() == expected
        assert len(digest) == 20
        assert len(digest.hex()) == 40

    def test_idempotent(self, service):
        first = service.compute("my-super-secret-key-123", "This is a test file")
        second = service.compute("my-super-secret-key-123", "This is a test file")

        assert first.hex() == second.hex()

    def test_bytes_and_str_inputs_agree(self, service):
        assert service.compute(b"key", b"msg") == service.compute("key", "msg")

    def test_different_message_changes_digest(self, service):
        assert service.compute("key", "a") != service.compute("key", "b")

    def test_digest_size(self, service):
        assert service.digest_size == 20
        assert DigestService(algorithm="sha256").digest_size == 32

    def test_unavailable_algorithm_returns_empty(self, logger):
        service = DigestService(algorithm="no-such-hash", logger=logger)

        digest = service.compute("k", "m")

        assert digest.is_empty
        assert service.digest_size == 0
