"""Property-based tests for webhook signature verification.

Testing Configuration:
- Library: Hypothesis (Python)
- Minimum iterations: 100 per property test
"""

import hashlib
import hmac

from hypothesis import assume, given, settings, strategies as st

from src.monitor_pr.webhook.signature import compute_signature, verify_signature


def _github_signature(body: bytes, secret: str) -> str:
    """Signature as GitHub computes it."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


secrets_strategy = st.text(min_size=1, max_size=64)
bodies_strategy = st.binary(max_size=2048)


class TestValidSignatures:
    """A signature produced with the shared secret is accepted."""

    @given(body=bodies_strategy, secret=secrets_strategy)
    @settings(max_examples=100)
    def test_github_signature_verifies(self, body: bytes, secret: str) -> None:
        assert verify_signature(body, _github_signature(body, secret), secret) is True

    @given(body=bodies_strategy, secret=secrets_strategy)
    @settings(max_examples=100)
    def test_compute_signature_matches_github(self, body: bytes, secret: str) -> None:
        assert compute_signature(body, secret) == _github_signature(body, secret)

    @given(body=st.text(max_size=500), secret=secrets_strategy)
    @settings(max_examples=100)
    def test_text_payload_is_utf8_encoded(self, body: str, secret: str) -> None:
        signature = _github_signature(body.encode("utf-8"), secret)
        assert verify_signature(body, signature, secret) is True

    def test_uppercase_hex_digest_verifies(self) -> None:
        body = b'{"action":"created"}'
        digest = _github_signature(body, "s3cret").split("=", 1)[1]
        assert verify_signature(body, f"sha256={digest.upper()}", "s3cret") is True


class TestRejectedSignatures:
    """Tampered bodies, wrong secrets and malformed headers are rejected."""

    @given(body=bodies_strategy, tampered=bodies_strategy, secret=secrets_strategy)
    @settings(max_examples=100)
    def test_tampered_body_rejected(
        self, body: bytes, tampered: bytes, secret: str
    ) -> None:
        assume(body != tampered)
        signature = _github_signature(body, secret)
        assert verify_signature(tampered, signature, secret) is False

    @given(body=bodies_strategy, secret=secrets_strategy, other=secrets_strategy)
    @settings(max_examples=100)
    def test_wrong_secret_rejected(self, body: bytes, secret: str, other: str) -> None:
        assume(secret != other)
        signature = _github_signature(body, other)
        assert verify_signature(body, signature, secret) is False

    @given(body=bodies_strategy, secret=secrets_strategy)
    @settings(max_examples=100)
    def test_missing_signature_rejected(self, body: bytes, secret: str) -> None:
        assert verify_signature(body, None, secret) is False
        assert verify_signature(body, "", secret) is False

    def test_other_algorithm_rejected(self) -> None:
        body = b"payload"
        digest = hmac.new(b"secret", body, hashlib.sha1).hexdigest()
        assert verify_signature(body, f"sha1={digest}", "secret") is False

    def test_sha256_digest_with_wrong_prefix_rejected(self) -> None:
        body = b"payload"
        digest = _github_signature(body, "secret").split("=", 1)[1]
        assert verify_signature(body, f"sha512={digest}", "secret") is False
        assert verify_signature(body, digest, "secret") is False

    def test_non_hex_digest_rejected(self) -> None:
        assert verify_signature(b"payload", "sha256=not-hex-at-all", "secret") is False
        assert verify_signature(b"payload", "sha256=abc", "secret") is False

    def test_extra_separator_rejected(self) -> None:
        body = b"payload"
        signature = _github_signature(body, "secret") + "=extra"
        assert verify_signature(body, signature, "secret") is False

    def test_truncated_digest_rejected(self) -> None:
        body = b"payload"
        signature = _github_signature(body, "secret")[:-2]
        assert verify_signature(body, signature, "secret") is False

    @given(header=st.text(max_size=100))
    @settings(max_examples=100)
    def test_arbitrary_header_never_raises(self, header: str) -> None:
        assert isinstance(verify_signature(b"body", header, "secret"), bool)
