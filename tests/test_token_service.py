"""
Pressroom Backend: Token Service Unit Tests
===========================================

What:  Issue/verify behaviour of the one-hour bearer tokens.
How:   A controllable clock replaces time.time, so expiry is tested exactly.

What we test:
    ✅ Round trip returns the same identity
    ✅ Accepted at T+59min, rejected at T+61min (and exactly at T+60min)
    ✅ Tampered, foreign-secret and garbage tokens → ForbiddenError
    ✅ Missing token → AuthenticationError
"""

import uuid

import jwt
import pytest

from pressroom.exceptions import AuthenticationError, ForbiddenError
from pressroom.services.token_service import TokenService

SECRET = "unit-test-secret-with-enough-bytes-for-hs256"
ISSUED_AT = 1_700_000_000


class FakeClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestTokenLifetime:

    def setup_method(self):
        self.clock = FakeClock(ISSUED_AT)
        self.service = TokenService(secret=SECRET, ttl_seconds=3600, clock=self.clock)
        self.user_id = uuid.uuid4()
        self.token = self.service.issue(self.user_id, "alice")

    def test_round_trip_identity(self):
        identity = self.service.verify(self.token)
        assert identity.user_id == self.user_id
        assert identity.username == "alice"

    def test_accepted_after_59_minutes(self):
        self.clock.now = ISSUED_AT + 59 * 60
        assert self.service.verify(self.token).username == "alice"

    def test_rejected_after_61_minutes(self):
        self.clock.now = ISSUED_AT + 61 * 60
        with pytest.raises(ForbiddenError, match="Invalid or expired token"):
            self.service.verify(self.token)

    def test_rejected_at_exact_expiry(self):
        self.clock.now = ISSUED_AT + 3600
        with pytest.raises(ForbiddenError):
            self.service.verify(self.token)

    def test_claims_carry_issue_and_expiry(self):
        claims = jwt.decode(self.token, SECRET, algorithms=["HS256"], options={"verify_exp": False})
        assert claims["iat"] == ISSUED_AT
        assert claims["exp"] == ISSUED_AT + 3600
        assert claims["user_id"] == str(self.user_id)


class TestTokenRejection:

    def setup_method(self):
        self.service = TokenService(secret=SECRET)

    def test_missing_token_is_authentication_error(self):
        with pytest.raises(AuthenticationError):
            self.service.verify(None)
        with pytest.raises(AuthenticationError):
            self.service.verify("")

    def test_tampered_signature(self):
        token = self.service.issue(uuid.uuid4(), "alice")
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[:-2] + ("AA" if signature[-2:] != "AA" else "BB")])
        with pytest.raises(ForbiddenError):
            self.service.verify(tampered)

    def test_token_signed_with_other_secret(self):
        other = TokenService(secret="another-secret-with-enough-bytes-for-hs256")
        token = other.issue(uuid.uuid4(), "mallory")
        with pytest.raises(ForbiddenError):
            self.service.verify(token)

    def test_garbage_token(self):
        with pytest.raises(ForbiddenError):
            self.service.verify("not-a-jwt")

    def test_token_missing_user_claim(self):
        token = jwt.encode({"username": "alice", "iat": 1, "exp": 9_999_999_999}, SECRET, algorithm="HS256")
        with pytest.raises(ForbiddenError):
            self.service.verify(token)
