"""
Pressroom Backend: Token Issuer / Verifier
==========================================

What:  Issues and verifies the signed, time-limited bearer tokens handed out at login.
Why:   Protected routes need a stateless proof of identity; no session table exists.
How:   HS256 JWT (PyJWT) with claims {user_id, username, iat, exp}, exp = iat + ttl.

Failure Signals:
    no token                               → AuthenticationError (401)
    bad signature / malformed / expired    → ForbiddenError (403)

Expiry is checked against the injected clock instead of PyJWT's wall-clock check,
so verification is a pure function of (token, secret, clock). Tests move the clock
instead of sleeping.
"""

import logging
import time
import uuid
from typing import Callable, Optional

import jwt
from pydantic import ValidationError as PydanticValidationError

from pressroom.exceptions import AuthenticationError, ForbiddenError
from pressroom.schemas.auth import Identity

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["user_id", "username", "iat", "exp"]


class TokenService:
    """
    Signs and verifies identity tokens with a shared secret.

    Args:
        secret:       HMAC secret (settings.jwt_secret)
        algorithm:    JWT algorithm, HS256 by default
        ttl_seconds:  Lifetime of a token; 3600 for the one-hour policy
        clock:        Returns the current UNIX time; defaults to time.time
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def issue(self, user_id: uuid.UUID, username: str) -> str:
        """Create a token for the given user, valid for `ttl_seconds` from now."""
        issued_at = int(self._clock())
        payload = {
            "user_id": str(user_id),
            "username": username,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> Identity:
        """
        Verify a bearer token and return the identity it carries.

        Raises:
            AuthenticationError: token is absent or empty
            ForbiddenError:      signature, claim shape or expiry check failed
        """
        if not token:
            raise AuthenticationError(message="Missing bearer token")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "require": REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidTokenError as e:
            logger.info("Rejected token: %s", type(e).__name__)
            raise ForbiddenError(
                message="Invalid or expired token",
                context={"reason": type(e).__name__},
            )

        if self._clock() >= claims["exp"]:
            raise ForbiddenError(
                message="Invalid or expired token",
                context={"reason": "ExpiredSignatureError"},
            )

        try:
            return Identity(user_id=uuid.UUID(str(claims["user_id"])), username=claims["username"])
        except (ValueError, PydanticValidationError):
            raise ForbiddenError(
                message="Invalid or expired token",
                context={"reason": "MalformedClaims"},
            )
