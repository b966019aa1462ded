"""
Pressroom Backend: Credential Store & Login
===========================================

What:  Signup (unique username + bcrypt hash) and login (password check + token).
Who:   Called by routes/auth.py.

Login outcomes (kept from the original API contract):
    unknown username → NotFoundError (404)
    wrong password   → AuthenticationError (401)
    success          → signed token from TokenService

bcrypt is CPU-bound (~50ms at cost 10), so hashing and checking run in a worker
thread to keep the event loop free for other requests.
"""

import asyncio
import logging

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pressroom.exceptions import (
    AuthenticationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from pressroom.models.user import User
from pressroom.services.token_service import TokenService

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 10) -> str:
    """Hash a password with a fresh salt; the salt is embedded in the result."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


class AuthService:
    """
    Business logic for accounts.

    Stateless apart from its configuration; one instance is created by
    `create_app()` and shared by all requests.
    """

    def __init__(self, token_service: TokenService, bcrypt_rounds: int = 10):
        self.token_service = token_service
        self.bcrypt_rounds = bcrypt_rounds

    @staticmethod
    def _check_password_length(password: str) -> None:
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"Password must be at most {MAX_PASSWORD_BYTES} bytes long",
                field="password",
            )

    async def _find_user(self, db: AsyncSession, username: str) -> User | None:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def signup(self, db: AsyncSession, username: str, password: str) -> User:
        """
        Create a user with a unique username.

        Raises:
            ValidationError: password too long for bcrypt
            ConflictError:   username already taken (checked first, constraint as backstop)
            DatabaseError:   any other persistence failure
        """
        self._check_password_length(password)

        try:
            if await self._find_user(db, username) is not None:
                raise ConflictError(
                    message="Username already exists",
                    context={"username": username},
                )

            password_hash = await asyncio.to_thread(hash_password, password, self.bcrypt_rounds)
            user = User(username=username, password_hash=password_hash)
            db.add(user)
            await db.flush()

        except IntegrityError:
            # Two concurrent signups for the same name: the unique index decides
            raise ConflictError(
                message="Username already exists",
                context={"username": username},
            )
        except SQLAlchemyError as e:
            logger.error("Database error during signup: %s", str(e))
            raise DatabaseError(context={"operation": "signup"})

        logger.info("User created: %s (%s)", user.username, user.id)
        return user

    async def login(self, db: AsyncSession, username: str, password: str) -> str:
        """Check credentials and return a freshly issued bearer token."""
        try:
            user = await self._find_user(db, username)
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e))
            raise DatabaseError(context={"operation": "login"})

        if user is None:
            raise NotFoundError(resource="user")

        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            valid = False
        else:
            valid = await asyncio.to_thread(verify_password, password, user.password_hash)
        if not valid:
            logger.info("Failed login for user %s", username)
            raise AuthenticationError(message="Invalid password")

        return self.token_service.issue(user.id, user.username)
