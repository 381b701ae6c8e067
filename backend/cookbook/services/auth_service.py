"""
Family Cookbook Backend — Authentication Service
==================================================

What:  Password hashing, login/logout, session resolution and the one-time
       admin seed.
How:   Passwords are bcrypt hashes. A successful login stores a UserSession
       row keyed by a random token and returns that token signed with the
       session secret (itsdangerous). The signed value is what the route puts
       in the cookie; resolving a request means verifying the signature,
       then loading the row and checking its expiry.
Who:   Routes in routes/auth.py and the identity dependencies in
       dependencies.py.

Session lifetime:
    Fixed: expires_at = issued_at + session_max_age. Neither the cookie nor
    the row is renewed on use. The signature also carries a timestamp and is
    rejected after the same max age.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple

import bcrypt
from itsdangerous import BadSignature, URLSafeTimedSerializer
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from cookbook.database import utcnow
from cookbook.exceptions import InvalidCredentialsError
from cookbook.models.user import User, UserSession

logger = logging.getLogger(__name__)


# bcrypt only reads the first 72 bytes of a password; bcrypt>=5 rejects longer ones
BCRYPT_MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a password with a fresh bcrypt salt.

    Raises:
        ValueError: the password is longer than 72 bytes in UTF-8.
    """
    if password_too_long(password):
        raise ValueError(f"Password exceeds bcrypt's {BCRYPT_MAX_PASSWORD_BYTES}-byte limit")
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a password against a stored bcrypt hash.

    Over-long passwords and malformed hashes never match. Blocking (bcrypt
    is deliberately slow); async callers run it in the threadpool.
    """
    if password_too_long(plain_password):
        logger.info("Rejected a password longer than %d bytes", BCRYPT_MAX_PASSWORD_BYTES)
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


@dataclass(frozen=True)
class Identity:
    """The authenticated caller of one request."""
    user_id: int
    display_name: str
    session_token: str


class AuthService:
    """
    Issues, resolves and destroys login sessions.

    One instance per application; it holds the signing key but no per-request
    state. Every method takes the request's database session explicitly.
    """

    SALT = "cookbook-session"

    def __init__(self, secret_key: str, max_age: int, bcrypt_rounds: int = 12):
        self.max_age = max_age
        self.bcrypt_rounds = bcrypt_rounds
        self._serializer = URLSafeTimedSerializer(secret_key, salt=self.SALT)
        # Verified against when the username is unknown so both paths cost one bcrypt check
        self._dummy_hash: Optional[str] = None

    # ── Cookie signing ────────────────────────────────────────────────────

    def sign(self, token: str) -> str:
        return self._serializer.dumps(token)

    def unsign(self, cookie_value: str) -> Optional[str]:
        """Return the token inside a signed cookie value, or None if forged or stale."""
        try:
            token = self._serializer.loads(cookie_value, max_age=self.max_age)
        except BadSignature:
            return None
        return token if isinstance(token, str) else None

    # ── Password checks ───────────────────────────────────────────────────

    async def _check_password(self, password: str, password_hash: Optional[str]) -> bool:
        """
        Run bcrypt in the threadpool. A missing hash (unknown username) is
        still checked, against a throwaway hash, and never matches.
        """
        if password_hash is None:
            if self._dummy_hash is None:
                self._dummy_hash = await run_in_threadpool(
                    hash_password, secrets.token_urlsafe(16), self.bcrypt_rounds
                )
            await run_in_threadpool(verify_password, password, self._dummy_hash)
            return False
        return await run_in_threadpool(verify_password, password, password_hash)

    # ── Session lifecycle ─────────────────────────────────────────────────

    async def login(
        self, db: AsyncSession, username: str, password: str
    ) -> Tuple[User, str]:
        """
        Verify credentials and open a session.

        Returns:
            (user, signed cookie value)

        Raises:
            InvalidCredentialsError: unknown username or wrong password.
        """
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()

        if not await self._check_password(password, user.password_hash if user else None):
            logger.warning("Failed login attempt for username=%r", username)
            raise InvalidCredentialsError()

        now = utcnow()
        # Expired rows are only ever read to be rejected
        await db.execute(delete(UserSession).where(UserSession.expires_at <= now))

        token = secrets.token_urlsafe(32)
        db.add(
            UserSession(
                token=token,
                user_id=user.id,
                display_name=user.name,
                created_at=now,
                expires_at=now + timedelta(seconds=self.max_age),
            )
        )
        await db.commit()

        logger.info("Session issued for user id=%d", user.id)
        return user, self.sign(token)

    async def resolve(self, db: AsyncSession, cookie_value: Optional[str]) -> Optional[Identity]:
        """Map a cookie value to the caller's Identity; None when not logged in."""
        if not cookie_value:
            return None
        token = self.unsign(cookie_value)
        if token is None:
            return None

        session = await db.get(UserSession, token)
        if session is None or session.expires_at <= utcnow():
            return None

        return Identity(
            user_id=session.user_id,
            display_name=session.display_name,
            session_token=session.token,
        )

    async def logout(self, db: AsyncSession, identity: Identity) -> None:
        await db.execute(delete(UserSession).where(UserSession.token == identity.session_token))
        await db.commit()
        logger.info("Session closed for user id=%d", identity.user_id)

    # ── Bootstrap ─────────────────────────────────────────────────────────

    async def seed_admin(
        self, db: AsyncSession, username: str, password: str, display_name: str
    ) -> bool:
        """
        Insert the bootstrap account if, and only if, the users table is empty.

        Returns:
            True when a user was created.
        """
        count = (await db.execute(select(func.count(User.id)))).scalar() or 0
        if count:
            return False

        if not password:
            logger.error(
                "Users table is empty but ADMIN_PASSWORD is not set; no admin account created"
            )
            return False

        if password_too_long(password):
            logger.error(
                "ADMIN_PASSWORD is longer than %d bytes; no admin account created",
                BCRYPT_MAX_PASSWORD_BYTES,
            )
            return False

        password_hash = await run_in_threadpool(hash_password, password, self.bcrypt_rounds)
        db.add(
            User(
                username=username,
                password_hash=password_hash,
                name=display_name,
            )
        )
        await db.commit()
        logger.info("Seeded bootstrap user %r", username)
        return True
