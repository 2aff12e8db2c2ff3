"""
Credential service.

Issues HS256 access tokens for registered users and turns a presented
token back into the user id it was issued for. Passwords are stored as
salted PBKDF2-HMAC-SHA256 digests and compared in constant time.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from mediatracker.config.settings import Settings, settings as default_settings
from mediatracker.db.models import User
from mediatracker.exceptions import AuthenticationError, ValidationError
from mediatracker.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
HASH_SCHEME = "pbkdf2_sha256"
PASSWORD_MIN_LENGTH = 8


class Credentials(BaseModel):
    """Email and password as submitted to register or login."""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=1024)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Emails are matched case-insensitively."""
        email = v.strip().lower()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise ValueError("Email must look like name@example.com")
        return email


class AccessToken(BaseModel):
    """Bearer token handed back after register or login."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Lifetime in seconds")
    user_id: uuid.UUID
    email: str


class UserRead(BaseModel):
    """Public view of an account."""

    id: uuid.UUID
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


class CredentialService:
    """Password hashing plus access-token issuance and verification."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        user_repository: Optional[UserRepository] = None,
    ) -> None:
        self.config = config or default_settings
        self.user_repository = user_repository or UserRepository()

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def hash_password(self, password: str) -> str:
        """Hash ``password`` as ``pbkdf2_sha256$<iterations>$<salt>$<digest>``."""
        salt = secrets.token_bytes(16)
        iterations = self.config.password_hash_iterations
        digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
        return f"{HASH_SCHEME}${iterations}${_b64(salt)}${_b64(digest)}"

    def verify_password(self, password: str, encoded: str) -> bool:
        """Check ``password`` against a stored hash."""
        try:
            scheme, iterations, salt, expected = encoded.split("$")
            if scheme != HASH_SCHEME:
                return False
            digest = hashlib.pbkdf2_hmac(
                "sha256", password.encode("utf-8"), _unb64(salt), int(iterations)
            )
        except ValueError:
            logger.warning("Stored password hash has an unexpected format")
            return False
        return hmac.compare_digest(digest, _unb64(expected))

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def issue_token(self, user: User, now: Optional[datetime] = None) -> AccessToken:
        """
        Issue an access token for ``user``.

        Parameters
        ----------
        user : User
            The authenticated account.
        now : datetime | None, optional
            Issue time; defaults to the current UTC time.

        Returns
        -------
        AccessToken
            Signed token with ``sub`` set to the user id.
        """
        issued_at = now or datetime.now(timezone.utc)
        ttl = timedelta(minutes=self.config.access_token_ttl_minutes)
        claims: dict[str, Any] = {
            "sub": str(user.id),
            "email": user.email,
            "iss": self.config.jwt_issuer,
            "aud": self.config.jwt_audience,
            "iat": issued_at,
            "exp": issued_at + ttl,
        }
        token = jwt.encode(claims, self.config.jwt_secret, algorithm=JWT_ALGORITHM)
        return AccessToken(
            access_token=token,
            expires_in=int(ttl.total_seconds()),
            user_id=user.id,
            email=user.email,
        )

    def verify_token(self, token: str) -> uuid.UUID:
        """
        Verify a bearer token and return the user id it was issued for.

        Raises
        ------
        AuthenticationError
            If the token is expired, malformed, signed with another key,
            or issued for another audience.
        """
        try:
            payload = jwt.decode(
                token,
                self.config.jwt_secret,
                algorithms=[JWT_ALGORITHM],
                audience=self.config.jwt_audience,
                issuer=self.config.jwt_issuer,
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Access token has expired", expired=True) from e
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected access token: %s", e)
            raise AuthenticationError("Invalid access token") from e

        try:
            return uuid.UUID(payload["sub"])
        except (TypeError, ValueError) as e:
            raise AuthenticationError("Invalid access token subject") from e

    # ------------------------------------------------------------------
    # Account flows
    # ------------------------------------------------------------------

    async def register(self, session: AsyncSession, credentials: Credentials) -> AccessToken:
        """Create an account and sign it in. A taken email is a ConflictError."""
        if len(credentials.password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(
                message=f"Password must be at least {PASSWORD_MIN_LENGTH} characters.",
                field_name="password",
                rule="length",
            )
        user = await self.user_repository.create(
            session, credentials.email, self.hash_password(credentials.password)
        )
        logger.info("Registered user %s", user.id)
        return self.issue_token(user)

    async def login(self, session: AsyncSession, credentials: Credentials) -> AccessToken:
        """Sign in; a wrong email and a wrong password fail identically."""
        user = await self.user_repository.get_by_email(session, credentials.email)
        if user is None or not self.verify_password(credentials.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")
        return self.issue_token(user)

    async def get_user(self, session: AsyncSession, user_id: uuid.UUID) -> User:
        """Load the account behind a verified token."""
        user = await self.user_repository.get_by_id(session, user_id)
        if user is None:
            raise AuthenticationError("Account no longer exists")
        return user


# Global credential service instance
credential_service = CredentialService()
