"""Token issuing/validation and password hashing."""
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)

# bcrypt rejects longer secrets
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True)
class TokenConfig:
    """Signing configuration, built once at startup and injected."""

    secret_key: str
    algorithm: str = "HS256"
    issuer: str = "yoked-api"
    expire_delta: timedelta = timedelta(days=7)

    @classmethod
    def from_settings(cls, settings) -> "TokenConfig":
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            issuer=settings.JWT_ISSUER,
            expire_delta=timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
        )


class TokenData(BaseModel):
    """Claims extracted from a valid token."""

    user_id: str
    email: str | None = None
    token_id: str
    expires_at: datetime


class IssuedToken(BaseModel):
    """A freshly signed token and its expiry."""

    token: str
    expires_at: datetime


class TokenService:
    """Issues and validates signed, time-limited access tokens."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def create_access_token(
        self,
        user_id: str,
        email: str | None = None,
        expires_delta: timedelta | None = None,
    ) -> IssuedToken:
        """Sign a token carrying the user identity.

        Args:
            user_id: The user's id (becomes ``sub``)
            email: Optional email claim
            expires_delta: Override of the configured lifetime

        Returns:
            The encoded token with its expiry timestamp
        """
        now = datetime.now(timezone.utc)
        expires_at = now + (expires_delta or self.config.expire_delta)
        payload = {
            "sub": user_id,
            "email": email,
            "iss": self.config.issuer,
            "iat": now,
            "nbf": now,
            "exp": expires_at,
            "jti": uuid.uuid4().hex,
        }
        token = jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def decode_token(self, token: str) -> TokenData | None:
        """Validate signature, issuer and expiry.

        Returns:
            The token claims, or None if the token is invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                issuer=self.config.issuer,
                options={"require": ["sub", "exp", "jti"]},
            )
        except jwt.PyJWTError as e:
            logger.debug("token_rejected", reason=type(e).__name__)
            return None

        return TokenData(
            user_id=payload["sub"],
            email=payload.get("email"),
            token_id=payload["jti"],
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )


def hash_password(password: str) -> str:
    """Hash a plain text password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain text password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash or over-long password
        return False


def check_password_length(password: str) -> str:
    """Reject passwords bcrypt cannot hash; the limit counts UTF-8 bytes."""
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return password
