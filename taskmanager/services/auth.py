"""Password hashing and JWT token handling."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from jose import JWTError, jwt
from passlib.context import CryptContext

logger = logging.getLogger(__name__)


class Hasher(Protocol):
    """One-way password hashing capability."""

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, hashed: str) -> bool: ...


class TokenSigner(Protocol):
    """Signs claim sets and checks signatures and expiry."""

    def encode(self, claims: dict[str, Any]) -> str: ...

    def decode(self, token: str) -> dict[str, Any] | None: ...


class PasswordHasher:
    """bcrypt hashing through passlib, salted per call."""

    def __init__(self, rounds: int = 12):
        self.context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        """Hash a password."""
        return self.context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        """Verify a password against its hash; malformed hashes never match."""
        try:
            return self.context.verify(password, hashed)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be identified")
            return False


class JoseTokenSigner:
    """HMAC JWT signing with python-jose."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def encode(self, claims: dict[str, Any]) -> str:
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict[str, Any] | None:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError:
            return None


@dataclass(frozen=True)
class TokenClaims:
    """Identity asserted by a verified token."""

    user_id: str
    email: str


class TokenService:
    """Issues and verifies time-limited bearer tokens."""

    def __init__(self, signer: TokenSigner, expires_in: timedelta = timedelta(hours=24)):
        self.signer = signer
        self.expires_in = expires_in

    def issue(self, user_id: str, email: str) -> str:
        """Create a signed token for a user."""
        issued_at = datetime.now(UTC)
        claims = {
            "sub": user_id,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.expires_in).timestamp()),
        }
        return self.signer.encode(claims)

    def verify(self, token: str) -> TokenClaims | None:
        """Return the token's identity, or None if it is malformed, forged or expired."""
        if not isinstance(token, str) or not token:
            return None
        try:
            payload = self.signer.decode(token)
        except Exception:
            logger.exception("Token signer raised while decoding")
            return None
        if not payload:
            return None

        user_id = payload.get("sub")
        email = payload.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str):
            return None
        return TokenClaims(user_id=user_id, email=email)
