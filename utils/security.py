"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Access-token signing/verification via PyJWT (HMAC only, explicit algorithm allow-list)
- Opaque refresh tokens and JTI generation
"""
from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from services.errors import SigningError, Unauthorized

HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
DEFAULT_ACCESS_TTL = timedelta(minutes=15)

ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """
    Mints short-lived signed access tokens and opaque refresh tokens.

    Access tokens carry sub (user id), role, iat, exp, jti, iss and
    type="access". Refresh tokens carry nothing: they are random strings whose
    meaning lives in the sessions table.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", issuer: str = "storefront-api",
                 access_ttl: timedelta = DEFAULT_ACCESS_TTL):
        if algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"Unsupported JWT algorithm {algorithm!r}; use one of {', '.join(HMAC_ALGORITHMS)}")
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.access_ttl = access_ttl

    def issue_access_token(self, user_id: str, role: str, ttl: timedelta | None = None) -> str:
        if not self.secret or not isinstance(self.secret, str):
            raise SigningError("JWT secret is empty or invalid")
        now = _now()
        exp = now + (ttl if ttl is not None else self.access_ttl)
        payload = {
            "iss": self.issuer,
            "sub": str(user_id),
            "role": getattr(role, "value", role),
            "iat": int(now.timestamp()),
            "exp": int(exp.timestamp()),
            "type": "access",
            "jti": generate_jti(),
        }
        try:
            return jwt.encode(payload, self.secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError) as exc:
            raise SigningError(f"Unable to sign access token: {exc}") from exc

    @staticmethod
    def issue_refresh_token() -> str:
        return secrets.token_urlsafe(48)

    def decode_access_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate an access token. Raises Unauthorized on a bad
        signature, a disallowed algorithm, expiry, a foreign issuer or a
        non-access token.
        """
        try:
            decoded = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["sub", "role", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token expired")
        except jwt.InvalidTokenError as exc:
            raise Unauthorized(f"Invalid token: {exc}")

        if decoded.get("type") != "access":
            raise Unauthorized("Wrong token type")
        return decoded
