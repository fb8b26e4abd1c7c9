"""
Access-control gate: bearer-token authentication and role checks.

Stateless: the role is trusted as of token issuance, so a role change only
takes effect once the short-lived access token expires.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from models.user import Role
from services.errors import Forbidden, Unauthorized
from utils.security import TokenIssuer


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: Role


def parse_bearer(header: str | None) -> str:
    if not header:
        raise Unauthorized("Authorization header is required")
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
        raise Unauthorized("Invalid authorization format")
    return parts[1]


def authenticate(header: str | None, tokens: TokenIssuer) -> Principal:
    claims = tokens.decode_access_token(parse_bearer(header))
    try:
        role = Role(claims.get("role"))
    except ValueError:
        raise Unauthorized("Invalid token claims")
    return Principal(user_id=claims["sub"], role=role)


def authorize(principal: Principal, allowed_roles: Iterable[Role]) -> None:
    if principal.role not in set(allowed_roles):
        raise Forbidden()
