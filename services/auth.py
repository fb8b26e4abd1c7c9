"""
Auth workflow: register, login, refresh_token, logout, get_profile.

Session lifecycle: a login creates an Active session row bound to a fresh
refresh token; refresh reuses it unchanged (no rotation) as long as it is not
blocked or expired; logout deletes it. Expired rows are left for an external
cleanup job.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from models.base_model import utcnow
from models.session import UserSession
from models.user import Role, User
from services.errors import EmailAlreadyExists, InvalidCredentials, NotFound
from services.stores import SessionStore, UserStore
from utils.security import TokenIssuer, hash_password, verify_password

logger = logging.getLogger(__name__)

DEFAULT_ACCESS_TTL = timedelta(minutes=15)
DEFAULT_REFRESH_TTL = timedelta(days=7)


@dataclass(frozen=True)
class UserProfile:
    """Public projection of a user (never includes the password hash)."""

    id: str
    email: str
    full_name: str
    phone: Optional[str]
    role: Role
    avatar_url: Optional[str]
    created_at: Optional[datetime]

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            phone=user.phone,
            role=Role(user.role),
            avatar_url=user.avatar_url,
            created_at=user.created_at,
        )


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    refresh_token: str
    expires_in: int  # seconds
    user: UserProfile


class AuthService:
    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        tokens: TokenIssuer,
        access_ttl: timedelta = DEFAULT_ACCESS_TTL,
        refresh_ttl: timedelta = DEFAULT_REFRESH_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.users = users
        self.sessions = sessions
        self.tokens = tokens
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.clock = clock

    def _email_taken(self, email: str) -> bool:
        try:
            self.users.find_by_email(email)
        except NotFound:
            return False
        return True

    def _create_user(self, email: str, password: str, full_name: str, phone: str, role: Role) -> UserProfile:
        if self._email_taken(email):
            raise EmailAlreadyExists()

        user = User(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            phone=phone or None,
            role=role,
            is_active=True,
        )
        user = self.users.create(user)
        logger.info("registered %s user %s", role.value, user.id)
        return UserProfile.from_user(user)

    def register(self, email: str, password: str, full_name: str, phone: str = "") -> UserProfile:
        """Self-service sign-up; always a customer account."""
        return self._create_user(email, password, full_name, phone, Role.CUSTOMER)

    def register_admin(self, email: str, password: str, full_name: str, phone: str = "") -> UserProfile:
        """Operator-only path (CLI seeding); never exposed over HTTP."""
        return self._create_user(email, password, full_name, phone, Role.ADMIN)

    def _result(self, user: User, refresh_token: str) -> LoginResult:
        access_token = self.tokens.issue_access_token(user.id, Role(user.role), self.access_ttl)
        return LoginResult(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self.access_ttl.total_seconds()),
            user=UserProfile.from_user(user),
        )

    def login(self, email: str, password: str, user_agent: str = "", client_ip: str = "") -> LoginResult:
        try:
            user = self.users.find_by_email(email)
        except NotFound:
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentials()

        refresh_token = self.tokens.issue_refresh_token()
        # Sign before persisting so a signing failure leaves no session behind
        result = self._result(user, refresh_token)
        self.sessions.create(
            UserSession(
                user_id=user.id,
                refresh_token=refresh_token,
                user_agent=user_agent or None,
                client_ip=client_ip or None,
                is_blocked=False,
                expires_at=self.clock() + self.refresh_ttl,
            )
        )
        logger.info("user %s logged in", user.id)
        return result

    def refresh_token(self, refresh_token: str) -> LoginResult:
        try:
            session = self.sessions.find_by_token(refresh_token)
        except NotFound:
            raise InvalidCredentials()
        if not session.is_valid(self.clock()):
            raise InvalidCredentials()

        try:
            user = self.users.find_by_id(session.user_id)
        except NotFound:
            raise InvalidCredentials()

        # Same refresh token handed back; the session row is reused as is
        return self._result(user, refresh_token)

    def logout(self, refresh_token: str) -> None:
        try:
            session = self.sessions.find_by_token(refresh_token)
        except NotFound:
            raise InvalidCredentials()
        self.sessions.delete(session.id)
        logger.info("session %s revoked", session.id)

    def get_profile(self, user_id: str) -> UserProfile:
        return UserProfile.from_user(self.users.find_by_id(user_id))
