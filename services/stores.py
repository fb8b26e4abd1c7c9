"""
Credential and session stores.

Each store is an abstract interface with one SQLAlchemy implementation over
DBStorage; tests swap in in-memory fakes.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy.exc import IntegrityError

from models.db_storage import DBStorage
from models.session import UserSession
from models.user import User
from services.errors import DuplicateEmail, NotFound


class UserStore(ABC):
    @abstractmethod
    def create(self, user: User) -> User:
        """Persist a new user; DuplicateEmail if the email is taken."""

    @abstractmethod
    def find_by_email(self, email: str) -> User:
        """Return the user or raise NotFound."""

    @abstractmethod
    def find_by_id(self, user_id: str) -> User:
        """Return the user or raise NotFound."""


class SessionStore(ABC):
    @abstractmethod
    def create(self, session: UserSession) -> UserSession:
        ...

    @abstractmethod
    def find_by_token(self, refresh_token: str) -> UserSession:
        """Return the session bound to refresh_token or raise NotFound."""

    @abstractmethod
    def delete(self, session_id: str) -> None:
        ...


class SQLUserStore(UserStore):
    def __init__(self, storage: DBStorage):
        self.storage = storage

    def _active(self):
        return self.storage.get_session().query(User).filter(User.deleted_at.is_(None))

    def create(self, user: User) -> User:
        self.storage.new(user)
        try:
            self.storage.save()
        except IntegrityError as err:
            # Lost a race with a concurrent registration
            raise DuplicateEmail() from err
        return user

    def find_by_email(self, email: str) -> User:
        user = self._active().filter(User.email == email).first()
        if user is None:
            raise NotFound("user not found")
        return user

    def find_by_id(self, user_id: str) -> User:
        user = self._active().filter(User.id == user_id).first()
        if user is None:
            raise NotFound("user not found")
        return user


class SQLSessionStore(SessionStore):
    def __init__(self, storage: DBStorage):
        self.storage = storage

    def create(self, session: UserSession) -> UserSession:
        self.storage.new(session)
        self.storage.save()
        return session

    def find_by_token(self, refresh_token: str) -> UserSession:
        row = (
            self.storage.get_session()
            .query(UserSession)
            .filter(UserSession.refresh_token == refresh_token)
            .first()
        )
        if row is None:
            raise NotFound("session not found")
        return row

    def delete(self, session_id: str) -> None:
        row = self.storage.get(UserSession, session_id)
        if row is None:
            raise NotFound("session not found")
        self.storage.delete(row)
        self.storage.save()
