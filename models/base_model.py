#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixins for the Storefront API.

- Timestamps (created_at / updated_at) on every model, set in Python so they
  are available right after a flush on every backend
- UUID String(36) primary keys for identity tables (users, sessions)
- Integer autoincrement primary keys for catalog tables, because SKUs embed
  the variant's numeric id
- SoftDeleteMixin for rows that are hidden instead of removed

Note: put mixins BEFORE BaseModel in the bases list so their columns and
methods win via MRO.
  Example:
    class User(UUIDPrimaryKeyMixin, SoftDeleteMixin, BaseModel, Base): ...
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, Integer, DateTime
from sqlalchemy.orm import declarative_base

# Declarative base for all models
Base = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """
    Normalize a datetime read back from the database.
    SQLite drops the offset on DateTime(timezone=True) columns, so naive values
    are treated as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


class BaseModel:
    """
    Base mixin for all persistent models: created_at / updated_at plus a
    kwargs constructor.
    """

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        Primary keys and timestamps are filled by column defaults on flush
        unless passed explicitly (e.g., in tests).
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={getattr(self, 'id', None)}>"


class UUIDPrimaryKeyMixin:
    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)


class IntegerPrimaryKeyMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)


class SoftDeleteMixin:
    """
    Adds a deleted_at timestamp. Soft-deleted rows stay in the table but are
    filtered out by the stores (query.filter(Model.deleted_at.is_(None))).
    """

    deleted_at = Column(DateTime(timezone=True), nullable=True)
