"""
UserSession model: one row per issued refresh token.
Fields:
- id (UUID)
- user_id (String(36)) - FK to users.id
- refresh_token: opaque secret, unique lookup key for refresh/logout
- user_agent, client_ip: where the login came from
- is_blocked, expires_at: a session is usable iff not blocked and not expired
"""
from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey

from models.base_model import BaseModel, Base, UUIDPrimaryKeyMixin, as_utc


class UserSession(UUIDPrimaryKeyMixin, BaseModel, Base):
    __tablename__ = "sessions"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    refresh_token = Column(String(512), nullable=False, unique=True, index=True)
    user_agent = Column(String(255), nullable=True)
    client_ip = Column(String(50), nullable=True)
    is_blocked = Column(Boolean, nullable=False, default=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def is_valid(self, now: datetime) -> bool:
        return not self.is_blocked and now < as_utc(self.expires_at)
