"""
Family Cookbook Backend — User and Session Models
===================================================

What:  The `users` table (moderator accounts) and the `user_sessions` table
       (server-side login sessions).

Table Design Rationale:
    - users.username is UNIQUE; lookups at login go through that index.
    - users.password_hash holds a bcrypt hash (salt and cost embedded).
    - users.name is the display name copied onto recipes and submissions.
    - user_sessions.token is the random session identifier. The cookie holds
      a signed copy of it; the row holds who the session belongs to and when
      it stops being valid (fixed expiry, no sliding renewal).
    - display_name is copied into the session row so that resolving a
      request's identity is a single primary-key lookup.
"""

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cookbook.database import Base, utcnow


class User(Base):
    """
    A moderator account.

    Lifecycle:
        Created once by the startup seed when the table is empty.
        No endpoint updates or deletes users.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(80), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"


class UserSession(Base):
    """A login session; valid while expires_at is in the future."""

    __tablename__ = "user_sessions"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    display_name: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_user_sessions_expires_at", "expires_at"),
    )

    def __repr__(self) -> str:
        return f"<UserSession(user_id={self.user_id}, expires_at='{self.expires_at}')>"
