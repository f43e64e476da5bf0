"""Session model for standard sessions and single-use temporary tokens."""

from datetime import datetime
from enum import Enum

from sqlalchemy import ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UTCDateTime, utcnow


class SessionKind(str, Enum):
    """Distinguishes hand-off tokens from browser sessions."""

    TEMPORARY = "temporary"  # Single-use, exchanged for a standard session
    STANDARD = "standard"  # Long-lived cookie session


class Session(Base):
    """A server-side session keyed by an opaque random id."""

    __tablename__ = "sessions"
    __table_args__ = (
        Index("idx_session_user", "user_id"),
        Index("idx_session_expires", "expires_at"),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[str] = mapped_column(
        String(20), nullable=False, default=SessionKind.STANDARD.value
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), default=utcnow, nullable=False
    )
    last_accessed: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), default=utcnow, nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    def __repr__(self) -> str:
        return f"<Session(user={self.user_id}, kind={self.kind})>"
