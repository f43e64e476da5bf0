"""Database models for PolicyHub."""

from .base import Base, PortableJSON, TimestampMixin, UTCDateTime, utcnow
from .organization import Organization
from .portal import Portal, PortalAccessType
from .session import Session, SessionKind
from .setting import Setting
from .user import OAuthAccount, User, UserPassword, UserRole

__all__ = [
    "Base",
    "PortableJSON",
    "TimestampMixin",
    "UTCDateTime",
    "utcnow",
    "Organization",
    "Portal",
    "PortalAccessType",
    "Session",
    "SessionKind",
    "Setting",
    "OAuthAccount",
    "User",
    "UserPassword",
    "UserRole",
]
