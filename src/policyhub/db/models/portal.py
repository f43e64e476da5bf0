"""Portal model: a public or authenticated view onto an organization's policies."""

from enum import Enum

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class PortalAccessType(str, Enum):
    """Who may view a portal."""

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"


class Portal(TimestampMixin, Base):
    """Named view through which policies are exposed to an audience."""

    __tablename__ = "portals"
    __table_args__ = (UniqueConstraint("organization_id", "slug", name="uq_portal_org_slug"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    access_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PortalAccessType.PUBLIC.value
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Portal(id={self.id}, org={self.organization_id}, slug={self.slug})>"
