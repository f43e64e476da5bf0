"""Organization-scoped JSON settings."""

from datetime import datetime
from typing import Any

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, PortableJSON, UTCDateTime, utcnow


class Setting(Base):
    """A key/value configuration entry owned by one organization.

    (organization_id, setting_key) is unique; writes go through an upsert
    that overwrites the value and refreshes updated_at.
    """

    __tablename__ = "settings"
    __table_args__ = (
        UniqueConstraint("organization_id", "setting_key", name="uq_setting_org_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    setting_key: Mapped[str] = mapped_column(String(255), nullable=False)
    setting_value: Mapped[Any] = mapped_column(PortableJSON(), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), server_default=func.now(), default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<Setting(org={self.organization_id}, key={self.setting_key})>"
