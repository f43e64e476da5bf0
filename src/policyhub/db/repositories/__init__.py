"""Repositories wrapping data access for each model."""

from policyhub.db.repositories.base import BaseRepository
from policyhub.db.repositories.organization import OrganizationRepository, PortalRepository
from policyhub.db.repositories.session import SessionRepository
from policyhub.db.repositories.setting import SettingRepository
from policyhub.db.repositories.user import UserPasswordRepository, UserRepository

__all__ = [
    "BaseRepository",
    "OrganizationRepository",
    "PortalRepository",
    "SessionRepository",
    "SettingRepository",
    "UserPasswordRepository",
    "UserRepository",
]
