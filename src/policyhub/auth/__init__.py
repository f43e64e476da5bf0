"""Authentication: sessions, token exchange and password sign-in."""

from policyhub.auth.exchange import EstablishedSession, SessionExchange
from policyhub.auth.password import PasswordLogin
from policyhub.auth.sessions import SessionService, SessionUser

__all__ = [
    "EstablishedSession",
    "PasswordLogin",
    "SessionExchange",
    "SessionService",
    "SessionUser",
]
