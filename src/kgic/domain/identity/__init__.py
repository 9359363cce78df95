"""
Identity domain: access token verification and session refresh.
"""

from .session import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    SessionTokens,
    get_user,
    refresh_session,
)

__all__ = [
    "ACCESS_TOKEN_COOKIE",
    "REFRESH_TOKEN_COOKIE",
    "SessionTokens",
    "get_user",
    "refresh_session",
]
