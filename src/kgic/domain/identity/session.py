"""
Identity provider session helpers.

Admin pages authenticate with the hosted identity provider; the web backend
only needs to verify an access token and trade a refresh token for a new pair.
"""

from typing import Any, NamedTuple, Optional

import requests
from loguru import logger

from kgic.core.config import SupabaseConfig

AUTH_PATH = "/auth/v1"
ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"


class SessionTokens(NamedTuple):
    access_token: str
    refresh_token: str
    expires_in: int = 3600


def _headers(config: SupabaseConfig, access_token: Optional[str] = None) -> dict[str, str]:
    return {
        "apikey": config.anon_key,
        "Authorization": f"Bearer {access_token or config.anon_key}",
    }


def get_user(config: SupabaseConfig, access_token: str) -> Optional[dict[str, Any]]:
    """Look up the user owning an access token.

    Returns:
        User dict, or None if the token is invalid or the provider is unreachable
    """
    if not config.is_configured or not access_token:
        return None

    try:
        response = requests.get(
            f"{config.url}{AUTH_PATH}/user",
            headers=_headers(config, access_token),
            timeout=30,
        )
    except requests.RequestException as e:
        logger.warning(f"Identity provider unreachable: {e}")
        return None

    if response.status_code != 200:
        logger.debug(f"Access token rejected ({response.status_code})")
        return None
    try:
        user = response.json()
    except ValueError:
        logger.warning("Identity provider returned an unreadable user")
        return None
    return user if isinstance(user, dict) else None


def refresh_session(
    config: SupabaseConfig, refresh_token: str
) -> Optional[SessionTokens]:
    """Exchange a refresh token for a fresh token pair.

    Returns:
        New tokens, or None if the refresh failed
    """
    if not config.is_configured or not refresh_token:
        return None

    try:
        response = requests.post(
            f"{config.url}{AUTH_PATH}/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
            headers=_headers(config),
            timeout=30,
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Failed to refresh session: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning("Session refresh returned an unexpected payload")
        return None

    access_token = data.get("access_token")
    if not access_token:
        logger.warning("Session refresh returned no access token")
        return None

    return SessionTokens(
        access_token=access_token,
        # Preserve refresh token if not included in response
        refresh_token=data.get("refresh_token") or refresh_token,
        expires_in=int(data.get("expires_in", 3600)),
    )
