"""Session cookie refresh for the admin dashboard."""

from fastapi import APIRouter, Depends, Request, Response
from loguru import logger

from kgic.core.config import Config
from kgic.domain.identity import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    refresh_session,
)

from ..deps import get_config
from ..schemas import OkResponse

router = APIRouter()

REFRESH_COOKIE_MAX_AGE = 60 * 60 * 24 * 30


@router.post("/auth/refresh", response_model=OkResponse)
def refresh(
    request: Request, response: Response, config: Config = Depends(get_config)
):
    """Re-issue session cookies when a refresh token is present.

    Always answers ok; a failed refresh just leaves the cookies untouched.
    """
    refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not refresh_token:
        return OkResponse()

    tokens = refresh_session(config.supabase, refresh_token)
    if tokens is None:
        logger.debug("Session refresh skipped, provider declined the token")
        return OkResponse()

    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        tokens.access_token,
        max_age=tokens.expires_in,
        httponly=True,
        samesite="lax",
        path="/",
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        tokens.refresh_token,
        max_age=REFRESH_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return OkResponse()
