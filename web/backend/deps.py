from typing import Any, Optional

from fastapi import Depends, HTTPException, Request

from kgic.core.config import Config, load_config
from kgic.domain.content import ContentStore
from kgic.domain.identity import ACCESS_TOKEN_COOKIE, get_user
from kgic.domain.storage import BlobStore


def get_config() -> Config:
    """FastAPI dependency for configuration."""
    return load_config()


def get_content_store(config: Config = Depends(get_config)) -> Optional[ContentStore]:
    """Public (anon key) content store, or None when the backend is not configured."""
    if not config.supabase.is_configured:
        return None
    return ContentStore.from_config(config.supabase)


def get_service_store(config: Config = Depends(get_config)) -> Optional[ContentStore]:
    """Privileged content store for server-side operations, or None."""
    if not config.supabase.has_service_role:
        return None
    return ContentStore.from_config(config.supabase, privileged=True)


def get_blob_store(config: Config = Depends(get_config)) -> Optional[BlobStore]:
    """Blob store for uploads and signing, or None without a service role key."""
    if not config.supabase.has_service_role:
        return None
    return BlobStore.from_config(config.supabase)


def get_access_token(request: Request) -> Optional[str]:
    """Access token from the Authorization header or the session cookie."""
    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(ACCESS_TOKEN_COOKIE) or None


def require_user(
    token: Optional[str] = Depends(get_access_token),
    config: Config = Depends(get_config),
) -> dict[str, Any]:
    """FastAPI dependency resolving the signed-in admin user (401 otherwise)."""
    if not token:
        raise HTTPException(401, "Not authenticated")
    user = get_user(config.supabase, token)
    if user is None:
        raise HTTPException(401, "Invalid or expired session")
    return user


def get_user_store(
    user: dict[str, Any] = Depends(require_user),
    token: Optional[str] = Depends(get_access_token),
    config: Config = Depends(get_config),
) -> ContentStore:
    """Content store acting with the signed-in user's session."""
    return ContentStore.from_config(config.supabase, access_token=token)
