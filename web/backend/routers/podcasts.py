"""Podcast media routes: uploads, URL signing and play counting."""

import re
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from kgic.core.config import Config
from kgic.domain.content import ContentStore, ContentStoreError
from kgic.domain.storage import BlobStore, BlobStoreError, UploadRejected
from kgic.domain.storage.blob_store import object_path_from_url
from kgic.domain.storage.uploads import (
    AUDIO_PREFIX,
    COVER_ART_PREFIX,
    object_path,
    validate_audio,
    validate_image,
)

from ..deps import get_blob_store, get_config, get_service_store
from ..schemas import (
    IncrementPlayRequest,
    OkResponse,
    SignUrlRequest,
    SignUrlResponse,
    UploadResponse,
)

router = APIRouter()

INCREMENT_RPC = "increment_podcast_play_count"
RPC_MISSING_PATTERN = re.compile(r"function .*increment_podcast_play_count", re.IGNORECASE)

NOT_CONFIGURED_FOR_UPLOADS = "Server is not configured for uploads"


def _error(message: str, status_code: int, code: Optional[str] = None) -> JSONResponse:
    body: dict[str, Any] = {"error": message}
    if code:
        body["code"] = code
    return JSONResponse(body, status_code=status_code)


async def _json_body(request: Request) -> dict[str, Any]:
    """Request JSON as a dict; an unreadable body counts as empty."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


async def _store_upload(
    blob_store: BlobStore, bucket: str, path: str, data: bytes, content_type: str
) -> UploadResponse | JSONResponse:
    """Upload through the blocking storage client without stalling the event loop."""
    await run_in_threadpool(blob_store.ensure_bucket, bucket, public=True)
    try:
        result = await run_in_threadpool(
            blob_store.upload, bucket, path, data, content_type
        )
    except BlobStoreError as e:
        logger.warning(f"Upload to {bucket}/{path} failed: {e.message}")
        return _error(e.message, 400)
    return UploadResponse(path=result.path, public_url=result.public_url)


@router.post("/podcasts/upload", response_model=UploadResponse)
async def upload_audio(
    file: Optional[UploadFile] = File(None),
    config: Config = Depends(get_config),
    blob_store: Optional[BlobStore] = Depends(get_blob_store),
):
    if file is None:
        return _error("No file provided", 400)
    try:
        upload = validate_audio(file.filename, file.content_type)
    except UploadRejected as e:
        return _error(e.message, 400)
    if blob_store is None:
        return _error(NOT_CONFIGURED_FOR_UPLOADS, 500)

    data = await file.read()
    path = object_path(AUDIO_PREFIX, upload.extension)
    return await _store_upload(
        blob_store, config.supabase.podcasts_bucket, path, data, upload.content_type
    )


@router.post("/podcasts/cover-art", response_model=UploadResponse)
async def upload_cover_art(
    file: Optional[UploadFile] = File(None),
    config: Config = Depends(get_config),
    blob_store: Optional[BlobStore] = Depends(get_blob_store),
):
    if file is None:
        return _error("No file provided", 400)
    data = await file.read()
    try:
        upload = validate_image(file.filename, file.content_type, len(data))
    except UploadRejected as e:
        return _error(e.message, 400)
    if blob_store is None:
        return _error(NOT_CONFIGURED_FOR_UPLOADS, 500)

    path = object_path(COVER_ART_PREFIX, upload.extension)
    return await _store_upload(
        blob_store, config.supabase.podcasts_bucket, path, data, upload.content_type
    )


@router.post("/podcasts/sign-url", response_model=SignUrlResponse)
async def sign_url(
    request: Request,
    config: Config = Depends(get_config),
    blob_store: Optional[BlobStore] = Depends(get_blob_store),
):
    """Return a time-limited playback URL for an object in the podcasts bucket.

    Without a service role key the original URL is handed back unchanged.
    """
    try:
        payload = SignUrlRequest.model_validate(await _json_body(request))
    except ValidationError:
        payload = SignUrlRequest()

    if blob_store is None:
        if not payload.url:
            return _error("No URL or path provided", 400)
        return SignUrlResponse(url=payload.url)

    bucket = config.supabase.podcasts_bucket
    if payload.path:
        path = payload.path.lstrip("/")
    elif payload.url:
        path = object_path_from_url(payload.url, bucket)
    else:
        path = None
    if not path:
        return _error("Unsupported URL or path", 400)

    try:
        signed = await run_in_threadpool(
            blob_store.create_signed_url,
            bucket,
            path,
            config.supabase.signed_url_ttl_seconds,
        )
    except BlobStoreError as e:
        logger.warning(f"Signing {bucket}/{path} failed: {e.message}")
        return _error(e.message or "Failed to sign URL", 400)
    return SignUrlResponse(url=signed)


@router.post("/podcasts/increment-play", response_model=OkResponse)
async def increment_play(
    request: Request,
    store: Optional[ContentStore] = Depends(get_service_store),
):
    try:
        payload = IncrementPlayRequest.model_validate(await _json_body(request))
    except ValidationError:
        payload = IncrementPlayRequest()
    if not payload.id:
        return _error("Missing id", 400)
    if store is None:
        return _error("Server is not configured", 500)

    try:
        await run_in_threadpool(store.rpc, INCREMENT_RPC, {"p_id": payload.id})
    except ContentStoreError as e:
        if RPC_MISSING_PATTERN.search(e.message or ""):
            logger.error(f"{INCREMENT_RPC} is not provisioned: {e.message}")
            return _error(
                f"RPC {INCREMENT_RPC} not found. Run migrations.", 501, code="RPC_MISSING"
            )
        logger.warning(f"Play count increment for {payload.id} failed: {e.message}")
        return _error(e.message or "Failed to increment", 500)

    return OkResponse()
