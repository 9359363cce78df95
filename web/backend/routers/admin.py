"""Admin dashboard CRUD over the content collections.

Every route acts with the signed-in user's session, so the hosted backend's
row level security decides what the user may change. Store failures are
surfaced verbatim for the dashboard forms.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from loguru import logger
from pydantic import ValidationError

from kgic.domain.content import (
    Collection,
    ContentRecord,
    ContentStore,
    ContentStoreError,
    record_type_for,
    writable_fields,
)
from kgic.domain.content.listings import ADMIN_ORDERS

from ..deps import get_user_store
from ..schemas import OkResponse

router = APIRouter()


def _resolve(collection: str) -> type[ContentRecord]:
    try:
        return record_type_for(collection.replace("-", "_"))
    except ValueError:
        raise HTTPException(404, f"Unknown collection: {collection}")


def _validation_detail(error: ValidationError) -> list[dict[str, Any]]:
    return [
        {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in error.errors()
    ]


def _validate(kind: type[ContentRecord], data: dict[str, Any]) -> ContentRecord:
    try:
        return kind.model_validate(data)
    except ValidationError as e:
        raise HTTPException(422, _validation_detail(e))


def _store_error(action: str, collection: Collection, error: ContentStoreError):
    logger.warning(f"Admin {action} on {collection.value} failed: {error.message}")
    return HTTPException(400, error.message)


@router.get("/admin/{collection}")
def list_collection(collection: str, store: ContentStore = Depends(get_user_store)):
    kind = _resolve(collection)
    try:
        return store.list_records(kind, order=ADMIN_ORDERS[kind.collection])
    except ContentStoreError as e:
        raise _store_error("list", kind.collection, e)


@router.post("/admin/{collection}", status_code=201)
def create_record(
    collection: str,
    payload: dict[str, Any] = Body(...),
    store: ContentStore = Depends(get_user_store),
):
    kind = _resolve(collection)
    record = _validate(kind, payload)
    row = record.model_dump(mode="json", include=writable_fields(kind))
    try:
        created = store.insert(kind.collection, row)
    except ContentStoreError as e:
        raise _store_error("insert", kind.collection, e)
    logger.info(f"Created {kind.collection.value} record {created.get('id')}")
    return kind.model_validate(created)


@router.patch("/admin/{collection}/{record_id}")
def update_record(
    collection: str,
    record_id: str,
    patch: dict[str, Any] = Body(...),
    store: ContentStore = Depends(get_user_store),
):
    """Merge a partial update into the stored row and write back the changed fields."""
    kind = _resolve(collection)
    try:
        existing = store.get(kind.collection, record_id)
    except ContentStoreError as e:
        raise _store_error("read", kind.collection, e)
    if existing is None:
        raise HTTPException(404, f"No {kind.collection.value} record {record_id}")

    record = _validate(kind, {**existing, **patch})
    changed = writable_fields(kind) & set(patch)
    if not changed:
        return record

    try:
        updated = store.update(
            kind.collection, record_id, record.model_dump(mode="json", include=changed)
        )
    except ContentStoreError as e:
        raise _store_error("update", kind.collection, e)
    logger.info(f"Updated {kind.collection.value} record {record_id}: {sorted(changed)}")
    return kind.model_validate(updated)


@router.delete("/admin/{collection}/{record_id}", response_model=OkResponse)
def delete_record(
    collection: str, record_id: str, store: ContentStore = Depends(get_user_store)
):
    kind = _resolve(collection)
    try:
        store.delete(kind.collection, record_id)
    except ContentStoreError as e:
        raise _store_error("delete", kind.collection, e)
    logger.info(f"Deleted {kind.collection.value} record {record_id}")
    return OkResponse()
