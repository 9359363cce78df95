"""Public read-only content listings."""

from typing import Callable, List, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from kgic.domain.content import (
    Announcement,
    Book,
    ContentStore,
    ContentStoreError,
    Ministry,
    Podcast,
    Prayer,
    SmallGroup,
)
from kgic.domain.content import listings

from ..deps import get_content_store

router = APIRouter()

T = TypeVar("T")


def _run(store: Optional[ContentStore], query: Callable[[ContentStore], T], empty: T) -> T:
    """Run a listing query; an unconfigured backend yields `empty`."""
    if store is None:
        return empty
    try:
        return query(store)
    except ContentStoreError as e:
        logger.warning(f"Content query failed: {e.message}")
        raise HTTPException(502, e.message)


@router.get("/podcasts", response_model=List[Podcast])
def get_podcasts(store: Optional[ContentStore] = Depends(get_content_store)):
    return _run(store, listings.list_published_podcasts, [])


@router.get("/prayers", response_model=List[Prayer])
def get_prayers(store: Optional[ContentStore] = Depends(get_content_store)):
    return _run(store, listings.list_published_prayers, [])


@router.get("/prayers/recent", response_model=List[Prayer])
def get_recent_prayers(store: Optional[ContentStore] = Depends(get_content_store)):
    return _run(store, listings.list_recent_prayers, [])


@router.get("/prayers/{prayer_id}", response_model=Prayer)
def get_prayer(
    prayer_id: str, store: Optional[ContentStore] = Depends(get_content_store)
):
    prayer = _run(store, lambda s: listings.get_published_prayer(s, prayer_id), None)
    if prayer is None:
        raise HTTPException(404, "Prayer not found")
    return prayer


@router.get("/announcements", response_model=List[Announcement])
def get_announcements(store: Optional[ContentStore] = Depends(get_content_store)):
    return _run(store, listings.list_announcements, [])


@router.get("/ministries", response_model=List[Ministry])
def get_ministries(store: Optional[ContentStore] = Depends(get_content_store)):
    return _run(store, listings.list_active_ministries, [])


@router.get("/small-groups", response_model=List[SmallGroup])
def get_small_groups(store: Optional[ContentStore] = Depends(get_content_store)):
    return _run(store, listings.list_active_small_groups, [])


@router.get("/books", response_model=List[Book])
def get_books(store: Optional[ContentStore] = Depends(get_content_store)):
    return _run(store, listings.list_published_books, [])
