"""
Content domain: typed site records, the hosted content store and public listings.
"""

from .models import (
    RECORD_TYPES,
    Announcement,
    Book,
    Collection,
    ContentRecord,
    Ministry,
    Podcast,
    Prayer,
    SmallGroup,
    record_type_for,
    writable_fields,
)
from .store import ContentStore, ContentStoreError, Order

__all__ = [
    "RECORD_TYPES",
    "Announcement",
    "Book",
    "Collection",
    "ContentRecord",
    "ContentStore",
    "ContentStoreError",
    "Ministry",
    "Order",
    "Podcast",
    "Prayer",
    "SmallGroup",
    "record_type_for",
    "writable_fields",
]
