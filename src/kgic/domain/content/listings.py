"""
Public listing queries and display formatting for site content.
"""

from datetime import date, datetime, timezone
from typing import List, Optional, Union

from .models import (
    Announcement,
    Book,
    Collection,
    Ministry,
    Podcast,
    Prayer,
    RecordId,
    SmallGroup,
)
from .store import ContentStore, Order

PUBLISHED = {"status": "published"}
ACTIVE = {"status": "active"}

PODCAST_ORDER = (Order("published_at", descending=True),)
PRAYER_ORDER = (
    Order("is_featured", descending=True),
    Order("scheduled_for", descending=True),
    Order("created_at", descending=True),
)
RECENT_PRAYER_ORDER = (
    Order("scheduled_for", descending=True),
    Order("created_at", descending=True),
)
ANNOUNCEMENT_ORDER = (
    Order("pinned", descending=True),
    Order("starts_at", descending=True, nulls_last=True),
    Order("created_at", descending=True),
)
NAME_ORDER = (Order("name"),)
TITLE_ORDER = (Order("title"),)

RECENT_PRAYERS_LIMIT = 10

# Ordering used by the admin dashboard tables
ADMIN_ORDERS: dict[Collection, tuple[Order, ...]] = {
    Collection.PRAYERS: RECENT_PRAYER_ORDER,
    Collection.PODCASTS: (
        Order("published_at", descending=True),
        Order("created_at", descending=True),
    ),
    Collection.ANNOUNCEMENTS: (
        Order("pinned", descending=True),
        Order("starts_at", descending=True),
        Order("created_at", descending=True),
    ),
    Collection.MINISTRIES: (Order("status"), Order("created_at", descending=True)),
    Collection.SMALL_GROUPS: (Order("status"), Order("created_at", descending=True)),
    Collection.BOOKS: (Order("created_at", descending=True),),
}


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def list_published_podcasts(store: ContentStore) -> List[Podcast]:
    return store.list_records(Podcast, filters=PUBLISHED, order=PODCAST_ORDER)


def list_published_prayers(
    store: ContentStore, today: Optional[date] = None
) -> List[Prayer]:
    """Featured prayers plus those scheduled up to today, featured first."""
    today = today or datetime.now(timezone.utc).date()
    prayers = store.list_records(Prayer, filters=PUBLISHED, order=PRAYER_ORDER)
    return [
        prayer
        for prayer in prayers
        if prayer.is_featured
        or (prayer.scheduled_for is not None and prayer.scheduled_for.date() <= today)
    ]


def list_recent_prayers(
    store: ContentStore, limit: int = RECENT_PRAYERS_LIMIT
) -> List[Prayer]:
    rows = store.list(
        Collection.PRAYERS, filters=PUBLISHED, order=RECENT_PRAYER_ORDER, limit=limit
    )
    return [Prayer.model_validate(row) for row in rows]


def get_published_prayer(store: ContentStore, prayer_id: RecordId) -> Optional[Prayer]:
    """Fetch one prayer; drafts and archived prayers are treated as missing."""
    prayer = store.get_record(Prayer, prayer_id)
    if prayer is None or prayer.status != "published":
        return None
    return prayer


def list_announcements(
    store: ContentStore, now: Optional[datetime] = None
) -> List[Announcement]:
    """Published announcements that have not ended yet, pinned first."""
    now = _as_utc(now or datetime.now(timezone.utc))
    announcements = store.list_records(
        Announcement, filters=PUBLISHED, order=ANNOUNCEMENT_ORDER
    )
    return [a for a in announcements if a.ends_at is None or _as_utc(a.ends_at) >= now]


def list_active_ministries(store: ContentStore) -> List[Ministry]:
    return store.list_records(Ministry, filters=ACTIVE, order=NAME_ORDER)


def list_active_small_groups(store: ContentStore) -> List[SmallGroup]:
    return store.list_records(SmallGroup, filters=ACTIVE, order=NAME_ORDER)


def list_published_books(store: ContentStore) -> List[Book]:
    return store.list_records(Book, filters=PUBLISHED, order=TITLE_ORDER)


def format_duration(seconds: Optional[float]) -> str:
    """Format a duration as m:ss, or an empty string when unknown."""
    if not seconds or seconds <= 0:
        return ""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def format_date(value: Union[str, datetime, None]) -> str:
    """Format a timestamp as e.g. 'Mar 5, 2025', or an empty string."""
    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return ""
    return f"{value:%b} {value.day}, {value.year}"
