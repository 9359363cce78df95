"""
Content domain models.

One tagged record type per hosted table. Rows coming back from the content
store are validated into these records before they reach routers or the
player, so no untyped payload crosses the store boundary.
"""

from datetime import datetime
from enum import Enum
from typing import ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from kgic.domain.playback.state import TrackDescriptor

DEFAULT_ARTIST = "KGIC"

RecordId = Union[int, str]
PublishStatus = Literal["draft", "published", "archived"]
VisibilityStatus = Literal["active", "hidden"]


class Collection(str, Enum):
    PRAYERS = "prayers"
    PODCASTS = "podcasts"
    BOOKS = "books"
    ANNOUNCEMENTS = "announcements"
    MINISTRIES = "ministries"
    SMALL_GROUPS = "small_groups"


class ContentRecord(BaseModel):
    """Base for all content rows."""

    model_config = ConfigDict(extra="ignore")

    collection: ClassVar[Collection]

    id: Optional[RecordId] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Prayer(ContentRecord):
    collection: ClassVar[Collection] = Collection.PRAYERS

    title: str
    content: str = ""
    author: Optional[str] = None
    excerpt: Optional[str] = None
    is_featured: bool = False
    status: PublishStatus = "draft"
    scheduled_for: Optional[datetime] = None


class Podcast(ContentRecord):
    collection: ClassVar[Collection] = Collection.PODCASTS

    title: str
    description: Optional[str] = None
    artist: Optional[str] = None
    audio_url: str
    duration_seconds: Optional[int] = Field(default=None, ge=0)
    status: PublishStatus = "draft"
    published_at: Optional[datetime] = None
    image_url: Optional[str] = None
    play_count: int = 0

    def to_track(self) -> TrackDescriptor:
        """Build the track descriptor handed to the playback coordinator."""
        return TrackDescriptor(
            id=self.id if self.id is not None else self.audio_url,
            title=self.title,
            artist=self.artist or DEFAULT_ARTIST,
            audio_url=self.audio_url,
            image_url=self.image_url,
        )


class Book(ContentRecord):
    collection: ClassVar[Collection] = Collection.BOOKS

    title: str
    author: Optional[str] = None
    price: float = Field(default=0.0, ge=0)
    cover_url: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    reading_time: Optional[str] = None
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    status: PublishStatus = "draft"


class Announcement(ContentRecord):
    collection: ClassVar[Collection] = Collection.ANNOUNCEMENTS

    title: str
    body: Optional[str] = None
    link_url: Optional[str] = None
    pinned: bool = False
    status: PublishStatus = "draft"
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None


class Ministry(ContentRecord):
    collection: ClassVar[Collection] = Collection.MINISTRIES

    name: str
    short_desc: Optional[str] = None
    contact_link: Optional[str] = None
    status: VisibilityStatus = "active"


class SmallGroup(ContentRecord):
    collection: ClassVar[Collection] = Collection.SMALL_GROUPS

    name: str
    schedule: Optional[str] = None
    contact_link: Optional[str] = None
    location: Optional[str] = None
    status: VisibilityStatus = "active"


RECORD_TYPES: dict[Collection, type[ContentRecord]] = {
    record_type.collection: record_type
    for record_type in (Prayer, Podcast, Book, Announcement, Ministry, SmallGroup)
}

# Columns managed by the database, never written by clients
SERVER_FIELDS = frozenset({"id", "created_at", "updated_at"})


def record_type_for(collection: Union[Collection, str]) -> type[ContentRecord]:
    """Look up the record type for a collection name.

    Raises:
        ValueError: If the collection is unknown
    """
    return RECORD_TYPES[Collection(collection)]


def writable_fields(record_type: type[ContentRecord]) -> frozenset[str]:
    return frozenset(record_type.model_fields) - SERVER_FIELDS
