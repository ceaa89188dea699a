from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from ulid import ULID


class ContentType(str, Enum):
    TEXT = "text"
    LINK = "link"
    ARTICLE = "article"
    IMAGE = "image"


def new_item_id() -> str:
    return f"i_{ULID()}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ContentItem:
    """Immutable captured unit. Only ever created by ingestion and removed by id."""
    id: str
    type: ContentType
    content: str
    tags: Tuple[str, ...] = ()
    created_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(cls, type: ContentType, content: str,
               created_at: Optional[datetime] = None) -> "ContentItem":
        return cls(
            id=new_item_id(),
            type=ContentType(type),
            content=content,
            tags=(),
            created_at=created_at or _utcnow(),
        )
