"""Bookmark row model and the immutable record the view holds."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

BOOKMARKS_TABLE = "bookmarks"

# Column row-level policy and subscriptions compare against the identity
OWNER_COLUMN = "user_id"


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what SQLite hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Bookmark(Base):
    """A saved link owned by one user.

    Rows are only ever inserted or deleted; there is no edit path.
    """

    __tablename__ = BOOKMARKS_TABLE

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    url: Mapped[str] = mapped_column(Text)
    title: Mapped[str] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    def to_row(self) -> dict[str, Any]:
        """Convert to the plain row shape the store and change feed emit."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "url": self.url,
            "title": self.title,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class BookmarkRecord:
    """One bookmark as held in a session's Local View State.

    Attributes:
        id: Store-assigned identifier
        url: User-supplied link
        title: User-supplied label
        created_at: Store-assigned insertion time, the sole sort key
        user_id: Owner of the bookmark
    """

    id: str
    url: str
    title: str
    created_at: datetime
    user_id: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "BookmarkRecord":
        created_at = row["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        # Compare everything as naive UTC
        if created_at.tzinfo is not None:
            created_at = created_at.astimezone(timezone.utc).replace(tzinfo=None)
        return cls(
            id=str(row["id"]),
            url=row["url"],
            title=row["title"],
            created_at=created_at,
            user_id=str(row["user_id"]),
        )
