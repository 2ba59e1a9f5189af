"""Database models and view record types."""

from app.models.bookmark import Bookmark, BookmarkRecord
from app.models.events import ChangeEvent, ChangeKind
from app.models.identity import Identity

__all__ = [
    "Bookmark",
    "BookmarkRecord",
    "ChangeEvent",
    "ChangeKind",
    "Identity",
]
