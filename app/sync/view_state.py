"""Local View State: the session's ordered copy of its bookmarks."""

import logging
from typing import Iterator, Optional

from app.models import BookmarkRecord

logger = logging.getLogger(__name__)


class LocalViewState:
    """Bookmarks sorted by ``created_at`` descending, unique by ``id``.

    Every reconciliation step is idempotent: applying an insert that is
    already present, or a delete that is already gone, changes nothing.
    """

    def __init__(self):
        self._items: list[BookmarkRecord] = []
        self._ids: set[str] = set()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[BookmarkRecord]:
        return iter(list(self._items))

    def __contains__(self, bookmark_id: object) -> bool:
        return bookmark_id in self._ids

    @property
    def items(self) -> list[BookmarkRecord]:
        """Snapshot of the current bookmarks, newest first."""
        return list(self._items)

    def get(self, bookmark_id: str) -> Optional[BookmarkRecord]:
        for item in self._items:
            if item.id == bookmark_id:
                return item
        return None

    def replace(self, records: list[BookmarkRecord]) -> None:
        """Swap in a freshly fetched list wholesale."""
        unique: dict[str, BookmarkRecord] = {}
        for record in records:
            unique.setdefault(record.id, record)
        self._items = sorted(unique.values(), key=lambda r: r.created_at, reverse=True)
        self._ids = set(unique)

    def clear(self) -> None:
        self._items = []
        self._ids = set()

    def apply_insert(self, record: BookmarkRecord) -> bool:
        """Add a bookmark unless its id is already present.

        Events normally arrive in creation order, so the new record lands
        at the front. A late event is placed by its timestamp instead.

        Returns:
            True if the view changed
        """
        if record.id in self._ids:
            logger.debug("Insert for %s already applied", record.id)
            return False

        index = 0
        while index < len(self._items) and self._items[index].created_at > record.created_at:
            index += 1
        if index:
            logger.debug("Insert for %s arrived out of order", record.id)

        self._items.insert(index, record)
        self._ids.add(record.id)
        return True

    def apply_delete(self, bookmark_id: str) -> bool:
        """Remove a bookmark if present.

        Returns:
            True if the view changed
        """
        if bookmark_id not in self._ids:
            return False
        self._items = [item for item in self._items if item.id != bookmark_id]
        self._ids.discard(bookmark_id)
        return True
