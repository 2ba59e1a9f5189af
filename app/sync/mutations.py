"""Create and delete requests against the authoritative store."""

import logging
from dataclasses import dataclass

from app.models.bookmark import BOOKMARKS_TABLE, OWNER_COLUMN
from app.services.exceptions import BookmarkError, ValidationError
from app.services.interfaces import BookmarkStore
from app.sync.session import SessionIdentityManager
from app.sync.view_state import LocalViewState

logger = logging.getLogger(__name__)


@dataclass
class BookmarkForm:
    """Draft input for a new bookmark."""

    title: str = ""
    url: str = ""
    submitting: bool = False

    def clear(self) -> None:
        self.title = ""
        self.url = ""


class BookmarkMutationHandler:
    """Sends add/remove requests; never edits Local View State itself.

    The visible list changes only when the matching change event arrives,
    so every mutation costs at least one round trip before it shows.
    """

    def __init__(
        self,
        store: BookmarkStore,
        session: SessionIdentityManager,
        view_state: LocalViewState,
        table: str = BOOKMARKS_TABLE,
    ):
        self.store = store
        self.session = session
        self.view_state = view_state
        self.table = table
        self.form = BookmarkForm()

    async def add(self, title: str, url: str) -> bool:
        """Submit a new bookmark for the signed-in user.

        The form keeps the input on failure and is cleared on success,
        whether or not the insert event has arrived yet.

        Returns:
            True if the store accepted the insert
        """
        self.form.title = title
        self.form.url = url

        identity = self.session.identity
        if not self.session.signed_in or identity is None:
            return False
        try:
            _validate(title, url)
        except ValidationError as e:
            logger.debug("Not submitting bookmark: %s", e)
            return False

        self.form.submitting = True
        try:
            await self.store.insert(
                self.table,
                {"title": title, "url": url, OWNER_COLUMN: identity.id},
            )
        except BookmarkError as e:
            logger.warning("Adding bookmark for %s failed: %s", identity.id, e)
            return False
        finally:
            self.form.submitting = False

        self.form.clear()
        return True

    async def remove(self, bookmark_id: str) -> bool:
        """Ask the store to delete a visible bookmark.

        Returns:
            True if the store accepted the delete
        """
        if not self.session.signed_in or bookmark_id not in self.view_state:
            return False
        try:
            await self.store.delete(self.table, bookmark_id)
        except BookmarkError as e:
            logger.warning("Deleting bookmark %s failed: %s", bookmark_id, e)
            return False
        return True


def _validate(title: str, url: str) -> None:
    if not title or not title.strip():
        raise ValidationError("title must not be empty")
    if not url or not url.strip():
        raise ValidationError("url must not be empty")
