"""In-process stand-in for the hosted platform.

Shares one database and one change feed between any number of client
sessions, each with its own auth provider and identity-scoped store.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models import Identity
from app.services.auth_provider import LocalAuthProvider
from app.services.bookmark_store import SqlBookmarkStore
from app.services.change_feed import ChangeFeed
from app.sync import BookmarkView


class LocalBackend:
    """Database plus change feed, handing out per-session clients."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory
        self.feed = ChangeFeed()

    def connect(
        self, identity: Optional[Identity] = None
    ) -> tuple[LocalAuthProvider, SqlBookmarkStore]:
        """Create a client session, optionally already signed in."""
        auth = LocalAuthProvider(identity)
        store = SqlBookmarkStore(self.session_factory, self.feed, auth)
        return auth, store

    def open_view(self, identity: Optional[Identity] = None) -> BookmarkView:
        """Create an unmounted view over a new client session."""
        auth, store = self.connect(identity)
        return BookmarkView(auth, store, self.feed)
