"""Bookmark view: the per-session state container and its lifecycle."""

import logging
from typing import Callable, Optional

from app.models import BookmarkRecord, Identity
from app.services.exceptions import BookmarkError
from app.services.interfaces import AuthProvider, BookmarkStore, ChangeStream
from app.sync.mutations import BookmarkForm, BookmarkMutationHandler
from app.sync.session import SessionIdentityManager
from app.sync.subscription import SubscriptionManager
from app.sync.view_state import LocalViewState

logger = logging.getLogger(__name__)


class BookmarkView:
    """Everything one open view of the bookmark list owns.

    ``mount`` restores the session, starts listening for auth changes and,
    when signed in, follows the user's bookmarks. ``unmount`` releases the
    auth listener and the subscription. Also usable as::

        async with BookmarkView(auth, store, stream) as view:
            await view.add("Example", "https://example.com")
    """

    def __init__(self, auth: AuthProvider, store: BookmarkStore, stream: ChangeStream):
        self.auth = auth
        self.view_state = LocalViewState()
        self.session = SessionIdentityManager(auth, self.view_state)
        self.subscriptions = SubscriptionManager(store, stream, self.view_state)
        self.mutations = BookmarkMutationHandler(store, self.session, self.view_state)
        self.mounted = False

    async def __aenter__(self) -> "BookmarkView":
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.unmount()

    @property
    def loading(self) -> bool:
        return self.session.loading

    @property
    def identity(self) -> Optional[Identity]:
        return self.session.identity

    @property
    def bookmarks(self) -> list[BookmarkRecord]:
        return self.view_state.items

    @property
    def stale(self) -> bool:
        return self.subscriptions.stale

    @property
    def form(self) -> BookmarkForm:
        return self.mutations.form

    async def mount(self) -> None:
        if self.mounted:
            return
        self.mounted = True
        self.session.observe_auth_changes(self._on_identity_change)
        identity = await self.session.restore_session()
        if identity is not None:
            await self.subscriptions.start(identity)

    async def unmount(self) -> None:
        if not self.mounted:
            return
        self.mounted = False
        self.session.teardown()
        await self.subscriptions.stop()

    async def add(self, title: str, url: str) -> bool:
        return await self.mutations.add(title, url)

    async def remove(self, bookmark_id: str) -> bool:
        return await self.mutations.remove(bookmark_id)

    async def sign_out(self) -> None:
        try:
            await self.auth.sign_out()
        except BookmarkError as e:
            logger.warning("Sign-out failed: %s", e)
        await self.subscriptions.stop()
        self.session.identity = None
        self.view_state.clear()

    def on_change(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register ``callback`` for every reconciliation that changes the list."""
        return self.subscriptions.on_change(callback)

    async def wait_idle(self) -> None:
        """Wait for every change event delivered so far to be reconciled."""
        await self.subscriptions.wait_idle()

    async def _on_identity_change(self, identity: Optional[Identity]) -> None:
        if identity is None:
            await self.subscriptions.stop()
            return

        current = self.subscriptions.identity
        if current == identity and self.subscriptions.active and not self.stale:
            # Token refresh for the same user
            return
        await self.subscriptions.start(identity)
