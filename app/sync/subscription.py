"""Subscription lifecycle: one filtered change stream per signed-in identity."""

import asyncio
import contextlib
import logging
from typing import Callable, Optional

from app.models import BookmarkRecord, ChangeEvent, ChangeKind, Identity
from app.models.bookmark import BOOKMARKS_TABLE, OWNER_COLUMN
from app.services.exceptions import BookmarkError
from app.services.interfaces import BookmarkStore, ChangeStream, Subscription
from app.sync.view_state import LocalViewState

logger = logging.getLogger(__name__)


class SubscriptionManager:
    """Keeps Local View State in step with the store for one identity.

    ``start`` clears the view, fetches the identity's bookmarks and then
    applies change events as they arrive; ``stop`` closes the stream. At
    most one subscription is open at any time.
    """

    def __init__(
        self,
        store: BookmarkStore,
        stream: ChangeStream,
        view_state: LocalViewState,
        table: str = BOOKMARKS_TABLE,
    ):
        self.store = store
        self.stream = stream
        self.view_state = view_state
        self.table = table
        self.identity: Optional[Identity] = None
        self.stale = False
        self._handle: Optional[Subscription] = None
        self._pump: Optional[asyncio.Task] = None
        self._generation = 0
        self._listeners: list[Callable[[], None]] = []

    @property
    def active(self) -> bool:
        return self._handle is not None

    async def start(self, identity: Identity) -> None:
        """Fetch the identity's bookmarks and follow their changes."""
        await self.stop()
        self.view_state.clear()
        self._generation += 1
        generation = self._generation
        self.identity = identity
        self.stale = False

        filters = {OWNER_COLUMN: identity.id}
        # Subscribed before the fetch; events committed mid-fetch stay
        # queued until the fetched rows are in place.
        handle = self.stream.subscribe(self.table, filters)
        self._handle = handle

        try:
            rows = await self.store.query(self.table, filters, "created_at", descending=True)
        except BookmarkError as e:
            logger.warning("Initial fetch for %s failed: %s", identity.id, e)
            self.stale = True
            rows = []

        if generation != self._generation:
            # A newer start or stop ran while we were fetching
            return

        self.view_state.replace([BookmarkRecord.from_row(row) for row in rows])
        self._notify()
        self._pump = asyncio.create_task(self._consume(handle))
        logger.info(
            "Subscribed to %s for %s with %d bookmarks",
            self.table, identity.id, len(self.view_state),
        )

    async def stop(self) -> None:
        """Close the open subscription, if any.

        An unexpected error that ended the event pump is raised here, after
        the subscription has been released.
        """
        self._generation += 1
        handle, pump = self._handle, self._pump
        self._handle = None
        self._pump = None
        self.identity = None

        if handle is not None:
            self.stream.unsubscribe(handle)
            logger.info("Closed %s subscription", self.table)
        if pump is not None:
            pump.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await pump

    def on_change(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Call ``callback`` after every fetch or event that changes the view."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def wait_idle(self) -> None:
        """Wait until every event delivered so far has been applied."""
        if self._handle is not None and self._pump is not None and not self._pump.done():
            await self._handle.join()

    async def _consume(self, handle: Subscription) -> None:
        try:
            async for event in handle:
                try:
                    if self.apply(event):
                        self._notify()
                except (KeyError, TypeError, ValueError) as e:
                    # The view may now be missing a row until the next fetch
                    logger.warning("Skipping malformed %s event: %r", self.table, e)
                    self.stale = True
                finally:
                    handle.task_done()
        except BookmarkError as e:
            # No reconnect here; the next identity transition refetches
            logger.warning("%s subscription dropped: %s", self.table, e)
            self.stale = True

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def apply(self, event: ChangeEvent) -> bool:
        """Reconcile one change event into Local View State.

        Delete payloads may carry only the primary key; those are matched
        by id alone.

        Returns:
            True if the view changed
        """
        if self.identity is None or event.table != self.table:
            return False

        owner = event.row.get(OWNER_COLUMN)
        if event.kind == ChangeKind.INSERT and event.new is not None:
            if owner != self.identity.id:
                logger.debug("Dropping insert for another owner")
                return False
            return self.view_state.apply_insert(BookmarkRecord.from_row(event.new))

        if event.kind == ChangeKind.DELETE and event.old is not None:
            if owner is not None and owner != self.identity.id:
                logger.debug("Dropping delete for another owner")
                return False
            return self.view_state.apply_delete(str(event.old["id"]))

        # Bookmarks are immutable; updates carry nothing to reconcile
        logger.debug("Ignoring %s event", event.kind.value)
        return False
