"""Tracks the session identity and forwards its transitions."""

import logging
from typing import Optional

from app.models import Identity
from app.services.exceptions import BookmarkError
from app.services.interfaces import AuthProvider, IdentityCallback, Unsubscribe
from app.sync.view_state import LocalViewState

logger = logging.getLogger(__name__)


class SessionIdentityManager:
    """Single authenticated identity for one view, or None.

    The view is ``loading`` until ``restore_session`` has completed, and no
    bookmark operation is allowed before then. Every transition to None
    clears Local View State.
    """

    def __init__(self, auth: AuthProvider, view_state: LocalViewState):
        self.auth = auth
        self.view_state = view_state
        self.identity: Optional[Identity] = None
        self.loading = True
        self._unsubscribers: list[Unsubscribe] = []
        self._disposed = False

    @property
    def signed_in(self) -> bool:
        return not self.loading and self.identity is not None

    async def restore_session(self) -> Optional[Identity]:
        """Pick up an existing session from the auth provider."""
        try:
            identity = await self.auth.get_current_identity()
        except BookmarkError as e:
            logger.warning("Session restore failed: %s", e)
            identity = None

        self._set_identity(identity)
        self.loading = False
        if identity is not None:
            logger.info("Restored session for %s", identity.id)
        return identity

    def observe_auth_changes(self, callback: IdentityCallback) -> Unsubscribe:
        """Forward sign-in, sign-out and refresh notifications to ``callback``.

        Nothing is forwarded once ``teardown`` has run.
        """

        async def listener(identity: Optional[Identity]) -> None:
            if self._disposed:
                return
            self._set_identity(identity)
            await callback(identity)

        unsubscribe = self.auth.on_identity_change(listener)
        self._unsubscribers.append(unsubscribe)
        return unsubscribe

    def teardown(self) -> None:
        """Release every auth listener registered through this manager."""
        self._disposed = True
        while self._unsubscribers:
            self._unsubscribers.pop()()

    def _set_identity(self, identity: Optional[Identity]) -> None:
        self.identity = identity
        if identity is None:
            # May still hold a previous user's bookmarks
            self.view_state.clear()
