"""Session identity holder for the local backend."""

import logging
from typing import Optional

from app.models import Identity
from app.services.interfaces import IdentityCallback, Unsubscribe

logger = logging.getLogger(__name__)


class LocalAuthProvider:
    """Holds one client session's identity and notifies listeners on change.

    Sign-in, token refresh and sign-out each notify every registered
    listener, awaiting them in registration order.
    """

    def __init__(self, identity: Optional[Identity] = None):
        self._identity = identity
        self._listeners: list[IdentityCallback] = []

    async def get_current_identity(self) -> Optional[Identity]:
        return self._identity

    def on_identity_change(self, callback: IdentityCallback) -> Unsubscribe:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def sign_in(self, identity: Identity) -> None:
        self._identity = identity
        logger.info("Signed in as %s", identity.id)
        await self._notify()

    async def refresh(self) -> None:
        """Simulate a token refresh for the current session."""
        await self._notify()

    async def sign_out(self) -> None:
        self._identity = None
        logger.info("Signed out")
        await self._notify()

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            await listener(self._identity)
