"""Contracts for the backend collaborators the view consumes."""

from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Protocol

from app.models import ChangeEvent, Identity

IdentityCallback = Callable[[Optional[Identity]], Awaitable[None]]
Unsubscribe = Callable[[], None]


class AuthProvider(Protocol):
    """Source of the session identity."""

    async def get_current_identity(self) -> Optional[Identity]: ...

    def on_identity_change(self, callback: IdentityCallback) -> Unsubscribe: ...

    async def sign_out(self) -> None: ...


class BookmarkStore(Protocol):
    """Authoritative store with row-level authorization."""

    async def query(
        self,
        table: str,
        filters: dict[str, Any],
        order_by: str = "created_at",
        descending: bool = True,
    ) -> list[dict[str, Any]]: ...

    async def insert(self, table: str, values: dict[str, Any]) -> dict[str, Any]: ...

    async def delete(self, table: str, row_id: str) -> None: ...


class Subscription(Protocol):
    """Handle for one open change stream subscription."""

    table: str
    filters: dict[str, Any]

    def __aiter__(self) -> AsyncIterator[ChangeEvent]: ...

    def task_done(self) -> None: ...

    async def join(self) -> None: ...

    def stop(self) -> None: ...


class ChangeStream(Protocol):
    """Publish/subscribe feed of committed row changes."""

    def subscribe(self, table: str, filters: dict[str, Any]) -> Subscription: ...

    def unsubscribe(self, handle: Subscription) -> None: ...
