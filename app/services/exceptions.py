"""Shared exceptions for bookmark and session operations."""


class BookmarkError(Exception):
    """Base class for every failure the view knows how to surface."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ValidationError(BookmarkError):
    """Raised when input is rejected before anything is sent."""


class AuthenticationError(BookmarkError):
    """Raised when sign-in, sign-out or session lookup fails."""


class AuthorizationError(BookmarkError):
    """Raised when row-level policy rejects a read or write."""

    def __init__(self, table: str, row_id: str | None = None) -> None:
        self.table = table
        self.row_id = row_id
        target = f"{table}/{row_id}" if row_id else table
        super().__init__(f"Not permitted: {target}")


class StoreError(BookmarkError):
    """Raised when the authoritative store cannot complete a request."""


class TransportError(StoreError):
    """Raised when the platform cannot be reached or answers with an error."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SubscriptionError(BookmarkError):
    """Raised into a subscription when its change stream drops."""
