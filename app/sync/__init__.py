"""Client-side synchronization of a session's bookmarks."""

from app.sync.mutations import BookmarkForm, BookmarkMutationHandler
from app.sync.session import SessionIdentityManager
from app.sync.subscription import SubscriptionManager
from app.sync.view import BookmarkView
from app.sync.view_state import LocalViewState

__all__ = [
    "BookmarkForm",
    "BookmarkMutationHandler",
    "BookmarkView",
    "LocalViewState",
    "SessionIdentityManager",
    "SubscriptionManager",
]
