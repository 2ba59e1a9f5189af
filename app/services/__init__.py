"""Backend clients: local store, change feed, auth and platform API."""

from app.services.auth_provider import LocalAuthProvider
from app.services.bookmark_store import SqlBookmarkStore
from app.services.change_feed import ChangeFeed, FeedSubscription
from app.services.platform_api import PlatformClient, platform_client

__all__ = [
    "ChangeFeed",
    "FeedSubscription",
    "LocalAuthProvider",
    "PlatformClient",
    "SqlBookmarkStore",
    "platform_client",
]
