"""Authenticated user principal."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """The user a session is authenticated as."""

    id: str
    email: Optional[str] = None

    @classmethod
    def from_user(cls, user: dict) -> "Identity":
        """Build from a platform user payload."""
        return cls(id=str(user["id"]), email=user.get("email"))
