"""Change stream event types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ChangeKind(str, Enum):
    """Row-level change kinds emitted by the change stream."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class ChangeEvent:
    """A committed row change.

    Attributes:
        kind: What happened to the row
        table: Table the row belongs to
        new: Row after the change (insert/update)
        old: Row before the change (update/delete)
    """

    kind: ChangeKind
    table: str
    new: Optional[dict[str, Any]] = field(default=None)
    old: Optional[dict[str, Any]] = field(default=None)

    @property
    def row(self) -> dict[str, Any]:
        """The row the event is about, whichever side carries it."""
        return self.new if self.new is not None else (self.old or {})

    def matches(self, filters: dict[str, Any]) -> bool:
        """True if the row satisfies every equality filter.

        Delete payloads may carry only the primary key; a filter column
        missing from such a payload does not exclude it.
        """
        row = self.row
        for column, value in filters.items():
            if column not in row and self.kind == ChangeKind.DELETE:
                continue
            if row.get(column) != value:
                return False
        return True
