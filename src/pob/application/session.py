"""Session-held builder state.

A builder lives for one request. Between requests its view-state is
kept as an explicit BuilderState entry in a SessionStore, keyed by
session id, and the builder is rebuilt from it on the next request.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field


@dataclass
class BuilderState:
    """Everything needed to resume a builder, in JSON-friendly types.

    ``quantities`` holds only lots whose entered quantity differs from
    what is persisted; everything else is re-derived from the catalog
    and the order's line items on resume.

    ``lot_ids`` lists every record in the Selection Store in store order,
    so records created after seeding (a sold-out lot looked up by id)
    come back on resume.
    """

    order_id: int | None
    name: str
    store_id: str | None
    budget: str
    status: str
    filter_text: str | None = None
    category_filter: str | None = None
    page_index: int = 1
    quantities: dict[str, int] = field(default_factory=dict)
    lot_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @staticmethod
    def from_dict(raw: dict) -> BuilderState:
        return BuilderState(
            order_id=raw.get("order_id"),
            name=raw.get("name", ""),
            store_id=raw.get("store_id"),
            budget=raw.get("budget", "0"),
            status=raw.get("status", "DRAFT"),
            filter_text=raw.get("filter_text"),
            category_filter=raw.get("category_filter"),
            page_index=raw.get("page_index", 1),
            quantities={str(k): int(v) for k, v in raw.get("quantities", {}).items()},
            lot_ids=[str(lot_id) for lot_id in raw.get("lot_ids", [])],
        )


class SessionStore(ABC):

    @abstractmethod
    def get(self, session_id: str) -> BuilderState | None:
        """Return the saved state for a session, or None."""

    @abstractmethod
    def save(self, session_id: str, state: BuilderState) -> None:
        """Store (or replace) the state for a session."""

    @abstractmethod
    def delete(self, session_id: str) -> None:
        """Forget a session. Unknown sessions are ignored."""
