"""Abstract repository for Order and LineItem records."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pob.domain.model.order import LineItem, Order
from pob.domain.service.reconciliation import LineItemChangeSet


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_line_items(self, order_id: int | None) -> list[LineItem]:
        """Return the persisted line items of an order (empty if transient)."""

    @abstractmethod
    def commit(self, order: Order, changes: LineItemChangeSet) -> None:
        """Upsert *order* and apply *changes* as one atomic unit.

        On success the order and every created line item carry their
        assigned IDs. On failure nothing is written, no ID is assigned,
        and PersistenceError is raised.
        """
