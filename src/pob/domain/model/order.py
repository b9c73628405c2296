"""Order aggregate and its persisted line items.

The Order itself carries only header fields (name, store, budget,
status). Line items are separate persisted records keyed by
(order, lot); the builder reconciles them against the user's
selections at save time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pob.domain.exceptions import ValidationError
from pob.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    CLOSED = "CLOSED"

    @staticmethod
    def parse(raw: str) -> OrderStatus:
        try:
            return OrderStatus(raw.strip().upper())
        except (ValueError, AttributeError) as exc:
            allowed = ", ".join(s.value for s in OrderStatus)
            raise ValidationError(
                f"Unknown order status {raw!r} (expected one of {allowed})"
            ) from exc


@dataclass
class LineItem:
    """Persisted association between an order and a lot.

    ``id`` is None until the repository has committed the item.
    At most one LineItem exists per (order, lot) pair.
    """

    id: int | None
    order_id: int | None
    lot_id: str
    quantity: Quantity


NEW_ORDER_NAME = ""


@dataclass
class Order:
    """Aggregate root for purchase orders.

    ``id`` stays None until the first successful save; the repository
    assigns it as part of the atomic commit.
    """

    id: int | None
    name: str
    store_id: str | None
    budget: Money
    status: OrderStatus = OrderStatus.DRAFT

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def new(
        name: str = NEW_ORDER_NAME,
        store_id: str | None = None,
        budget: Money | None = None,
    ) -> Order:
        """Start a transient order. Nothing is validated until save."""
        return Order(
            id=None,
            name=name.strip(),
            store_id=store_id or None,
            budget=budget if budget is not None else Money.zero(),
        )

    @property
    def is_persisted(self) -> bool:
        return self.id is not None
