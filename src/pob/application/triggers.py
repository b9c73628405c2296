"""Post-commit trigger dispatcher for line-item changes.

Repositories dispatch a LineItemsChanged event once a commit has
succeeded. Handlers run after the write is final, either right away or,
for a deferred dispatcher, when the caller drains the queue. Their
failures are logged and never undo or fail the save that caused them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from pob.domain.model.order import LineItem
from pob.domain.model.value_objects import Money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineItemsChanged:
    order_id: int
    created: list[LineItem] = field(default_factory=list)
    updated: list[LineItem] = field(default_factory=list)
    deleted: list[LineItem] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.created or self.updated or self.deleted)


LineItemHandler = Callable[[LineItemsChanged], None]


class TriggerDispatcher:
    """Runs registered handlers for committed line-item changes.

    A deferred dispatcher only queues events on ``dispatch``; whoever
    owns the request calls ``drain()`` once its work is done, so a save
    never waits on its handlers.
    """

    def __init__(self, deferred: bool = False) -> None:
        self._handlers: list[LineItemHandler] = []
        self._deferred = deferred
        self._pending: list[LineItemsChanged] = []

    def register(self, handler: LineItemHandler) -> None:
        self._handlers.append(handler)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def dispatch(self, event: LineItemsChanged) -> None:
        if event.is_empty:
            return
        if self._deferred:
            self._pending.append(event)
            return
        self._run(event)

    def drain(self) -> int:
        """Run every queued event through the handlers; returns how many ran."""
        drained = 0
        while self._pending:
            self._run(self._pending.pop(0))
            drained += 1
        return drained

    def _run(self, event: LineItemsChanged) -> None:
        for handler in self._handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Line item trigger %r failed for order #%s",
                    handler,
                    event.order_id,
                )


@dataclass(frozen=True)
class OrderTotals:
    """Derived aggregate recomputed after line items change."""

    order_id: int
    line_count: int
    total_units: int
    total_spend: str


class OrderTotalsRecalculator:
    """Recomputes an order's totals from its persisted line items.

    ``load_line_items`` and ``load_lot_price`` read from persistence;
    ``store_totals`` writes the projection.
    """

    def __init__(
        self,
        load_line_items: Callable[[int], list[LineItem]],
        load_lot_price: Callable[[str], Money],
        store_totals: Callable[[OrderTotals], None],
    ) -> None:
        self._load_line_items = load_line_items
        self._load_lot_price = load_lot_price
        self._store_totals = store_totals

    def __call__(self, event: LineItemsChanged) -> None:
        items = [i for i in self._load_line_items(event.order_id) if i.quantity.is_positive]
        spend: Money | None = None
        for item in items:
            line = self._load_lot_price(item.lot_id) * item.quantity.value
            spend = line if spend is None else spend + line
        totals = OrderTotals(
            order_id=event.order_id,
            line_count=len(items),
            total_units=sum(i.quantity.value for i in items),
            total_spend=str(spend) if spend is not None else "-",
        )
        self._store_totals(totals)
        logger.debug("Recomputed totals for order #%s: %s", event.order_id, totals)
