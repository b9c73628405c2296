"""Domain service: line-item reconciliation.

Turns the Selection Store into the set of creates, updates and deletes
that brings the order's persisted line items in line with what the user
entered. Nothing here touches persistence; the resulting change set is
handed to the repository as one atomic commit.

Per record:

    quantity > 0, no line item   -> create
    quantity > 0, line item      -> update quantity (same identity)
    quantity = 0, line item      -> delete
    quantity = 0, no line item   -> nothing
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from pob.domain.model.order import LineItem
from pob.domain.model.selection import SelectionRecord, SelectionStore
from pob.domain.model.value_objects import Quantity


@dataclass
class LineItemChangeSet:
    """Line-item writes implied by the current selections.

    ``creates`` carry ``id=None`` and the order id known at diff time
    (None for a transient order); the repository fills both on commit.
    ``updates`` are copies, so the loaded line items stay untouched until
    the commit has succeeded.
    """

    creates: list[tuple[SelectionRecord, LineItem]] = field(default_factory=list)
    updates: list[tuple[SelectionRecord, LineItem]] = field(default_factory=list)
    deletes: list[tuple[SelectionRecord, LineItem]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.creates or self.updates or self.deletes)

    def created_items(self) -> list[LineItem]:
        return [item for _, item in self.creates]

    def updated_items(self) -> list[LineItem]:
        return [item for _, item in self.updates]

    def deleted_items(self) -> list[LineItem]:
        return [item for _, item in self.deletes]


def reconcile(store: SelectionStore, order_id: int | None) -> LineItemChangeSet:
    """Diff every record in *store* against its persisted line item."""
    changes = LineItemChangeSet()

    for record in store.values():
        existing = record.line_item
        if record.quantity > 0:
            if existing is None:
                changes.creates.append((
                    record,
                    LineItem(
                        id=None,
                        order_id=order_id,
                        lot_id=record.lot.id,
                        quantity=Quantity(record.quantity),
                    ),
                ))
            else:
                changes.updates.append(
                    (record, replace(existing, quantity=Quantity(record.quantity)))
                )
        elif existing is not None:
            changes.deletes.append((record, existing))

    return changes


def apply_committed(changes: LineItemChangeSet) -> None:
    """Mirror a successful commit back onto the selection records.

    Created items are attached, deleted ones detached, and updated
    quantities copied onto the originally loaded line items so their
    identity never changes.
    """
    for record, item in changes.creates:
        record.attach(item)
    for record, item in changes.updates:
        if record.line_item is not None:
            record.line_item.quantity = item.quantity
    for record, _ in changes.deletes:
        record.detach()
