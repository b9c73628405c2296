"""Selection Store: the user's per-lot quantities for one builder session.

The store is seeded once from the catalog and the order's existing line
items, then mutated in place as the user pages through the listing.
Records are keyed by lot id and are never removed, so filtering or
paging can never drop or duplicate what the user entered.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from pob.domain.exceptions import ValidationError
from pob.domain.model.lot import Lot
from pob.domain.model.order import LineItem
from pob.domain.model.value_objects import Money, Quantity

logger = logging.getLogger(__name__)


@dataclass
class SelectionRecord:
    """The quantity entered for one lot, plus its persisted line item if any."""

    lot: Lot
    quantity: int = 0
    line_item: LineItem | None = None

    @property
    def line_total(self) -> Money:
        return self.lot.unit_price * self.quantity

    def set_quantity(self, quantity: int) -> None:
        self.quantity = Quantity(quantity).value

    def attach(self, line_item: LineItem) -> None:
        """Link a freshly created line item to this record."""
        if self.line_item is not None:
            raise ValidationError(
                f"Lot '{self.lot.name}' already has line item #{self.line_item.id}"
            )
        self.line_item = line_item

    def detach(self) -> None:
        """Forget a line item that has been deleted from persistence."""
        self.line_item = None


class SelectionStore:
    """Identity-keyed mapping from lot id to SelectionRecord.

    Invariants:
    - at most one record per lot id
    - insertion order is preserved (catalog load order)
    - records are never removed during the session
    """

    def __init__(self) -> None:
        self._records: dict[str, SelectionRecord] = {}

    # --- Seeding --------------------------------------------------------------

    def seed(self, lots: Iterable[Lot], existing: Iterable[LineItem]) -> None:
        """Create records for available lots and for lots already on the order.

        Zero-availability lots are hidden unless the order already has a
        line item for them.
        """
        by_lot: dict[str, LineItem] = {}
        for item in existing:
            if item.lot_id in by_lot:
                raise ValidationError(
                    f"Order #{item.order_id} has more than one line item "
                    f"for lot '{item.lot_id}'"
                )
            by_lot[item.lot_id] = item

        for lot in lots:
            item = by_lot.pop(lot.id, None)
            if item is None and not lot.is_available:
                continue
            record = self.get(lot)
            if item is not None:
                record.quantity = item.quantity.value
                record.line_item = item

        for lot_id, item in by_lot.items():
            logger.warning(
                "Line item #%s references lot '%s' which is not in the catalog; skipped",
                item.id,
                lot_id,
            )

    # --- Access ---------------------------------------------------------------

    def get(self, lot: Lot) -> SelectionRecord:
        """Return the record for *lot*, creating a zero-quantity one if absent."""
        record = self._records.get(lot.id)
        if record is None:
            record = SelectionRecord(lot=lot)
            self._records[lot.id] = record
        return record

    def find(self, lot_id: str) -> SelectionRecord | None:
        return self._records.get(lot_id)

    def set_quantity(self, lot: Lot, quantity: int) -> SelectionRecord:
        record = self.get(lot)
        record.set_quantity(quantity)
        return record

    def reorder(self, lot_ids: Iterable[str]) -> None:
        """Put the listed records first, in the given order.

        Unknown ids are ignored; unlisted records keep their relative order
        after the listed ones.
        """
        ordered = {i: self._records[i] for i in lot_ids if i in self._records}
        for lot_id, record in self._records.items():
            ordered.setdefault(lot_id, record)
        self._records = ordered

    def values(self) -> list[SelectionRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, lot_id: object) -> bool:
        return lot_id in self._records

    # --- Whole-order summary --------------------------------------------------

    def selected(self) -> list[SelectionRecord]:
        """Records with a positive quantity, in insertion order."""
        return [r for r in self._records.values() if r.quantity > 0]

    @property
    def total_units(self) -> int:
        return sum(r.quantity for r in self.selected())

    @property
    def total_price(self) -> Money | None:
        """Sum of line totals, or None when nothing is selected."""
        selected = self.selected()
        if not selected:
            return None
        result = Money.zero()
        for record in selected:
            result = result + record.line_total
        return result

    @property
    def average_unit_price(self) -> Money | None:
        total = self.total_price
        if total is None:
            return None
        return total / self.total_units
