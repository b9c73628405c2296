"""JSON-file-backed implementation of OrderRepository.

Orders, line items and the derived order totals live in one JSON
document. A commit builds the complete new document in memory, checks
it, and replaces the file in a single atomic write, so a failed
commit leaves the file exactly as it was.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from decimal import Decimal
from pathlib import Path

from pob.application.triggers import LineItemsChanged, OrderTotals, TriggerDispatcher
from pob.domain.exceptions import PersistenceError
from pob.domain.model.order import LineItem, Order, OrderStatus
from pob.domain.model.value_objects import Money, Quantity
from pob.domain.repository.order_repository import OrderRepository
from pob.domain.service.reconciliation import LineItemChangeSet
from pob.infrastructure.persistence.atomic_file import ensure_json_file, write_json_atomic

logger = logging.getLogger(__name__)


def _empty_document() -> dict:
    return {
        "next_order_id": 1,
        "next_line_item_id": 1,
        "orders": [],
        "line_items": [],
        "totals": {},
    }


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path, dispatcher: TriggerDispatcher | None = None) -> None:
        self._file_path = file_path
        self._dispatcher = dispatcher or TriggerDispatcher()
        self._ensure_file()

    @property
    def dispatcher(self) -> TriggerDispatcher:
        return self._dispatcher

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._load_raw()["orders"]:
            if raw["id"] == order_id:
                return self._order_to_domain(raw)
        return None

    def list_line_items(self, order_id: int | None) -> list[LineItem]:
        if order_id is None:
            return []
        return [
            self._item_to_domain(raw)
            for raw in self._load_raw()["line_items"]
            if raw["order_id"] == order_id
        ]

    def commit(self, order: Order, changes: LineItemChangeSet) -> None:
        try:
            doc = self._load_raw()
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Could not read {self._file_path.name}: {exc}") from exc

        # Phase 1: build and check the new document. Nothing is written yet.
        try:
            order_id, new_ids = self._apply_changes(doc, order, changes)
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"{self._file_path.name} is malformed: {exc!r}") from exc

        # Phase 2: one atomic file replacement.
        write_json_atomic(self._file_path, doc)

        order.id = order_id
        for item, item_id in zip(changes.created_items(), new_ids):
            item.id = item_id
            item.order_id = order_id
        logger.info("Committed order #%s to %s", order_id, self._file_path.name)

        self._dispatcher.dispatch(
            LineItemsChanged(
                order_id=order_id,
                created=changes.created_items(),
                updated=changes.updated_items(),
                deleted=changes.deleted_items(),
            )
        )

    # --- Derived totals projection --------------------------------------------

    def save_totals(self, totals: OrderTotals) -> None:
        doc = self._load_raw()
        doc["totals"][str(totals.order_id)] = asdict(totals)
        write_json_atomic(self._file_path, doc)

    def get_totals(self, order_id: int) -> OrderTotals | None:
        raw = self._load_raw()["totals"].get(str(order_id))
        if raw is None:
            return None
        return OrderTotals(**raw)

    # --- Commit helpers -------------------------------------------------------

    def _apply_changes(
        self, doc: dict, order: Order, changes: LineItemChangeSet
    ) -> tuple[int, list[int]]:
        """Fold *order* and *changes* into *doc*; returns the order id and new item ids."""
        order_id = self._upsert_order(doc, order)
        items = {raw["id"]: raw for raw in doc["line_items"]}

        for item in changes.updated_items():
            raw = self._owned_item(items, item, order_id)
            raw["quantity"] = item.quantity.value

        for item in changes.deleted_items():
            self._owned_item(items, item, order_id)
            del items[item.id]

        taken = {raw["lot_id"] for raw in items.values() if raw["order_id"] == order_id}
        new_ids: list[int] = []
        for item in changes.created_items():
            if item.lot_id in taken:
                raise PersistenceError(
                    f"Order #{order_id} already has a line item for lot '{item.lot_id}'"
                )
            taken.add(item.lot_id)
            item_id = doc["next_line_item_id"]
            doc["next_line_item_id"] += 1
            items[item_id] = {
                "id": item_id,
                "order_id": order_id,
                "lot_id": item.lot_id,
                "quantity": item.quantity.value,
            }
            new_ids.append(item_id)

        doc["line_items"] = list(items.values())
        return order_id, new_ids

    def _upsert_order(self, doc: dict, order: Order) -> int:
        if order.id is None:
            order_id = doc["next_order_id"]
            doc["next_order_id"] += 1
            doc["orders"].append(self._order_to_raw(order, order_id))
            return order_id

        for i, raw in enumerate(doc["orders"]):
            if raw["id"] == order.id:
                doc["orders"][i] = self._order_to_raw(order, order.id)
                return order.id
        raise PersistenceError(f"Order #{order.id} no longer exists")

    @staticmethod
    def _owned_item(items: dict[int, dict], item: LineItem, order_id: int) -> dict:
        raw = items.get(item.id)  # type: ignore[arg-type]
        if raw is None or raw["order_id"] != order_id:
            raise PersistenceError(
                f"Line item #{item.id} does not belong to order #{order_id}"
            )
        return raw

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _order_to_raw(order: Order, order_id: int) -> dict:
        return {
            "id": order_id,
            "name": order.name,
            "store_id": order.store_id,
            "budget": str(order.budget.amount),
            "currency": order.budget.currency,
            "status": order.status.value,
        }

    @staticmethod
    def _order_to_domain(raw: dict) -> Order:
        return Order(
            id=raw["id"],
            name=raw["name"],
            store_id=raw.get("store_id"),
            budget=Money(Decimal(raw["budget"]), raw.get("currency", "USD")),
            status=OrderStatus(raw["status"]),
        )

    @staticmethod
    def _item_to_domain(raw: dict) -> LineItem:
        return LineItem(
            id=raw["id"],
            order_id=raw["order_id"],
            lot_id=raw["lot_id"],
            quantity=Quantity(raw["quantity"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _ensure_file(self) -> None:
        ensure_json_file(self._file_path, _empty_document())
