"""Application service: the purchase order builder.

One OrderBuilder backs one editing session of one order. It owns the
Selection Store and the Paginator, exposes the operations the
presentation layer needs (filter, paging, quantities, header fields,
summary) and performs the budget-checked atomic save.

Flow:
1. ``open()`` / ``resume()`` load the catalog once, load the order's
   line items and seed the Selection Store.
2. The user pages through the listing; quantities are written into the
   store in place.
3. ``save()`` validates, reconciles the store against the persisted
   line items and hands everything to the repository as one commit.
"""

from __future__ import annotations

import logging

from pob.application.catalog import LotCatalogView
from pob.application.dto import OrderSummaryDTO, PageDTO, SelectionLineDTO
from pob.application.session import BuilderState
from pob.domain.exceptions import DomainException, EntityNotFoundError, ValidationError
from pob.domain.model.order import Order, OrderStatus
from pob.domain.model.selection import SelectionRecord, SelectionStore
from pob.domain.model.value_objects import Money
from pob.domain.repository.lot_repository import LotRepository
from pob.domain.repository.order_repository import OrderRepository
from pob.domain.service.editability import FieldEditability, field_editability
from pob.domain.service.pagination import DEFAULT_PAGE_SIZE, Paginator
from pob.domain.service.reconciliation import apply_committed, reconcile

logger = logging.getLogger(__name__)

NEW_ORDER_HEADING = "New Order"
BUDGET_EXCEEDED = "Purchased exceeds budget"
STORE_REQUIRED = "Store is required"


def order_detail_target(order_id: int) -> str:
    """Navigation target for a persisted order's detail view."""
    return f"/orders/{order_id}"


class OrderBuilder:

    def __init__(
        self,
        order: Order,
        catalog: LotCatalogView,
        store: SelectionStore,
        order_repo: OrderRepository,
        persisted_status: OrderStatus | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._order = order
        self._catalog = catalog
        self._store = store
        self._order_repo = order_repo
        self._persisted_status = persisted_status
        self._paginator = Paginator(store, page_size=page_size)
        self._filter_text: str | None = None
        self.messages: list[str] = []

    # --- Construction ---------------------------------------------------------

    @classmethod
    def open(
        cls,
        lot_repo: LotRepository,
        order_repo: OrderRepository,
        order_id: int | None = None,
        *,
        name: str = "",
        store_id: str | None = None,
        budget: str | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> OrderBuilder:
        """Start editing an existing order, or a new one when *order_id* is None.

        Repository failures propagate; there is no partial builder.
        """
        if order_id is None:
            order = Order.new(
                name=name,
                store_id=store_id,
                budget=Money.of(budget) if budget is not None else None,
            )
            persisted_status = None
        else:
            order = cls._load_order(order_repo, order_id)
            persisted_status = order.status

        catalog = LotCatalogView.load(lot_repo)
        store = SelectionStore()
        store.seed(catalog.lots, order_repo.list_line_items(order.id))
        logger.info(
            "Opened builder for %s with %d listed lots",
            f"order #{order.id}" if order.is_persisted else "a new order",
            len(store),
        )
        return cls(order, catalog, store, order_repo, persisted_status, page_size)

    @classmethod
    def resume(
        cls,
        state: BuilderState,
        lot_repo: LotRepository,
        order_repo: OrderRepository,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> OrderBuilder:
        """Rebuild a builder from session state saved by ``snapshot()``."""
        builder = cls.open(lot_repo, order_repo, state.order_id, page_size=page_size)

        order = builder._order
        order.name = state.name
        order.store_id = state.store_id
        order.budget = Money.of(state.budget)
        order.status = OrderStatus.parse(state.status)

        for lot_id in state.lot_ids:
            if lot_id in builder._store:
                continue
            try:
                builder._store.get(builder._catalog.get(lot_id))
            except EntityNotFoundError:
                logger.warning("Session row for unknown lot '%s' dropped", lot_id)
        builder._store.reorder(state.lot_ids)

        for lot_id, quantity in state.quantities.items():
            try:
                lot = builder._catalog.get(lot_id)
            except EntityNotFoundError:
                logger.warning("Session quantity for unknown lot '%s' dropped", lot_id)
                continue
            builder._store.set_quantity(lot, quantity)

        builder._filter_text = state.filter_text
        builder._paginator = Paginator(
            builder._store,
            page_size=page_size,
            category_filter=state.category_filter,
            page_index=state.page_index,
        )
        return builder

    def snapshot(self) -> BuilderState:
        quantities: dict[str, int] = {}
        for record in self._store.values():
            persisted = record.line_item.quantity.value if record.line_item else 0
            if record.quantity != persisted:
                quantities[record.lot.id] = record.quantity
        return BuilderState(
            order_id=self._order.id,
            name=self._order.name,
            store_id=self._order.store_id,
            budget=str(self._order.budget.amount),
            status=self._order.status.value,
            filter_text=self._filter_text,
            category_filter=self._paginator.category_filter,
            page_index=self._paginator.page_index,
            quantities=quantities,
            lot_ids=[record.lot.id for record in self._store.values()],
        )

    # --- Header fields --------------------------------------------------------

    @property
    def order(self) -> Order:
        return self._order

    @property
    def heading(self) -> str:
        if not self._order.is_persisted:
            return NEW_ORDER_HEADING
        return self._order.name

    @property
    def editability(self) -> FieldEditability:
        return field_editability(self._persisted_status)

    def rename(self, name: str) -> None:
        self._require(self.editability.name, "name")
        self._order.name = name.strip()

    def set_budget(self, amount: str) -> None:
        self._require(self.editability.budget, "budget")
        self._order.budget = Money.of(amount)

    def set_status(self, status: str) -> None:
        self._require(self.editability.status, "status")
        self._order.status = OrderStatus.parse(status)

    def set_store(self, store_id: str | None) -> None:
        if self._order.is_persisted:
            raise ValidationError("Store cannot be changed once the order is saved")
        self._order.store_id = store_id or None

    # --- Filter ---------------------------------------------------------------

    @property
    def filter_text(self) -> str | None:
        """The filter as typed by the user; takes effect on ``apply_filter()``."""
        return self._filter_text

    @filter_text.setter
    def filter_text(self, text: str | None) -> None:
        self._filter_text = text

    def apply_filter(self) -> None:
        self._paginator.apply_filter(self._filter_text)

    def categories(self) -> list[str]:
        return self._paginator.categories()

    # --- Paging ---------------------------------------------------------------

    @property
    def paginator(self) -> Paginator:
        return self._paginator

    def first(self) -> None:
        self._paginator.first()

    def previous(self) -> None:
        self._paginator.previous()

    def next(self) -> None:
        self._paginator.next()

    def last(self) -> None:
        self._paginator.last()

    def current_page(self) -> list[SelectionRecord]:
        return self._paginator.current_page()

    # --- Selections -----------------------------------------------------------

    def selection(self, lot_id: str) -> SelectionRecord:
        """Record for any catalog lot, including ones filtered off the page."""
        return self._store.get(self._catalog.get(lot_id))

    def set_quantity(self, lot_id: str, quantity: int) -> None:
        self._require(self.editability.quantities, "quantities")
        self.selection(lot_id).set_quantity(quantity)

    @property
    def store(self) -> SelectionStore:
        return self._store

    # --- Views ----------------------------------------------------------------

    def page_view(self) -> PageDTO:
        return PageDTO(
            rows=[
                SelectionLineDTO(
                    lot_id=r.lot.id,
                    lot_name=r.lot.name,
                    category=r.lot.category,
                    unit_price=str(r.lot.unit_price),
                    available_units=r.lot.available_units,
                    quantity=r.quantity,
                    line_item_id=r.line_item.id if r.line_item else None,
                )
                for r in self._paginator.current_page()
            ],
            page_index=self._paginator.page_index,
            page_count=self._paginator.page_count(),
            category_filter=self._paginator.category_filter,
            previous_disabled=self._paginator.is_previous_disabled(),
            next_disabled=self._paginator.is_next_disabled(),
        )

    def summary(self) -> OrderSummaryDTO:
        total = self._store.total_price
        average = self._store.average_unit_price
        return OrderSummaryDTO(
            heading=self.heading,
            order_id=self._order.id,
            name=self._order.name,
            store_id=self._order.store_id,
            status=self._order.status.value,
            budget=str(self._order.budget),
            total_units=self._store.total_units,
            total_price=str(total) if total is not None else None,
            average_unit_price=str(average) if average is not None else None,
        )

    # --- Save -----------------------------------------------------------------

    def save(self) -> str | None:
        """Validate and atomically persist the order and its line items.

        Returns the order's detail target on success. On a validation or
        persistence failure the message is added to ``messages``, nothing
        is written, and None is returned.
        """
        self.messages.clear()
        try:
            self._validate()
            changes = reconcile(self._store, self._order.id)
            self._order_repo.commit(self._order, changes)
        except DomainException as exc:
            logger.warning("Save rejected for order %s: %s", self._describe(), exc)
            self.messages.append(str(exc))
            return None

        apply_committed(changes)
        self._persisted_status = self._order.status
        logger.info(
            "Saved order #%s: %d created, %d updated, %d deleted line items",
            self._order.id,
            len(changes.creates),
            len(changes.updates),
            len(changes.deletes),
        )
        return order_detail_target(self._order.id)  # type: ignore[arg-type]

    # --- Internal helpers -----------------------------------------------------

    def _validate(self) -> None:
        if not self._order.store_id:
            raise ValidationError(STORE_REQUIRED)

        spend = self._store.total_price or Money.zero()
        if spend > self._order.budget:
            raise ValidationError(BUDGET_EXCEEDED)

    def _describe(self) -> str:
        return f"#{self._order.id}" if self._order.is_persisted else "(new)"

    @staticmethod
    def _require(editable: bool, field_name: str) -> None:
        if not editable:
            raise ValidationError(f"The order's {field_name} cannot be edited in its current status")

    @staticmethod
    def _load_order(order_repo: OrderRepository, order_id: int) -> Order:
        order = order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order
