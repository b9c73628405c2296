"""Integration tests for the OrderBuilder: loading, paging, filtering, editing.

Uses in-memory fakes, no file I/O.
"""

import pytest

from pob.application.order_builder import NEW_ORDER_HEADING, OrderBuilder
from pob.domain.exceptions import EntityNotFoundError, ValidationError
from pob.domain.model.lot import Lot
from pob.domain.model.order import Order, OrderStatus
from pob.domain.model.value_objects import Money
from tests.fakes import FakeLotRepository, FakeOrderRepository


def _lots() -> list[Lot]:
    """12 lots: 8 Fruit, 4 Veg, plus one sold-out Fruit lot."""
    lots = [
        Lot(id=str(i), name=f"Fruit {i}", category="Fruit",
            unit_price=Money.of("2.00"), available_units=10)
        for i in range(1, 9)
    ]
    lots += [
        Lot(id=str(i), name=f"Veg {i}", category="Veg",
            unit_price=Money.of("3.00"), available_units=10)
        for i in range(9, 13)
    ]
    lots.append(Lot(id="99", name="Sold out", category="Fruit",
                    unit_price=Money.of("1.00"), available_units=0))
    return lots


def _setup() -> tuple[OrderBuilder, FakeLotRepository, FakeOrderRepository]:
    lot_repo = FakeLotRepository(_lots())
    order_repo = FakeOrderRepository()
    builder = OrderBuilder.open(lot_repo, order_repo, name="Weekly", store_id="S1", budget="100")
    return builder, lot_repo, order_repo


class TestOpen:

    def test_catalog_loaded_once(self):
        builder, lot_repo, _ = _setup()
        builder.next()
        builder.apply_filter()
        builder.summary()
        assert lot_repo.list_calls == 1

    def test_sold_out_lot_hidden_for_new_order(self):
        builder, _, _ = _setup()
        assert "99" not in builder.store
        assert builder.paginator.page_count() == 3

    def test_sold_out_lot_shown_when_on_the_order(self):
        lot_repo = FakeLotRepository(_lots())
        order_repo = FakeOrderRepository()
        order = order_repo.add_order(Order.new("Existing", "S1", Money.of("50")))
        order_repo.add_line_item(order.id, "99", 2)

        builder = OrderBuilder.open(lot_repo, order_repo, order.id)

        record = builder.store.find("99")
        assert record is not None
        assert record.quantity == 2
        assert record in builder.paginator.visible_records()

    def test_unknown_order_rejected(self):
        with pytest.raises(EntityNotFoundError, match="Order #42"):
            OrderBuilder.open(FakeLotRepository(_lots()), FakeOrderRepository(), 42)

    def test_catalog_failure_propagates(self):
        class BrokenLots(FakeLotRepository):
            def list_all(self):
                raise OSError("disk gone")

        with pytest.raises(OSError):
            OrderBuilder.open(BrokenLots(), FakeOrderRepository())


class TestPagingKeepsSelections:

    def test_quantities_survive_navigation(self):
        builder, _, _ = _setup()
        for record in builder.current_page():
            record.set_quantity(int(record.lot.id))

        builder.next()
        builder.last()
        builder.first()

        assert [r.quantity for r in builder.current_page()] == [1, 2, 3, 4, 5]

    def test_quantities_survive_filter_changes(self):
        builder, _, _ = _setup()
        builder.set_quantity("10", 4)
        builder.filter_text = "Fruit"
        builder.apply_filter()
        builder.filter_text = "off"
        builder.apply_filter()
        assert builder.selection("10").quantity == 4
        assert len(builder.store) == 12

    def test_lot_filtered_off_the_page_is_still_addressable(self):
        builder, _, _ = _setup()
        builder.filter_text = "Veg"
        builder.apply_filter()
        builder.set_quantity("1", 3)
        assert builder.selection("1").quantity == 3

    def test_hidden_catalog_lot_created_on_demand(self):
        builder, _, _ = _setup()
        builder.set_quantity("99", 1)
        assert builder.store.find("99").quantity == 1

    def test_unknown_lot_rejected(self):
        builder, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Lot 'nope'"):
            builder.set_quantity("nope", 1)


class TestTwoPhaseFilter:

    def test_assigning_filter_text_does_not_apply_it(self):
        builder, _, _ = _setup()
        builder.filter_text = "Veg"
        assert builder.paginator.category_filter is None
        assert builder.paginator.page_count() == 3

    def test_apply_filter_takes_effect(self):
        builder, _, _ = _setup()
        builder.filter_text = "Veg"
        builder.apply_filter()
        assert builder.paginator.category_filter == "Veg"
        assert [r.lot.id for r in builder.current_page()] == ["9", "10", "11", "12"]

    def test_apply_filter_clamps_page(self):
        builder, _, _ = _setup()
        builder.last()
        builder.filter_text = "Veg"
        builder.apply_filter()
        page = builder.page_view()
        assert page.page_index == 1
        assert page.previous_disabled and page.next_disabled

    def test_no_match(self):
        builder, _, _ = _setup()
        builder.filter_text = "Meat"
        builder.apply_filter()
        page = builder.page_view()
        assert page.page_count == 0
        assert page.rows == []

    def test_categories(self):
        builder, _, _ = _setup()
        assert builder.categories() == ["Fruit", "Veg"]


class TestSummaryAndHeading:

    def test_new_order_heading(self):
        builder, _, _ = _setup()
        assert builder.heading == NEW_ORDER_HEADING

    def test_saved_order_heading_is_name(self):
        builder, _, _ = _setup()
        builder.save()
        assert builder.heading == "Weekly"

    def test_summary_without_selection(self):
        builder, _, _ = _setup()
        summary = builder.summary()
        assert summary.total_units == 0
        assert summary.total_price is None
        assert summary.average_unit_price is None

    def test_summary_with_selection(self):
        builder, _, _ = _setup()
        builder.set_quantity("1", 2)   # 2 x $2
        builder.set_quantity("9", 2)   # 2 x $3
        summary = builder.summary()
        assert summary.total_units == 4
        assert summary.total_price == "$10.00"
        assert summary.average_unit_price == "$2.50"

    def test_page_view_rows(self):
        builder, _, _ = _setup()
        builder.set_quantity("2", 6)
        row = builder.page_view().rows[1]
        assert row.lot_id == "2"
        assert row.quantity == 6
        assert row.unit_price == "$2.00"
        assert row.line_item_id is None


class TestEditability:

    def _persisted(self, status: OrderStatus) -> OrderBuilder:
        lot_repo = FakeLotRepository(_lots())
        order_repo = FakeOrderRepository()
        order = Order.new("Existing", "S1", Money.of("50"))
        order.status = status
        order_repo.add_order(order)
        return OrderBuilder.open(lot_repo, order_repo, order.id)

    def test_transient_closed_order_still_editable(self):
        builder, _, _ = _setup()
        builder.set_status("CLOSED")
        builder.set_budget("20")
        assert builder.order.budget == Money.of("20")

    def test_open_order_budget_locked(self):
        builder = self._persisted(OrderStatus.OPEN)
        with pytest.raises(ValidationError, match="budget cannot be edited"):
            builder.set_budget("500")
        builder.rename("Renamed")
        builder.set_quantity("1", 1)
        builder.set_status("CLOSED")
        assert builder.order.status is OrderStatus.CLOSED

    def test_closed_order_locked(self):
        builder = self._persisted(OrderStatus.CLOSED)
        for action in (
            lambda: builder.rename("x"),
            lambda: builder.set_budget("1"),
            lambda: builder.set_status("DRAFT"),
            lambda: builder.set_quantity("1", 1),
        ):
            with pytest.raises(ValidationError, match="cannot be edited"):
                action()

    def test_editability_follows_saved_status(self):
        builder, _, _ = _setup()
        builder.set_status("OPEN")
        assert builder.editability.budget
        assert builder.save() is not None
        assert not builder.editability.budget

    def test_store_fixed_once_saved(self):
        builder, _, _ = _setup()
        builder.save()
        with pytest.raises(ValidationError, match="Store cannot be changed"):
            builder.set_store("S2")
