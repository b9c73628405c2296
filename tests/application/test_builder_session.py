"""Tests for carrying builder state across requests via a SessionStore."""

from pob.application.order_builder import OrderBuilder
from pob.application.session import BuilderState
from pob.domain.model.lot import Lot
from pob.domain.model.order import Order, OrderStatus
from pob.domain.model.value_objects import Money
from tests.fakes import FakeLotRepository, FakeOrderRepository, FakeSessionStore


def _lots() -> list[Lot]:
    return [
        Lot(id=str(i), name=f"Lot {i}", category="Veg" if i > 6 else "Fruit",
            unit_price=Money.of("1.50"), available_units=3)
        for i in range(1, 9)
    ]


def _request(sessions, lot_repo, order_repo, action) -> OrderBuilder:
    """One request: resume, act, save the session."""
    builder = OrderBuilder.resume(sessions.get("s1"), lot_repo, order_repo)
    action(builder)
    sessions.save("s1", builder.snapshot())
    return builder


class TestSnapshot:

    def test_new_order_snapshot(self):
        builder = OrderBuilder.open(
            FakeLotRepository(_lots()), FakeOrderRepository(),
            name="N", store_id="S1", budget="12.50",
        )
        builder.set_quantity("2", 3)
        state = builder.snapshot()
        assert state.order_id is None
        assert state.budget == "12.50"
        assert state.status == "DRAFT"
        assert state.quantities == {"2": 3}

    def test_only_changed_quantities_recorded(self):
        lot_repo = FakeLotRepository(_lots())
        order_repo = FakeOrderRepository()
        order = order_repo.add_order(Order.new("E", "S1", Money.of("40")))
        order_repo.add_line_item(order.id, "1", 2)
        order_repo.add_line_item(order.id, "2", 2)

        builder = OrderBuilder.open(lot_repo, order_repo, order.id)
        builder.set_quantity("2", 0)
        builder.set_quantity("3", 1)

        assert builder.snapshot().quantities == {"2": 0, "3": 1}

    def test_round_trips_through_dict(self):
        state = BuilderState(
            order_id=3, name="x", store_id="S", budget="1", status="OPEN",
            filter_text="Veg", category_filter=None, page_index=2, quantities={"1": 4},
            lot_ids=["1", "7"],
        )
        assert BuilderState.from_dict(state.to_dict()) == state

    def test_lot_ids_follow_store_order(self):
        lots = _lots() + [Lot(id="99", name="Gone", category="Fruit",
                              unit_price=Money.of("4"), available_units=0)]
        builder = OrderBuilder.open(FakeLotRepository(lots), FakeOrderRepository())
        builder.selection("99")

        assert builder.snapshot().lot_ids == [str(i) for i in range(1, 9)] + ["99"]

    def test_older_state_without_lot_ids_loads(self):
        state = BuilderState.from_dict(
            {"order_id": None, "name": "", "budget": "0", "status": "DRAFT"}
        )
        assert state.lot_ids == []


class TestResume:

    def test_selection_filter_and_page_survive_requests(self):
        lot_repo = FakeLotRepository(_lots())
        order_repo = FakeOrderRepository()
        sessions = FakeSessionStore()
        opened = OrderBuilder.open(lot_repo, order_repo, name="N", store_id="S1", budget="50")
        sessions.save("s1", opened.snapshot())

        _request(sessions, lot_repo, order_repo, lambda b: b.set_quantity("1", 2))
        _request(sessions, lot_repo, order_repo, lambda b: b.next())
        builder = _request(sessions, lot_repo, order_repo, lambda b: None)

        assert builder.paginator.page_index == 2
        assert builder.selection("1").quantity == 2

        _request(sessions, lot_repo, order_repo, lambda b: setattr(b, "filter_text", "Veg"))
        builder = _request(sessions, lot_repo, order_repo, lambda b: None)
        assert builder.filter_text == "Veg"
        assert builder.paginator.category_filter is None

        builder = _request(sessions, lot_repo, order_repo, lambda b: b.apply_filter())
        assert builder.paginator.category_filter == "Veg"
        assert builder.paginator.page_index == 1

    def test_save_in_later_request(self):
        lot_repo = FakeLotRepository(_lots())
        order_repo = FakeOrderRepository()
        sessions = FakeSessionStore()
        sessions.save("s1", OrderBuilder.open(
            lot_repo, order_repo, name="N", store_id="S1", budget="50"
        ).snapshot())

        _request(sessions, lot_repo, order_repo, lambda b: b.set_quantity("4", 2))
        builder = _request(sessions, lot_repo, order_repo, lambda b: b.save())

        assert builder.order.id == 1
        state = sessions.get("s1")
        assert state.order_id == 1
        assert state.quantities == {}
        assert [i.lot_id for i in order_repo.list_line_items(1)] == ["4"]

    def test_resume_keeps_unsaved_header_edits_and_persisted_status(self):
        lot_repo = FakeLotRepository(_lots())
        order_repo = FakeOrderRepository()
        order = Order.new("E", "S1", Money.of("40"))
        order.status = OrderStatus.OPEN
        order_repo.add_order(order)
        sessions = FakeSessionStore()
        sessions.save("s1", OrderBuilder.open(lot_repo, order_repo, order.id).snapshot())

        builder = _request(sessions, lot_repo, order_repo, lambda b: b.set_status("CLOSED"))

        assert builder.order.status is OrderStatus.CLOSED
        assert builder.editability.quantities  # still OPEN in persistence
        assert order_repo.get_by_id(order.id).status is OrderStatus.OPEN

    def test_lazily_created_sold_out_record_survives_resume(self):
        lots = [
            Lot(id=str(i), name=f"Lot {i}", category="Fruit",
                unit_price=Money.of("1"), available_units=2)
            for i in range(1, 6)
        ]
        lots.append(Lot(id="99", name="Sold out", category="Fruit",
                        unit_price=Money.of("1"), available_units=0))
        lot_repo = FakeLotRepository(lots)
        order_repo = FakeOrderRepository()

        builder = OrderBuilder.open(lot_repo, order_repo)
        builder.selection("99")
        builder.last()
        before = (len(builder.paginator.visible_records()), builder.paginator.page_count())
        assert before == (6, 2)
        assert builder.paginator.page_index == 2

        resumed = OrderBuilder.resume(builder.snapshot(), lot_repo, order_repo)

        paginator = resumed.paginator
        assert (len(paginator.visible_records()), paginator.page_count()) == before
        assert paginator.page_index == 2
        assert [r.lot.id for r in resumed.current_page()] == ["99"]

    def test_store_order_restored_on_resume(self):
        lots = _lots() + [Lot(id="99", name="Gone", category="Fruit",
                              unit_price=Money.of("4"), available_units=0)]
        lot_repo = FakeLotRepository(lots)
        state = BuilderState(
            order_id=None, name="", store_id=None, budget="0", status="DRAFT",
            lot_ids=["99", "1", "2"],
        )
        builder = OrderBuilder.resume(state, lot_repo, FakeOrderRepository())

        assert [r.lot.id for r in builder.store.values()][:3] == ["99", "1", "2"]
        assert len(builder.store) == 9

    def test_unknown_lot_in_session_dropped(self, caplog):
        lot_repo = FakeLotRepository(_lots())
        state = BuilderState(
            order_id=None, name="", store_id=None, budget="0", status="DRAFT",
            quantities={"gone": 3, "1": 1},
        )
        builder = OrderBuilder.resume(state, lot_repo, FakeOrderRepository())
        assert builder.selection("1").quantity == 1
        assert "gone" not in builder.store
        assert "unknown lot 'gone'" in caplog.text
