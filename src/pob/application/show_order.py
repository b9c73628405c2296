"""Application service: Show Order use case (query)."""

from __future__ import annotations

from pob.application.dto import OrderDTO, OrderLineItemDTO
from pob.domain.exceptions import EntityNotFoundError
from pob.domain.model.value_objects import Money
from pob.domain.repository.lot_repository import LotRepository
from pob.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository, lot_repo: LotRepository) -> None:
        self._order_repo = order_repo
        self._lot_repo = lot_repo

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        total = Money.zero()
        items: list[OrderLineItemDTO] = []
        for item in self._order_repo.list_line_items(order_id):
            lot = self._lot_repo.get_by_id(item.lot_id)
            if lot is None:
                raise EntityNotFoundError(
                    f"Lot '{item.lot_id}' on order #{order_id} not found"
                )
            line_total = lot.unit_price * item.quantity.value
            total = total + line_total
            items.append(
                OrderLineItemDTO(
                    line_item_id=item.id,  # type: ignore[arg-type]
                    lot_name=lot.name,
                    quantity=item.quantity.value,
                    unit_price=str(lot.unit_price),
                    line_total=str(line_total),
                )
            )

        return OrderDTO(
            id=order_id,
            name=order.name,
            store_id=order.store_id,
            status=order.status.value,
            budget=str(order.budget),
            items=items,
            total=str(total),
        )
