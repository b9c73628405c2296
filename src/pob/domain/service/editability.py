"""Field editability keyed on the order's persisted lifecycle status.

    transient  -> everything editable
    DRAFT      -> everything editable
    OPEN       -> name, status, quantities (budget locked)
    CLOSED     -> nothing editable
"""

from __future__ import annotations

from dataclasses import dataclass

from pob.domain.model.order import OrderStatus


@dataclass(frozen=True)
class FieldEditability:
    name: bool
    budget: bool
    status: bool
    quantities: bool


_ALL = FieldEditability(name=True, budget=True, status=True, quantities=True)

_BY_STATUS = {
    OrderStatus.DRAFT: _ALL,
    OrderStatus.OPEN: FieldEditability(name=True, budget=False, status=True, quantities=True),
    OrderStatus.CLOSED: FieldEditability(name=False, budget=False, status=False, quantities=False),
}


def field_editability(persisted_status: OrderStatus | None) -> FieldEditability:
    """Return what may be edited, given the status last saved (None if never saved)."""
    if persisted_status is None:
        return _ALL
    return _BY_STATUS[persisted_status]
