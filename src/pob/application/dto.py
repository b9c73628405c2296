"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and the builder without exposing
domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SelectionLineDTO:
    """Output: one row of the lot listing."""

    lot_id: str
    lot_name: str
    category: str
    unit_price: str  # formatted, e.g. "$15.00"
    available_units: int
    quantity: int
    line_item_id: int | None


@dataclass(frozen=True)
class PageDTO:
    """Output: the current page of the listing plus navigation state."""

    rows: list[SelectionLineDTO]
    page_index: int
    page_count: int
    category_filter: str | None
    previous_disabled: bool
    next_disabled: bool


@dataclass(frozen=True)
class OrderSummaryDTO:
    """Output: order header and whole-order totals."""

    heading: str
    order_id: int | None
    name: str
    store_id: str | None
    status: str
    budget: str
    total_units: int
    total_price: str | None
    average_unit_price: str | None


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a persisted line item as displayed to the user."""

    line_item_id: int
    lot_name: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a persisted order as displayed to the user."""

    id: int
    name: str
    store_id: str | None
    status: str
    budget: str
    items: list[OrderLineItemDTO]
    total: str
