"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

Configuration comes from the environment:

    POB_DATA_DIR   directory holding the JSON files (default: <repo>/data)
    POB_PAGE_SIZE  rows per listing page (default: 5)
"""

from __future__ import annotations

import os
from pathlib import Path

from pob.application.triggers import OrderTotalsRecalculator, TriggerDispatcher
from pob.domain.exceptions import EntityNotFoundError, ValidationError
from pob.domain.model.value_objects import Money
from pob.domain.service.pagination import DEFAULT_PAGE_SIZE
from pob.infrastructure.persistence.json_lot_repository import JsonLotRepository
from pob.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from pob.infrastructure.persistence.json_session_store import JsonSessionStore

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def data_dir() -> Path:
    override = os.environ.get("POB_DATA_DIR")
    return Path(override) if override else _DEFAULT_DATA_DIR


def page_size() -> int:
    raw = os.environ.get("POB_PAGE_SIZE")
    if not raw:
        return DEFAULT_PAGE_SIZE
    try:
        size = int(raw)
    except ValueError as exc:
        raise ValidationError(f"POB_PAGE_SIZE must be an integer, got {raw!r}") from exc
    if size <= 0:
        raise ValidationError("POB_PAGE_SIZE must be positive")
    return size


def lot_repository() -> JsonLotRepository:
    return JsonLotRepository(data_dir() / "lots.json")


def trigger_dispatcher() -> TriggerDispatcher:
    """A deferred dispatcher: handlers run on ``drain()``, not inside a save."""
    return TriggerDispatcher(deferred=True)


def order_repository(dispatcher: TriggerDispatcher | None = None) -> JsonOrderRepository:
    """Order repository with the totals recalculation trigger registered.

    Pass a *dispatcher* to register further post-commit handlers on it;
    by default a fresh ``trigger_dispatcher()`` is used.
    """
    if dispatcher is None:
        dispatcher = trigger_dispatcher()
    lots = lot_repository()
    repo = JsonOrderRepository(data_dir() / "orders.json", dispatcher)

    def lot_price(lot_id: str) -> Money:
        lot = lots.get_by_id(lot_id)
        if lot is None:
            raise EntityNotFoundError(f"Lot '{lot_id}' not found")
        return lot.unit_price

    dispatcher.register(
        OrderTotalsRecalculator(
            load_line_items=repo.list_line_items,
            load_lot_price=lot_price,
            store_totals=repo.save_totals,
        )
    )
    return repo


def session_store() -> JsonSessionStore:
    return JsonSessionStore(data_dir() / "sessions.json")
