"""Application service: Add Lot use case."""

from __future__ import annotations

from pob.domain.exceptions import ValidationError
from pob.domain.model.lot import Lot
from pob.domain.model.value_objects import Money
from pob.domain.repository.lot_repository import LotRepository


class AddLotHandler:

    def __init__(self, lot_repo: LotRepository) -> None:
        self._lot_repo = lot_repo

    def handle(self, name: str, category: str, price: str, available: int) -> Lot:
        """Add a new lot to the catalog."""
        if not name or not name.strip():
            raise ValidationError("Lot name is required")
        if not category or not category.strip():
            raise ValidationError("Lot category is required")

        # Auto-assign ID based on existing numeric lot IDs
        numeric = [int(lot.id) for lot in self._lot_repo.list_all() if lot.id.isdigit()]
        next_id = str(max(numeric, default=0) + 1)

        lot = Lot(
            id=next_id,
            name=name.strip(),
            category=category.strip(),
            unit_price=Money.of(price),
            available_units=available,
        )
        self._lot_repo.save(lot)
        return lot
