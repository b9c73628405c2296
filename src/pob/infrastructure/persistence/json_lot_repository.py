"""JSON-file-backed implementation of LotRepository."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

from pob.domain.model.lot import Lot
from pob.domain.model.value_objects import Money
from pob.domain.repository.lot_repository import LotRepository
from pob.infrastructure.persistence.atomic_file import ensure_json_file, write_json_atomic


class JsonLotRepository(LotRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- LotRepository interface ----------------------------------------------

    def list_all(self) -> list[Lot]:
        return list(self._load().values())

    def get_by_id(self, lot_id: str) -> Lot | None:
        return self._load().get(lot_id)

    def save(self, lot: Lot) -> None:
        lots = self._load()
        lots[lot.id] = lot
        self._persist(lots)

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, Lot]:
        raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        return {
            item["id"]: Lot(
                id=item["id"],
                name=item["name"],
                category=item["category"],
                unit_price=Money(Decimal(item["unit_price"]), item.get("currency", "USD")),
                available_units=item.get("available_units", 0),
            )
            for item in raw
        }

    def _persist(self, lots: dict[str, Lot]) -> None:
        raw = [
            {
                "id": lot.id,
                "name": lot.name,
                "category": lot.category,
                "unit_price": str(lot.unit_price.amount),
                "currency": lot.unit_price.currency,
                "available_units": lot.available_units,
            }
            for lot in lots.values()
        ]
        write_json_atomic(self._file_path, raw)

    def _ensure_file(self) -> None:
        ensure_json_file(self._file_path, [])
