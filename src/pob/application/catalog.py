"""Lot Catalog View: a load-once snapshot of the lot catalog."""

from __future__ import annotations

import logging

from pob.domain.exceptions import EntityNotFoundError
from pob.domain.model.lot import Lot
from pob.domain.repository.lot_repository import LotRepository

logger = logging.getLogger(__name__)


class LotCatalogView:
    """Read-only lots, queried exactly once per builder lifetime.

    Repository failures propagate: a builder without a catalog has
    nothing sensible to render.
    """

    def __init__(self, lots: list[Lot]) -> None:
        self._lots = tuple(lots)
        self._by_id = {lot.id: lot for lot in self._lots}

    @classmethod
    def load(cls, lot_repo: LotRepository) -> LotCatalogView:
        lots = lot_repo.list_all()
        logger.debug("Loaded %d lots into the catalog view", len(lots))
        return cls(lots)

    @property
    def lots(self) -> tuple[Lot, ...]:
        return self._lots

    def get(self, lot_id: str) -> Lot:
        lot = self._by_id.get(lot_id)
        if lot is None:
            raise EntityNotFoundError(f"Lot '{lot_id}' not found")
        return lot

    def __len__(self) -> int:
        return len(self._lots)
