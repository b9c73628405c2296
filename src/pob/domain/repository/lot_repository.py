"""Abstract repository for Lot records.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory) live in the
infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pob.domain.model.lot import Lot


class LotRepository(ABC):

    @abstractmethod
    def list_all(self) -> list[Lot]:
        """Return every lot in catalog order."""

    @abstractmethod
    def get_by_id(self, lot_id: str) -> Lot | None:
        """Return a lot by its ID, or None if not found."""

    @abstractmethod
    def save(self, lot: Lot) -> None:
        """Persist a new or updated lot."""
