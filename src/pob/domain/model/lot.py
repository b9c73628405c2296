"""Lot: a purchasable batch of a product.

Lots are owned by the catalog. Within one builder session they are
read-only snapshots: price and availability never change under the user.
"""

from __future__ import annotations

from dataclasses import dataclass

from pob.domain.exceptions import ValidationError
from pob.domain.model.value_objects import Money


@dataclass(frozen=True)
class Lot:
    """A product batch with a category, a unit price and available units."""

    id: str
    name: str
    category: str
    unit_price: Money
    available_units: int = 0

    def __post_init__(self) -> None:
        if self.available_units < 0:
            raise ValidationError(
                f"Lot '{self.name}' cannot have negative available units"
            )

    @property
    def is_available(self) -> bool:
        return self.available_units > 0
