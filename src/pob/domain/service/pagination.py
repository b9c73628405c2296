"""Domain service: Pagination & Filter Engine.

Derives the visible page of selection records from the Selection Store.
The engine holds only view-state (applied filter, page index); the
records themselves always come from the store, so quantities entered on
one page are still there when the user comes back to it.
"""

from __future__ import annotations

import math

from pob.domain.exceptions import ValidationError
from pob.domain.model.selection import SelectionRecord, SelectionStore

DEFAULT_PAGE_SIZE = 5
NO_FILTER = "off"


def normalize_filter(text: str | None) -> str | None:
    """Map the 'no filter' spellings (None, blank, 'off') to None."""
    if text is None:
        return None
    text = text.strip()
    if not text or text.lower() == NO_FILTER:
        return None
    return text


class Paginator:
    """Filterable, 1-based pagination over a SelectionStore.

    Invariant: ``page_index`` is always within ``[1, max(1, page_count())]``
    after any navigation or filter application.
    """

    def __init__(
        self,
        store: SelectionStore,
        page_size: int = DEFAULT_PAGE_SIZE,
        category_filter: str | None = None,
        page_index: int = 1,
    ) -> None:
        if page_size <= 0:
            raise ValidationError("Page size must be positive")
        self._store = store
        self._page_size = page_size
        self._category_filter = normalize_filter(category_filter)
        self._page_index = page_index
        self._clamp()

    # --- State ----------------------------------------------------------------

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def page_index(self) -> int:
        return self._page_index

    @property
    def category_filter(self) -> str | None:
        """The filter currently in effect (None means all categories)."""
        return self._category_filter

    def apply_filter(self, text: str | None) -> None:
        """Make *text* the active category filter and re-derive the page."""
        self._category_filter = normalize_filter(text)
        self._clamp()

    # --- Derived views --------------------------------------------------------

    def visible_records(self) -> list[SelectionRecord]:
        records = self._store.values()
        if self._category_filter is None:
            return records
        return [r for r in records if r.lot.category == self._category_filter]

    def page_count(self) -> int:
        return math.ceil(len(self.visible_records()) / self._page_size)

    def current_page(self) -> list[SelectionRecord]:
        start = (self._page_index - 1) * self._page_size
        return self.visible_records()[start:start + self._page_size]

    def categories(self) -> list[str]:
        """Distinct categories of the store's records, in first-seen order."""
        seen: dict[str, None] = {}
        for record in self._store.values():
            seen.setdefault(record.lot.category, None)
        return list(seen)

    # --- Navigation -----------------------------------------------------------

    def first(self) -> None:
        self._page_index = 1

    def last(self) -> None:
        self._page_index = max(1, self.page_count())

    def next(self) -> None:
        self._page_index += 1
        self._clamp()

    def previous(self) -> None:
        self._page_index -= 1
        self._clamp()

    def is_previous_disabled(self) -> bool:
        return self._page_index <= 1

    def is_next_disabled(self) -> bool:
        return self._page_index >= self.page_count()

    # --- Internal helpers -----------------------------------------------------

    def _clamp(self) -> None:
        # A shrinking result set caps the index at its last valid page.
        self._page_index = min(max(1, self._page_index), max(1, self.page_count()))
