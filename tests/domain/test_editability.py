"""Unit tests for the field editability rules."""

import pytest

from pob.domain.exceptions import ValidationError
from pob.domain.model.order import OrderStatus
from pob.domain.service.editability import FieldEditability, field_editability


class TestFieldEditability:

    def test_transient_order_fully_editable(self):
        assert field_editability(None) == FieldEditability(True, True, True, True)

    def test_draft_fully_editable(self):
        assert field_editability(OrderStatus.DRAFT) == FieldEditability(True, True, True, True)

    def test_open_locks_budget_only(self):
        edit = field_editability(OrderStatus.OPEN)
        assert edit.name and edit.status and edit.quantities
        assert not edit.budget

    def test_closed_locks_everything(self):
        edit = field_editability(OrderStatus.CLOSED)
        assert not any((edit.name, edit.budget, edit.status, edit.quantities))


class TestOrderStatusParse:

    def test_case_insensitive(self):
        assert OrderStatus.parse("open") is OrderStatus.OPEN

    def test_unknown_rejected(self):
        with pytest.raises(ValidationError, match="Unknown order status"):
            OrderStatus.parse("SHIPPED")
