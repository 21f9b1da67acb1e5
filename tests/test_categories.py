# tests/test_categories.py
"""
Tests for the income and expense category registry.
"""

import uuid
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from core.exceptions import CategoryNotFound
from ledger.models import Category, LedgerEntry
from ledger.services import CategoryService, IncomeService, ExpenseService


@pytest.mark.django_db
class TestCategoryRegistry:

    def test_create(self):
        category = CategoryService.create_category(
            " utilities ", "EXPENSE", subcategories=[" electricity", "water "]
        )

        assert category.name == "utilities"
        assert category.subcategories == ["electricity", "water"]
        assert str(category) == "utilities (Expense)"

    def test_duplicate_name(self, categories):
        with pytest.raises(ValidationError):
            CategoryService.create_category("donation", "DEPOSIT")

    def test_invalid_type(self):
        with pytest.raises(ValidationError):
            CategoryService.create_category("gift", "TRANSFER")

    def test_engine_category_is_reserved(self):
        with pytest.raises(ValidationError) as exc:
            CategoryService.create_category(LedgerEntry.MONTHLY_DEPOSIT, "DEPOSIT")
        assert "name" in exc.value.message_dict

        category = Category(name=LedgerEntry.INTERNAL_TRANSFER, category_type="EXPENSE")
        with pytest.raises(ValidationError):
            category.full_clean()

    def test_blank_subcategory_rejected(self):
        with pytest.raises(ValidationError):
            CategoryService.create_category("utilities", "EXPENSE", subcategories=["gas", " "])

    def test_update(self, categories):
        category = CategoryService.update_category(
            categories["misc"].pk, subcategories=["tea"], is_active=False
        )

        category.refresh_from_db()
        assert category.subcategories == ["tea"]
        assert category.is_active is False

    def test_update_unknown_field(self, categories):
        with pytest.raises(ValidationError):
            CategoryService.update_category(categories["misc"].pk, balance=Decimal("1"))

    def test_active_categories(self, categories):
        CategoryService.update_category(categories["rent"].pk, is_active=False)

        names = {c.name for c in CategoryService.get_active_categories("EXPENSE")}
        assert names == {"office_rent", "stationery", "misc", "audit_fee"}

    def test_delete(self, categories):
        CategoryService.delete_category(categories["misc"].pk)
        assert not Category.objects.filter(name="misc").exists()

    def test_unknown_category(self, db):
        with pytest.raises(CategoryNotFound):
            CategoryService.get_category(uuid.uuid4())
        with pytest.raises(CategoryNotFound):
            CategoryService.delete_category(uuid.uuid4())


@pytest.mark.django_db
class TestCategoryChecks:

    def test_unregistered_category(self, funded_account, categories):
        with pytest.raises(ValidationError) as exc:
            IncomeService.add_income("100", funded_account.pk, "lottery")
        assert "category" in exc.value.message_dict
        assert LedgerEntry.objects.filter(category="lottery").count() == 0

    def test_inactive_category(self, funded_account, categories):
        CategoryService.update_category(categories["stationery"].pk, is_active=False)

        with pytest.raises(ValidationError):
            ExpenseService.add_expense("100", funded_account.pk, "stationery")

        funded_account.refresh_from_db()
        assert funded_account.balance == Decimal("100000.00")

    def test_wrong_type(self, funded_account, categories):
        with pytest.raises(ValidationError):
            IncomeService.add_income("100", funded_account.pk, "office_rent")
        with pytest.raises(ValidationError):
            ExpenseService.add_expense("100", funded_account.pk, "donation")

    def test_subcategory_must_be_listed(self, funded_account, categories):
        CategoryService.update_category(categories["office_rent"].pk, subcategories=["head office"])

        with pytest.raises(ValidationError) as exc:
            ExpenseService.add_expense("100", funded_account.pk, "office_rent", subcategory="branch")
        assert "subcategory" in exc.value.message_dict

        entry = ExpenseService.add_expense(
            "100", funded_account.pk, "office_rent", subcategory="head office"
        )
        assert entry.subcategory == "head office"

    def test_any_subcategory_when_none_listed(self, funded_account, categories):
        entry = IncomeService.add_income("100", funded_account.pk, "donation", subcategory="Eid")
        assert entry.subcategory == "Eid"
