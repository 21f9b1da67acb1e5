# tests/test_treasury.py
"""
Tests for the treasury account registry.
"""

import uuid
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from core.exceptions import PrimaryAccountNotConfigured, TreasuryAccountNotFound
from ledger.models import LedgerEntry
from treasury.models import TreasuryAccount
from treasury.services import TreasuryAccountService


def open_account(number, **kwargs):
    return TreasuryAccountService.create_account(
        bank_name=kwargs.pop("bank_name", "City Bank"),
        account_number=number,
        account_type=kwargs.pop("account_type", "SAVINGS"),
        **kwargs,
    )


@pytest.mark.django_db
class TestPrimaryAccount:

    def test_no_primary(self):
        open_account("CB-1")
        with pytest.raises(PrimaryAccountNotConfigured):
            TreasuryAccountService.get_primary_account()

    def test_new_primary_replaces_old(self, primary_account):
        second = open_account("CB-2", is_primary=True)

        primary_account.refresh_from_db()
        assert not primary_account.is_primary
        assert TreasuryAccountService.get_primary_account().pk == second.pk
        assert TreasuryAccount.objects.filter(is_primary=True).count() == 1

    def test_set_primary(self, primary_account, funded_account):
        TreasuryAccountService.set_primary(funded_account.pk)

        assert TreasuryAccount.objects.filter(is_primary=True).count() == 1
        assert TreasuryAccount.get_primary().pk == funded_account.pk

    def test_update_routes_primary_flag(self, primary_account, funded_account):
        TreasuryAccountService.update_account(funded_account.pk, is_primary=True)

        primary_account.refresh_from_db()
        assert not primary_account.is_primary
        assert TreasuryAccount.objects.filter(is_primary=True).count() == 1

    def test_primary_missing_is_not_found(self):
        with pytest.raises(TreasuryAccountNotFound):
            TreasuryAccountService.get_primary_account()


@pytest.mark.django_db
class TestAccountLifecycle:

    def test_opening_balance_is_ledgered(self, funded_account):
        entry = LedgerEntry.objects.get(treasury_account=funded_account)

        assert funded_account.balance == Decimal("100000.00")
        assert entry.category == LedgerEntry.OPENING_BALANCE
        assert entry.kind == "DEPOSIT"
        assert entry.amount == Decimal("100000.00")

    def test_negative_opening_balance(self):
        account = open_account("CB-3", opening_balance="-250")

        entry = LedgerEntry.objects.get(treasury_account=account)
        assert account.balance == Decimal("-250.00")
        assert entry.kind == "EXPENSE"
        assert entry.amount == Decimal("250.00")

    def test_zero_opening_balance_writes_nothing(self):
        open_account("CB-4")
        assert LedgerEntry.objects.count() == 0

    def test_duplicate_account_number(self, primary_account):
        with pytest.raises(ValidationError):
            open_account("SB-0001")

    def test_invalid_account_type(self):
        with pytest.raises(ValidationError):
            open_account("CB-5", account_type="CRYPTO")

    def test_balance_cannot_be_edited(self, funded_account):
        with pytest.raises(ValidationError):
            TreasuryAccountService.update_account(funded_account.pk, balance=Decimal("1"))

    def test_unknown_field_rejected(self, funded_account):
        with pytest.raises(ValidationError):
            TreasuryAccountService.update_account(funded_account.pk, created_at=None)

    def test_descriptive_update(self, funded_account):
        account = TreasuryAccountService.update_account(
            funded_account.pk, bank_name="DBBL", account_holder_names=["Treasurer", "Secretary"]
        )

        assert account.bank_name == "DBBL"
        assert account.account_holder_names == ["Treasurer", "Secretary"]
        assert account.balance == Decimal("100000.00")

    def test_delete_keeps_entries(self, funded_account):
        TreasuryAccountService.delete_account(funded_account.pk)

        entry = LedgerEntry.objects.get(category=LedgerEntry.OPENING_BALANCE)
        assert entry.treasury_account_id is None

    def test_unknown_account(self, db):
        with pytest.raises(TreasuryAccountNotFound):
            TreasuryAccountService.get_account(uuid.uuid4())

    def test_malformed_id(self, db):
        with pytest.raises(TreasuryAccountNotFound):
            TreasuryAccountService.get_account("not-a-uuid")

    def test_adjust_missing_account_is_noop(self, db):
        assert TreasuryAccountService.adjust_balance(uuid.uuid4(), Decimal("10")) == 0
