# tests/test_reversal.py
"""
Tests for deleting ledger entries and undoing their effects.
"""

import uuid
from decimal import Decimal

import pytest

from core.exceptions import LedgerEntryNotFound
from fines.services import FineService
from investments.services import InvestmentService
from ledger.models import LedgerEntry
from ledger.services import (
    DepositService, ExpenseService, IncomeService, ReversalService, TransferService,
)
from members.services import MemberService
from treasury.services import TreasuryAccountService


pytestmark = pytest.mark.usefixtures("categories")


@pytest.mark.django_db
class TestReverseCashEntries:

    def test_monthly_deposit(self, primary_account, members):
        DepositService.process_deposit_batch([members[0].pk, members[1].pk])
        entry = LedgerEntry.objects.get(member=members[0], category=LedgerEntry.MONTHLY_DEPOSIT)

        ReversalService.delete_ledger_entry(entry.pk)

        primary_account.refresh_from_db()
        members[0].refresh_from_db()
        members[1].refresh_from_db()
        assert primary_account.balance == Decimal("2000.00")
        assert members[0].lifetime_deposited == Decimal("0.00")
        assert members[1].lifetime_deposited == Decimal("2000.00")
        assert not LedgerEntry.objects.filter(pk=entry.pk).exists()

    def test_expense(self, funded_account):
        entry = ExpenseService.add_expense("750", funded_account.pk, "stationery")

        ReversalService.delete_ledger_entry(entry.pk)

        funded_account.refresh_from_db()
        assert funded_account.balance == Decimal("100000.00")

    def test_income(self, primary_account):
        entry = IncomeService.add_income("1200", primary_account.pk, "donation")

        deleted = ReversalService.delete_ledger_entry(entry.pk)

        primary_account.refresh_from_db()
        assert primary_account.balance == Decimal("0.00")
        assert deleted.amount == Decimal("1200.00")

    def test_transfer(self, funded_account, primary_account):
        entry = TransferService.transfer_balance(funded_account.pk, primary_account.pk, "30000")

        ReversalService.delete_ledger_entry(entry.pk)

        funded_account.refresh_from_db()
        primary_account.refresh_from_db()
        assert funded_account.balance == Decimal("100000.00")
        assert primary_account.balance == Decimal("0.00")

    def test_missing_entry(self, db):
        with pytest.raises(LedgerEntryNotFound):
            ReversalService.delete_ledger_entry(uuid.uuid4())

    def test_deleted_account_is_skipped(self, primary_account, funded_account):
        entry = IncomeService.add_income("500", funded_account.pk, "bank_interest")
        TreasuryAccountService.delete_account(funded_account.pk)

        ReversalService.delete_ledger_entry(entry.pk)

        primary_account.refresh_from_db()
        assert primary_account.balance == Decimal("0.00")
        assert not LedgerEntry.objects.filter(pk=entry.pk).exists()

    def test_transfer_with_deleted_source(self, funded_account, primary_account):
        entry = TransferService.transfer_balance(funded_account.pk, primary_account.pk, "1000")
        TreasuryAccountService.delete_account(funded_account.pk)

        ReversalService.delete_ledger_entry(entry.pk)

        primary_account.refresh_from_db()
        assert primary_account.balance == Decimal("0.00")


@pytest.mark.django_db
class TestReverseMemberEntries:

    def test_deposit_of_deleted_member(self, primary_account, members):
        DepositService.process_deposit_batch([m.pk for m in members])
        entry = LedgerEntry.objects.get(member=members[0], category=LedgerEntry.MONTHLY_DEPOSIT)
        MemberService.delete_member(members[0].pk)

        ReversalService.delete_ledger_entry(entry.pk)

        primary_account.refresh_from_db()
        members[1].refresh_from_db()
        assert primary_account.balance == Decimal("4000.00")
        assert members[1].lifetime_deposited == Decimal("2000.00")
        assert not LedgerEntry.objects.filter(pk=entry.pk).exists()

    def test_fine_payment(self, primary_account, late_member, fine_policy):
        fine = FineService.get_member_fine(late_member)["fine"]
        assert fine > 0
        DepositService.process_deposit_batch([late_member.pk], fine_payer_ids=[late_member.pk])
        entry = LedgerEntry.objects.get(member=late_member, category=LedgerEntry.FINE_PAYMENT)
        assert entry.amount == fine
        assert FineService.get_member_fine(late_member)["fine"] == 0

        ReversalService.delete_ledger_entry(entry.pk)

        primary_account.refresh_from_db()
        late_member.refresh_from_db()
        assert primary_account.balance == Decimal("1000.00")
        assert late_member.lifetime_deposited == Decimal("1000.00")
        assert FineService.get_member_fine(late_member)["fine"] == fine

    def test_whole_batch_with_fine_payers(self, primary_account, members, late_member, fine_policy):
        fine = FineService.get_member_fine(late_member)["fine"]
        payers = [members[0], late_member]
        result = DepositService.process_deposit_batch(
            [m.pk for m in members] + [late_member.pk],
            fine_payer_ids=[m.pk for m in payers],
        )
        assert result["fine_total"] == fine

        for entry in result["entries"]:
            ReversalService.delete_ledger_entry(entry.pk)

        primary_account.refresh_from_db()
        assert primary_account.balance == Decimal("0.00")
        for member in members + [late_member]:
            member.refresh_from_db()
            assert member.lifetime_deposited == Decimal("0.00")
        assert FineService.get_member_fine(late_member)["fine"] == fine
        assert LedgerEntry.objects.filter(member__isnull=False).count() == 0


@pytest.mark.django_db
class TestReverseInvestmentEntries:

    def test_capital_cancels_investment(self, funded_account):
        investment = InvestmentService.fund_investment("Poultry", "25000", funded_account.pk)
        entry = LedgerEntry.objects.get(kind="INVESTMENT_CAPITAL", investment=investment)

        ReversalService.delete_ledger_entry(entry.pk)

        investment.refresh_from_db()
        funded_account.refresh_from_db()
        assert investment.status == "CANCELLED"
        assert funded_account.balance == Decimal("100000.00")

    def test_profit(self, funded_account):
        investment = InvestmentService.fund_investment("Poultry", "25000", funded_account.pk)
        entry = InvestmentService.record_investment_outcome(investment.pk, "3000", "profit", funded_account.pk)

        ReversalService.delete_ledger_entry(entry.pk)

        investment.refresh_from_db()
        funded_account.refresh_from_db()
        assert investment.cumulative_profit == Decimal("0.00")
        assert funded_account.balance == Decimal("75000.00")

    def test_expense(self, funded_account):
        investment = InvestmentService.fund_investment("Poultry", "25000", funded_account.pk)
        entry = InvestmentService.record_investment_outcome(investment.pk, "800", "expense", funded_account.pk)

        ReversalService.delete_ledger_entry(entry.pk)

        investment.refresh_from_db()
        assert investment.cumulative_profit == Decimal("0.00")

    def test_liquidated_investment_entry(self, funded_account, primary_account):
        investment = InvestmentService.fund_investment("Poultry", "25000", funded_account.pk)
        entry = InvestmentService.record_investment_outcome(investment.pk, "3000", "profit", primary_account.pk)
        InvestmentService.liquidate_investment(investment.pk)

        ReversalService.delete_ledger_entry(entry.pk)

        primary_account.refresh_from_db()
        assert primary_account.balance == Decimal("0.00")
