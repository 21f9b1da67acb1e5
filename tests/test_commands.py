# tests/test_commands.py
"""
Tests for the management commands.
"""

from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.exceptions import ValidationError
from django.core.management.base import CommandError

from core.models import SaccoConfiguration
from fines.models import FinePolicy
from investments.models import Investment
from investments.services import InvestmentService
from ledger.models import LedgerEntry
from notifications.models import Notification
from treasury.models import TreasuryAccount


def run(command, *args, **kwargs):
    out = StringIO()
    call_command(command, *args, stdout=out, stderr=StringIO(), **kwargs)
    return out.getvalue()


@pytest.mark.django_db
class TestInitializeSociety:

    def test_full_setup(self):
        output = run(
            "initialize_society", name="Shapla Samity", currency="bdt", grace=2,
            fine_percentage=Decimal("4"), bank="Sonali Bank", account_number="0012345",
            opening_balance=Decimal("50000"),
        )

        config = SaccoConfiguration.get_instance()
        policy = FinePolicy.get_instance()
        account = TreasuryAccount.get_primary()
        assert config.society_name == "Shapla Samity"
        assert config.currency_code == "BDT"
        assert policy.grace_period_months == 2
        assert account.balance == Decimal("50000.00")
        assert "Society initialized" in output

    def test_dry_run(self):
        run("initialize_society", "--dry-run", bank="Sonali Bank", account_number="1")
        assert TreasuryAccount.objects.count() == 0

    def test_bank_without_number(self):
        with pytest.raises(CommandError):
            run("initialize_society", bank="Sonali Bank")

    def test_invalid_policy(self):
        with pytest.raises(CommandError):
            run("initialize_society", grace=-1)

    def test_unknown_currency_is_rejected(self):
        with pytest.raises(CommandError):
            run("initialize_society", currency="zzz")

        assert SaccoConfiguration.get_instance().currency_code == "BDT"

    def test_currency_validation_on_model(self):
        config = SaccoConfiguration.get_instance()
        config.currency_code = "ZZZ"
        with pytest.raises(ValidationError):
            config.full_clean()

        config.currency_code = "USD"
        config.full_clean()

    def test_currency_choices(self):
        choices = dict(SaccoConfiguration.get_currency_choices())
        assert choices["BDT"].endswith("(BDT)")
        assert "ZZZ" not in choices


@pytest.mark.django_db
class TestReconcileLedger:

    def test_clean_ledger(self, funded_account):
        assert "All cached values match" in run("reconcile_ledger")

    def test_fail_on_drift(self, funded_account):
        TreasuryAccount.objects.filter(pk=funded_account.pk).update(balance=Decimal("0"))
        with pytest.raises(CommandError):
            run("reconcile_ledger", "--fail-on-drift")

    def test_fix(self, funded_account):
        TreasuryAccount.objects.filter(pk=funded_account.pk).update(balance=Decimal("0"))

        output = run("reconcile_ledger", "--fix")

        funded_account.refresh_from_db()
        assert funded_account.balance == Decimal("100000.00")
        assert "Fixed 1" in output


@pytest.mark.django_db
class TestMonthlySummaries:

    def test_sends_to_active_members(self, members, mailoutbox):
        output = run("send_monthly_summaries")

        assert Notification.objects.count() == 3
        assert len(mailoutbox) == 3
        assert "Sent 3" in output

    def test_dry_run(self, members):
        output = run("send_monthly_summaries", "--dry-run")

        assert Notification.objects.count() == 0
        assert members[0].member_number in output


@pytest.mark.django_db
class TestLinkInvestmentEntries:

    def test_links_by_name(self, funded_account):
        investment = InvestmentService.fund_investment("Fish Farm", "1000", funded_account.pk)
        LedgerEntry.objects.filter(investment=investment).update(investment=None)
        Investment.objects.create(
            project_name="Shop", capital_amount=Decimal("10"), date=investment.date
        )

        run("link_investment_entries", "--dry-run")
        assert not LedgerEntry.objects.filter(investment=investment).exists()

        run("link_investment_entries")
        assert LedgerEntry.objects.filter(investment=investment).count() == 1
