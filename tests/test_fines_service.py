# tests/test_fines_service.py
"""
Tests for fine lookups, waivers and the fine policy.
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest

from core.exceptions import InvalidPolicy, MemberNotFound
from fines.models import FinePolicy
from fines.services import FinePolicyService, FineService
from fines.stats import get_defaulter_list, get_fine_summary
from ledger.models import LedgerEntry
from members.services import MemberService

# Joined mid-January; by 10 September, February to June are past the
# one month grace, aged 6, 5, 4, 3 and 2 months.
JOINED = date(2024, 1, 15)
TODAY = date(2024, 9, 10)


@pytest.fixture
def arrears_member(make_member):
    return make_member(shares=1, rate=Decimal("1000"), joining_date=JOINED)


@pytest.mark.django_db
class TestMemberFine:

    def test_fine_accrues(self, arrears_member, fine_policy):
        accrual = FineService.get_member_fine(arrears_member, today=TODAY)

        assert accrual["months"] == 5
        assert accrual["gross_fine"] == Decimal("1000")
        assert accrual["fine"] == Decimal("1000")

    def test_waiver_reduces_fine(self, arrears_member, fine_policy, primary_account):
        entry = FineService.record_fine_waiver(arrears_member.pk, "300", remarks="Hardship")

        accrual = FineService.get_member_fine(arrears_member, today=TODAY)
        primary_account.refresh_from_db()
        assert entry.kind == "ADJUSTMENT"
        assert entry.treasury_account_id is None
        assert accrual["fine"] == Decimal("700")
        assert accrual["total_reduced"] == Decimal("300.00")
        assert primary_account.balance == Decimal("0.00")

    def test_fine_never_negative(self, arrears_member, fine_policy):
        FineService.record_fine_waiver(arrears_member.pk, "5000")

        assert FineService.get_member_fine(arrears_member, today=TODAY)["fine"] == Decimal("0")

    def test_fine_payments_count_as_reductions(self, arrears_member, fine_policy, primary_account):
        LedgerEntry.objects.create(
            member=arrears_member, kind="DEPOSIT", category=LedgerEntry.FINE_PAYMENT,
            amount=Decimal("400"), period_month=8, period_year=2024, date=date(2024, 8, 1),
            treasury_account=primary_account,
        )

        assert FineService.get_total_reductions(arrears_member) == Decimal("400.00")
        assert FineService.get_member_fine(arrears_member, today=TODAY)["fine"] == Decimal("600")

    def test_waiver_for_unknown_member(self, db):
        with pytest.raises(MemberNotFound):
            FineService.record_fine_waiver(uuid.uuid4(), "100")


@pytest.mark.django_db
class TestFinePolicy:

    def test_upsert_replaces_singleton(self, fine_policy):
        FinePolicyService.upsert_policy(2, "7.5")

        assert FinePolicy.objects.count() == 1
        policy = FinePolicy.get_instance()
        assert policy.grace_period_months == 2
        assert policy.fine_percentage == Decimal("7.50")

    @pytest.mark.parametrize("grace, percentage", [(-1, 5), (1, -5), (None, 5), (1, None)])
    def test_invalid_policy(self, db, grace, percentage):
        with pytest.raises(InvalidPolicy):
            FinePolicyService.upsert_policy(grace, percentage)

    def test_policy_cannot_be_deleted(self, fine_policy):
        fine_policy.delete()
        assert FinePolicy.objects.count() == 1

    def test_longer_grace_lowers_fine(self, arrears_member, fine_policy):
        FinePolicyService.upsert_policy(3, 5)

        accrual = FineService.get_member_fine(arrears_member, today=TODAY)
        # Only the months aged 6, 5 and 4 remain
        assert accrual["months"] == 3
        assert accrual["fine"] == Decimal("750")


@pytest.mark.django_db
class TestDefaulters:

    def test_defaulter_list(self, arrears_member, make_member, fine_policy):
        make_member(joining_date=TODAY)
        inactive = make_member(joining_date=JOINED)
        MemberService.set_status(inactive.pk, "INACTIVE")

        defaulters = get_defaulter_list(today=TODAY)

        assert [row["member_id"] for row in defaulters] == [arrears_member.pk]
        assert defaulters[0]["fine"] == Decimal("1000")

    def test_fine_summary(self, arrears_member, make_member, fine_policy):
        other = make_member(shares=2, joining_date=JOINED)
        FineService.record_fine_waiver(other.pk, "500")

        summary = get_fine_summary(today=TODAY)

        assert summary["defaulter_count"] == 2
        assert summary["total_outstanding"] == Decimal("2500")
        assert summary["total_overdue_months"] == 10
