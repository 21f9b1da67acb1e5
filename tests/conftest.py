# tests/conftest.py
"""
Pytest fixtures for the society ledger tests.
"""

import itertools
from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta

from core.utils import get_sacco_today
from members.services import MemberService
from treasury.services import TreasuryAccountService
from fines.services import FinePolicyService
from ledger.services import CategoryService


_national_ids = itertools.count(1000)


# =============================================================================
# Treasury Fixtures
# =============================================================================

@pytest.fixture
def primary_account(db):
    """Primary account with a zero balance."""
    return TreasuryAccountService.create_account(
        bank_name="Sonali Bank",
        account_number="SB-0001",
        account_type="SAVINGS",
        account_holder_names=["President", "Treasurer"],
        is_primary=True,
    )


@pytest.fixture
def funded_account(db):
    """Secondary account opened with 100,000."""
    return TreasuryAccountService.create_account(
        bank_name="Dutch-Bangla Bank",
        account_number="DBBL-0002",
        account_type="CURRENT",
        account_holder_names=["Treasurer"],
        opening_balance=Decimal("100000"),
    )


# =============================================================================
# Member Fixtures
# =============================================================================

@pytest.fixture
def today(db):
    return get_sacco_today()


@pytest.fixture
def make_member(db):
    """Factory for registered members."""
    def _make(shares=1, rate=Decimal("1000"), joining_date=None, branch="Dhaka", email=None, **kwargs):
        number = next(_national_ids)
        return MemberService.register_member(
            full_name=kwargs.pop("full_name", f"Member {number}"),
            national_id=f"NID-{number}",
            joining_date=joining_date or get_sacco_today(),
            shares=shares,
            monthly_subscription_per_share=rate,
            email=email,
            branch=branch,
            **kwargs,
        )
    return _make


@pytest.fixture
def members(make_member):
    """Three new members holding two shares each (no fines yet)."""
    return [make_member(shares=2, email=f"m{i}@example.com") for i in range(3)]


@pytest.fixture
def late_member(make_member, today):
    """Member who joined eight months ago and never paid."""
    return make_member(shares=1, joining_date=today - relativedelta(months=8))


# =============================================================================
# Category Fixtures
# =============================================================================

@pytest.fixture
def categories(db):
    """Income and expense categories used across the ledger tests."""
    registered = {}
    for name in ("donation", "bank_interest", "fine_payment"):
        registered[name] = CategoryService.create_category(name, "DEPOSIT")
    for name in ("office_rent", "stationery", "misc", "audit_fee", "rent"):
        registered[name] = CategoryService.create_category(name, "EXPENSE")
    return registered


# =============================================================================
# Policy Fixtures
# =============================================================================

@pytest.fixture
def fine_policy(db):
    """Default policy: one month grace, 5%."""
    return FinePolicyService.upsert_policy(1, Decimal("5"))


@pytest.fixture
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path
    return tmp_path
